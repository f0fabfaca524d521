from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core import get_db
from wkn.runtime.verification import VerificationStore, get_verification_store
from wkn.schemas.auth import (
    LoginIn,
    LoginOut,
    MessageOut,
    ResetPasswordIn,
    SendCodeIn,
    SignupIn,
    SuccessOut,
    UserDataOut,
    VerifyCodeIn,
    VerifyCodeOut,
    WithdrawIn,
)
from wkn.services.auth_service import AuthService
from wkn.services.mail_service import MailSender, get_mail_sender

router = APIRouter()


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    codes: VerificationStore = Depends(get_verification_store),
    mailer: MailSender = Depends(get_mail_sender),
) -> AuthService:
    return AuthService(db, codes=codes, mailer=mailer)


@router.post("/signup", response_model=SuccessOut)
async def signup(body: SignupIn, svc: AuthService = Depends(get_auth_service)) -> SuccessOut:
    await svc.signup(username=body.username, password=body.password, email=body.email)
    return SuccessOut(success=True)


@router.post("/login", response_model=LoginOut)
async def login(body: LoginIn, svc: AuthService = Depends(get_auth_service)) -> LoginOut:
    email = await svc.login(email=body.email, password=body.password)
    return LoginOut(email=email)


@router.post("/logout", response_model=MessageOut)
async def logout() -> MessageOut:
    # sessions live on the client; nothing to tear down here
    return MessageOut(message="logged out")


@router.post("/send-code", response_model=MessageOut)
async def send_code(body: SendCodeIn, svc: AuthService = Depends(get_auth_service)) -> MessageOut:
    await svc.send_code(body.email)
    return MessageOut(message="verification code sent")


@router.post("/verify-code", response_model=VerifyCodeOut)
async def verify_code(body: VerifyCodeIn, svc: AuthService = Depends(get_auth_service)) -> VerifyCodeOut:
    svc.verify_code(body.email, body.code)
    return VerifyCodeOut(message="email verified", verified=True)


@router.post("/reset-password", response_model=MessageOut)
async def reset_password(body: ResetPasswordIn, svc: AuthService = Depends(get_auth_service)) -> MessageOut:
    await svc.reset_password(body.email, body.newPassword)
    return MessageOut(message="password reset")


@router.get("/userdata", response_model=UserDataOut)
async def userdata(email: str, svc: AuthService = Depends(get_auth_service)) -> UserDataOut:
    return UserDataOut(username=await svc.get_username(email))


@router.post("/confirmPasswordAndWithdraw", response_model=SuccessOut)
async def confirm_password_and_withdraw(
    body: WithdrawIn,
    svc: AuthService = Depends(get_auth_service),
) -> SuccessOut:
    await svc.withdraw(email=body.email, password=body.password)
    return SuccessOut(success=True)
