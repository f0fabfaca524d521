from __future__ import annotations

import logging
import secrets

import anyio
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core import settings
from wkn.core.db import unit_of_work
from wkn.core.errors import AuthError, DomainError, NotFoundError, StorageError, ValidationError
from wkn.repos.chat_repo import ChatRepo
from wkn.repos.post_repo import CommentRepo, PostRepo
from wkn.repos.user_repo import UserRepo
from wkn.runtime.verification import VerificationStore
from wkn.services.mail_service import MailSender

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def hash_password(password: str) -> str:
    # bcrypt work runs in a worker thread, never on the event loop
    return await anyio.to_thread.run_sync(pwd_context.hash, password)


async def verify_password(password: str, password_hash: str) -> bool:
    return await anyio.to_thread.run_sync(pwd_context.verify, password, password_hash)


def generate_code() -> str:
    """Six-digit numeric code, never starting with zero."""
    return str(100000 + secrets.randbelow(900000))


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(f"missing required field(s): {', '.join(missing)}")


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        *,
        codes: VerificationStore | None = None,
        mailer: MailSender | None = None,
    ):
        self.db = db
        self.users = UserRepo(db)
        self.posts = PostRepo(db)
        self.comments = CommentRepo(db)
        self.chat = ChatRepo(db)
        self.codes = codes
        self.mailer = mailer

    async def signup(self, *, username: str, password: str, email: str) -> None:
        _require(username=username, password=password, email=email)
        if await self.users.exists(username=username, email=email):
            raise ValidationError("username or email already registered")
        password_hash = await hash_password(password)
        try:
            async with unit_of_work(self.db):
                await self.users.create(username=username, password_hash=password_hash, email=email)
        except StorageError as e:
            # lost a race with a concurrent signup for the same name or email
            if isinstance(e.__cause__, IntegrityError):
                raise ValidationError("username or email already registered") from e
            raise
        logger.info("signup: %s", username)

    async def login(self, *, email: str, password: str) -> str:
        user = await self.users.get_by_email(email)
        if user is None or not await verify_password(password, user["password"]):
            logger.info("login failed for %s", email)
            raise AuthError("invalid email or password")
        logger.info("login: %s", user["username"])
        return user["email"]

    async def get_username(self, email: str) -> str:
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFoundError("user not found")
        return user["username"]

    # ---------- email verification ----------

    async def send_code(self, email: str) -> None:
        _require(email=email)
        code = generate_code()
        self.codes.put_code(email, code)
        try:
            await self.mailer.send(
                to=email,
                subject=settings.MAIL_SUBJECT,
                text=f"Your verification code is {code}.",
            )
        except Exception as e:
            self.codes.discard_code(email)
            logger.error("failed to send verification code to %s: %s", email, e)
            raise DomainError("failed to send verification code") from e

    def verify_code(self, email: str, code: str) -> None:
        if not self.codes.confirm(email, code):
            raise AuthError("verification code does not match", status_code=400)

    async def reset_password(self, email: str, new_password: str) -> None:
        if not self.codes.is_verified(email):
            raise AuthError("email is not verified", status_code=400)
        _require(newPassword=new_password)
        password_hash = await hash_password(new_password)
        async with unit_of_work(self.db):
            await self.users.update_password(email, password_hash)
        self.codes.clear_verified(email)

    # ---------- account removal ----------

    async def withdraw(self, *, email: str, password: str) -> None:
        """
        Remove an account and everything it owns: its comments, comments on
        its posts, its posts, its chat messages and the user row. All five
        deletes commit together or not at all.
        """
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFoundError("no account with that email")
        if not await verify_password(password, user["password"]):
            raise AuthError("password does not match")

        async with unit_of_work(self.db):
            await self.comments.delete_by_author(email)
            await self.comments.delete_on_posts_by(email)
            await self.posts.delete_by_author(email)
            await self.chat.delete_by_username(user["username"])
            await self.users.delete_by_email(email)
        logger.info("account withdrawn: %s", email)
