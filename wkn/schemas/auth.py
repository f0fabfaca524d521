from pydantic import BaseModel


class SignupIn(BaseModel):
    username: str
    password: str
    email: str

class LoginIn(BaseModel):
    email: str
    password: str

class LoginOut(BaseModel):
    email: str

class SendCodeIn(BaseModel):
    email: str

class VerifyCodeIn(BaseModel):
    email: str
    code: str

class VerifyCodeOut(BaseModel):
    message: str
    verified: bool = True

class ResetPasswordIn(BaseModel):
    email: str
    newPassword: str

class WithdrawIn(BaseModel):
    email: str
    password: str

class UserDataOut(BaseModel):
    username: str

class SuccessOut(BaseModel):
    success: bool = True

class MessageOut(BaseModel):
    message: str
