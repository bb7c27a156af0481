from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Purpose = Literal["login", "register", "reset"]

CODE_PATTERN = r"^\d{6}$"


class SendCodeRequest(BaseModel):
    identifier: str = Field(..., min_length=3, max_length=254)
    purpose: Purpose = "login"
    channel: Optional[Literal["sms", "email"]] = None


class LoginRequest(BaseModel):
    method: Literal["code", "password"] = "code"
    identifier: str = Field(..., min_length=3, max_length=254)
    code: Optional[str] = Field(None, pattern=CODE_PATTERN)
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    identifier: str = Field(..., min_length=3, max_length=254)
    code: str = Field(..., pattern=CODE_PATTERN)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    # Contact email for phone-registered accounts
    email: Optional[EmailStr] = None


class ResetPasswordRequest(BaseModel):
    identifier: str = Field(..., min_length=3, max_length=254)
    code: str = Field(..., pattern=CODE_PATTERN)
    new_password: str = Field(..., min_length=6, max_length=128)
