from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from online_catalog.models.user import LoginMethod


class SignupRequest(BaseModel):
    """POST /auth/signup"""

    login_method: LoginMethod = LoginMethod.EMAIL
    email: Optional[str] = None
    phone: Optional[str] = None
    country_code: Optional[str] = None
    password: str = ""


class LoginRequest(BaseModel):
    """POST /auth/login (JSON variant of /auth/token supporting phone accounts)."""

    login_method: LoginMethod = LoginMethod.EMAIL
    email: Optional[str] = None
    phone: Optional[str] = None
    country_code: Optional[str] = None
    password: str = ""


class ForgotPasswordRequest(BaseModel):
    email: str = ""


class ResetPasswordRequest(BaseModel):
    token: str = ""
    password: str = ""
    confirm_password: str = ""


class VerifyOtpRequest(BaseModel):
    email: str
    otp: str = Field(min_length=6, max_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    id: UUID
    email: str
    phone: Optional[str] = None
    login_method: str
    role: str
    email_confirmed: bool
