"""
/api/v1/auth: sign-up, login (JSON and OAuth2 form), email confirmation, password recovery.
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.core.auth import get_current_user
from online_catalog.db import get_db
from online_catalog.models.user import User
from online_catalog.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
    VerifyOtpRequest,
)
from online_catalog.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

SIGNUP_CONFIRM_MESSAGE = "تم إنشاء الحساب. يرجى التحقق من بريدك الإلكتروني لتأكيد الحساب"
SIGNUP_DONE_MESSAGE = "تم إنشاء الحساب بنجاح"
PASSWORD_UPDATED_MESSAGE = "تم تحديث كلمة المرور بنجاح"


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        phone=user.phone,
        login_method=user.login_method.value,
        role=user.role.value,
        email_confirmed=user.email_confirmed,
    )


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Email accounts receive a confirmation link and OTP; phone accounts are active immediately.",
)
async def signup(body: SignupRequest, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    user = await auth_service.signup(session, body)
    return MessageResponse(message=SIGNUP_DONE_MESSAGE if user.email_confirmed else SIGNUP_CONFIRM_MESSAGE)


@router.post("/login", response_model=TokenResponse, summary="Login with email or phone")
async def login(body: LoginRequest, session: AsyncSession = Depends(get_db)) -> TokenResponse:
    token = await auth_service.authenticate(session, body)
    return TokenResponse(access_token=token)


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="OAuth2 login",
    description="Returns JWT access token. Token payload includes sub (user id), role (merchant|admin), exp.",
)
async def token(
    form: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_db),
) -> TokenResponse:
    access_token = await auth_service.login_with_password(session, form.username.strip().lower(), form.password)
    return TokenResponse(access_token=access_token)


@router.get("/callback", response_model=TokenResponse, summary="Confirm email from link")
async def callback(token: str, session: AsyncSession = Depends(get_db)) -> TokenResponse:
    return TokenResponse(access_token=await auth_service.confirm_from_token(session, token))


@router.post("/verify-otp", response_model=TokenResponse, summary="Confirm email with OTP")
async def verify_otp(body: VerifyOtpRequest, session: AsyncSession = Depends(get_db)) -> TokenResponse:
    return TokenResponse(access_token=await auth_service.verify_otp(session, body.email, body.otp))


@router.post("/forgot-password", response_model=MessageResponse, summary="Request a password reset link")
async def forgot_password(body: ForgotPasswordRequest, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    return MessageResponse(message=await auth_service.request_password_reset(session, body.email))


@router.post("/reset-password", response_model=MessageResponse, summary="Set a new password")
async def reset_password(body: ResetPasswordRequest, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    await auth_service.reset_password(session, body)
    return MessageResponse(message=PASSWORD_UPDATED_MESSAGE)


@router.get("/me", response_model=UserResponse, summary="Current user")
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return _user_response(current_user)
