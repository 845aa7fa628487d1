"""
Merchant accounts: sign-up by email or phone, login, email confirmation (link or OTP)
and password recovery.
Phone accounts get a synthetic address {full_phone}@catalog.app and are confirmed at once.
"""
from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.config import get_settings
from online_catalog.core.auth import (
    PURPOSE_CONFIRM,
    PURPOSE_RECOVERY,
    create_access_token,
    create_purpose_token,
    decode_token,
)
from online_catalog.core.errors import MESSAGES, Conflict, InvalidInput, NotAuthorized
from online_catalog.core.security import hash_password, password_problem, verify_password
from online_catalog.models.user import LoginMethod, User, UserRole
from online_catalog.repositories.user_repo import UserRepository
from online_catalog.schemas.auth import LoginRequest, ResetPasswordRequest, SignupRequest
from online_catalog.services import mailer_client

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^01[0-9]{9}$")
PHONE_EMAIL_DOMAIN = "catalog.app"
PASSWORD_RESET_SENT = "إذا كان البريد الإلكتروني مسجلاً، فستصلك رسالة لإعادة تعيين كلمة المرور"

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(raw: Optional[str]) -> str:
    raw = (raw or "").strip()
    if not raw:
        raise InvalidInput(code="email_required")
    try:
        return _email_adapter.validate_python(raw).lower()
    except ValidationError:
        raise InvalidInput(code="invalid_email")


def full_phone(phone: Optional[str], country_code: Optional[str]) -> str:
    """Country code + local number, e.g. +20 and 01012345678 -> +2001012345678."""
    phone = re.sub(r"[\s-]", "", phone or "")
    if not PHONE_RE.match(phone):
        raise InvalidInput(code="invalid_phone")
    return f"{country_code or get_settings().default_country_code}{phone}"


def phone_email(phone: str) -> str:
    return f"{phone}@{PHONE_EMAIL_DOMAIN}"


def _check_password(password: str) -> None:
    problem = password_problem(password or "")
    if problem:
        raise InvalidInput(problem, field="password")


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _new_otp() -> str:
    return f"{secrets.randbelow(10**6):06d}"


async def send_confirmation(user: User) -> None:
    """Mail the confirmation link and a fresh OTP; the OTP hash is kept on the user."""
    settings = get_settings()
    otp = _new_otp()
    user.otp_hash = hash_password(otp)
    user.otp_expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.otp_expire_minutes)
    token = create_purpose_token(user.id, PURPOSE_CONFIRM)
    link = f"{settings.public_base_url}/auth/callback?token={token}"
    status_code, _ = await mailer_client.send_auth_email(user.email, mailer_client.TEMPLATE_CONFIRM, link, otp)
    if status_code >= 300:
        logger.warning("confirmation_mail_not_sent", extra={"user_id": user.id})


async def signup(session: AsyncSession, data: SignupRequest) -> User:
    repo = UserRepository(session)
    if data.login_method == LoginMethod.PHONE:
        phone = full_phone(data.phone, data.country_code)
        email = phone_email(phone)
        duplicate = "phone_registered"
    else:
        phone = None
        email = normalize_email(data.email)
        duplicate = "email_registered"
    _check_password(data.password)

    if await repo.get_by_email(email) is not None:
        raise Conflict(code=duplicate)

    user = await repo.create(
        User(
            email=email,
            phone=phone,
            login_method=data.login_method,
            hashed_password=hash_password(data.password),
            role=UserRole.MERCHANT,
            email_confirmed=data.login_method == LoginMethod.PHONE,
        )
    )
    if not user.email_confirmed:
        await send_confirmation(user)
    await session.flush()
    logger.info("user_signed_up", extra={"user_id": user.id})
    return user


async def authenticate(session: AsyncSession, data: LoginRequest) -> str:
    """Return an access token for valid credentials."""
    if data.login_method == LoginMethod.PHONE:
        failure = MESSAGES["invalid_credentials_phone"]
        try:
            email = phone_email(full_phone(data.phone, data.country_code))
        except InvalidInput:
            raise NotAuthorized(failure)
    else:
        failure = MESSAGES["invalid_credentials_email"]
        email = (data.email or "").strip().lower()
    return await login_with_password(session, email, data.password, failure)


async def login_with_password(
    session: AsyncSession, email: str, password: str, failure: Optional[str] = None
) -> str:
    user = await UserRepository(session).get_by_email(email)
    if user is None or not verify_password(password, user.hashed_password):
        raise NotAuthorized(failure or MESSAGES["invalid_credentials_email"])
    if get_settings().require_email_confirmation and not user.email_confirmed:
        raise NotAuthorized(code="email_not_confirmed")
    return create_access_token(user.id, user.role)


async def confirm_from_token(session: AsyncSession, token: str) -> str:
    user_id = decode_token(token, PURPOSE_CONFIRM)
    user = await UserRepository(session).get_by_id(user_id) if user_id else None
    if user is None:
        raise InvalidInput(code="invalid_confirmation")
    user.email_confirmed = True
    user.otp_hash = None
    user.otp_expires_at = None
    await session.flush()
    return create_access_token(user.id, user.role)


async def verify_otp(session: AsyncSession, email: str, otp: str) -> str:
    user = await UserRepository(session).get_by_email(email.strip())
    if user is None or not user.otp_hash or user.otp_expires_at is None:
        raise InvalidInput(code="invalid_otp")
    if _aware(user.otp_expires_at) < datetime.now(timezone.utc) or not verify_password(otp, user.otp_hash):
        raise InvalidInput(code="invalid_otp")
    user.email_confirmed = True
    user.otp_hash = None
    user.otp_expires_at = None
    await session.flush()
    return create_access_token(user.id, user.role)


async def request_password_reset(session: AsyncSession, email: Optional[str]) -> str:
    """Same answer whether or not the address is registered."""
    email = normalize_email(email)
    user = await UserRepository(session).get_by_email(email)
    if user is not None:
        settings = get_settings()
        token = create_purpose_token(user.id, PURPOSE_RECOVERY)
        link = f"{settings.public_base_url}/reset-password?token={token}"
        await mailer_client.send_auth_email(user.email, mailer_client.TEMPLATE_RECOVERY, link)
    return PASSWORD_RESET_SENT


async def reset_password(session: AsyncSession, data: ResetPasswordRequest) -> None:
    if not data.password or not data.confirm_password:
        raise InvalidInput(code="required_fields")
    if data.password != data.confirm_password:
        raise InvalidInput(code="password_mismatch")
    _check_password(data.password)
    user_id = decode_token(data.token, PURPOSE_RECOVERY)
    user = await UserRepository(session).get_by_id(user_id) if user_id else None
    if user is None:
        raise InvalidInput(code="invalid_link")
    user.hashed_password = hash_password(data.password)
    await session.flush()
    logger.info("password_reset", extra={"user_id": user.id})
