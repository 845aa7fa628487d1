"""
JWT auth with role claim (merchant, admin). OAuth2PasswordBearer pattern.
Access token payload: sub (user id), role, exp.
Confirmation and recovery links use the same signing key with a "purpose" claim.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.config import get_settings
from online_catalog.db import get_db
from online_catalog.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=True)

PURPOSE_ACCESS = "access"
PURPOSE_CONFIRM = "confirm"
PURPOSE_RECOVERY = "recovery"


class TokenPayload(BaseModel):
    sub: str  # user id
    role: str  # merchant | admin
    exp: datetime


def _encode(payload: dict, minutes: int) -> str:
    settings = get_settings()
    payload = dict(payload, exp=datetime.now(timezone.utc) + timedelta(minutes=minutes))
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: UUID, role: UserRole) -> str:
    settings = get_settings()
    return _encode(
        {"sub": str(user_id), "role": role.value, "purpose": PURPOSE_ACCESS},
        settings.jwt_access_token_expire_minutes,
    )


def create_purpose_token(user_id: UUID, purpose: str) -> str:
    """Short-lived token embedded in confirmation / password-recovery links."""
    return _encode({"sub": str(user_id), "purpose": purpose}, get_settings().auth_token_expire_minutes)


def decode_token(token: str, purpose: str) -> Optional[UUID]:
    """Return the user id if the token is valid and issued for `purpose`."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("purpose", PURPOSE_ACCESS) != purpose or payload.get("sub") is None:
        return None
    try:
        return UUID(payload["sub"])
    except ValueError:
        return None


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: AsyncSession = Depends(get_db),
) -> User:
    from online_catalog.repositories.user_repo import UserRepository

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_token(token, PURPOSE_ACCESS)
    if user_id is None:
        raise credentials_exception
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise credentials_exception
    return user


def require_role(*allowed: UserRole):
    """Dependency: require current user to have one of the allowed roles."""

    async def _require(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return Depends(_require)
