"""
Password hashing (argon2 via passlib) and password policy checks.
"""
from __future__ import annotations

import re
from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Checked in order; the first failing rule is reported.
PASSWORD_RULES = [
    (re.compile(r".{8,}", re.S), "كلمة المرور يجب أن تكون 8 أحرف على الأقل"),
    (re.compile(r"[a-z]"), "كلمة المرور يجب أن تحتوي على حرف صغير واحد على الأقل"),
    (re.compile(r"[A-Z]"), "كلمة المرور يجب أن تحتوي على حرف كبير واحد على الأقل"),
    (re.compile(r"\d"), "كلمة المرور يجب أن تحتوي على رقم واحد على الأقل"),
]


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    return pwd_context.verify(raw, hashed)


def password_problem(raw: str) -> Optional[str]:
    """Return the message of the first password rule that fails, or None."""
    for pattern, message in PASSWORD_RULES:
        if not pattern.search(raw):
            return message
    return None
