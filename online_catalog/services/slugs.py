"""
Catalog slug helpers: validation, derivation from a display name, fallbacks.
"""
from __future__ import annotations

import random
import re
import time

SLUG_RE = re.compile(r"^[a-z0-9-]+$")
SLUG_MIN, SLUG_MAX = 3, 50

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(text: str) -> str:
    """Lowercase, keep word chars, Arabic letters, spaces and hyphens; join with '-'."""
    text = str(text).lower().strip()
    text = re.sub(r"[^\wء-ي\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return re.sub(r"^-+|-+$", "", text)


def ascii_slug(text: str) -> str:
    slug = re.sub(r"[^a-z0-9-]", "", slugify(text))
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug[:SLUG_MAX].rstrip("-")


def is_valid_slug(slug: str) -> bool:
    return SLUG_MIN <= len(slug) <= SLUG_MAX and bool(SLUG_RE.match(slug))


def base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def fallback_slug() -> str:
    return "store-" + base36(int(time.time() * 1000))[-6:]


def with_suffix(slug: str) -> str:
    suffix = f"-{random.randint(0, 999)}"
    return slug[: SLUG_MAX - len(suffix)] + suffix
