"""
Async SQLAlchemy 2.x engine and sessions.
Postgres (asyncpg) in production; sqlite+aiosqlite URLs are accepted for local runs and
tests, without pool sizing.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from online_catalog.config import get_settings


class Base(DeclarativeBase):
    pass


def _create_engine() -> AsyncEngine:
    settings = get_settings()
    options: dict[str, Any] = {"echo": settings.app_env == "development"}
    if not settings.database_url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return create_async_engine(settings.database_url, **options)


engine = _create_engine()
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def db_transaction() -> AsyncIterator[AsyncSession]:
    """One session, committed on clean exit and rolled back when the block raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped transaction."""
    async with db_transaction() as session:
        yield session
