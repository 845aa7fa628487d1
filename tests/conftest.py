"""
Pytest fixtures: test client, DB session, merchant/admin users and a demo catalog.
Tests run against an in-memory SQLite database (aiosqlite); storage and mailer are
mocked with respx in the tests that reach them.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_ENV"] = "test"
os.environ["STORAGE_URL"] = "http://storage.test/storage/v1"
os.environ["STORAGE_SERVICE_KEY"] = "service-key"
os.environ["MAILER_URL"] = "http://mailer.test/send"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from online_catalog.core.auth import create_access_token
from online_catalog.core.security import hash_password
from online_catalog.db import Base, get_db
from online_catalog.main import app
from online_catalog.models import Catalog, Category, MenuItem, User, UserRole

PASSWORD = "Secret123"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database for each test."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autocommit=False, autoflush=False
    )
    async with async_session() as s:
        yield s


@pytest_asyncio.fixture
async def client(session: AsyncSession):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def make_user(session: AsyncSession, email: str, role: UserRole = UserRole.MERCHANT) -> User:
    user = User(email=email, hashed_password=hash_password(PASSWORD), role=role, email_confirmed=True)
    session.add(user)
    await session.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest_asyncio.fixture
async def merchant(session: AsyncSession) -> User:
    return await make_user(session, "merchant@shop.com")


@pytest_asyncio.fixture
async def admin(session: AsyncSession) -> User:
    return await make_user(session, "admin@shop.com", UserRole.ADMIN)


@pytest.fixture
def merchant_headers(merchant: User) -> dict[str, str]:
    return auth_headers(merchant)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest_asyncio.fixture
async def catalog(session: AsyncSession, merchant: User) -> Catalog:
    """Basic-plan catalog 'demo-shop' with subcategories enabled."""
    catalog = Catalog(
        user_id=merchant.id,
        name="demo-shop",
        display_name="Demo Shop",
        whatsapp_number="+201001234567",
        country_code="+20",
        enable_subcategories=True,
    )
    session.add(catalog)
    await session.commit()
    return catalog


@pytest_asyncio.fixture
async def stocked_catalog(session: AsyncSession, catalog: Catalog) -> dict:
    """
    Drinks
      Hot drinks: Latte (45), Tea (20)
    Snacks: Cookie (15)
    """
    drinks = Category(catalog_id=catalog.id, name="Drinks")
    snacks = Category(catalog_id=catalog.id, name="Snacks")
    session.add_all([drinks, snacks])
    await session.flush()
    hot = Category(catalog_id=catalog.id, name="Hot drinks", parent_category_id=drinks.id)
    session.add(hot)
    await session.flush()
    latte = MenuItem(
        catalog_id=catalog.id,
        category_id=hot.id,
        name="Latte",
        description="Espresso with steamed milk",
        price=Decimal("45"),
        image_url="http://img.test/latte.webp",
    )
    tea = MenuItem(catalog_id=catalog.id, category_id=hot.id, name="Tea", description="Mint tea", price=Decimal("20"))
    cookie = MenuItem(catalog_id=catalog.id, category_id=snacks.id, name="Cookie", price=Decimal("15"))
    session.add_all([latte, tea, cookie])
    await session.commit()
    return {
        "catalog": catalog,
        "drinks": drinks,
        "hot": hot,
        "snacks": snacks,
        "latte": latte,
        "tea": tea,
        "cookie": cookie,
    }
