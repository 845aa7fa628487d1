from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.models.catalog import Catalog
from online_catalog.models.category import Category
from online_catalog.models.menu_item import MenuItem


class CatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, catalog_id: int) -> Catalog | None:
        r = await self.session.execute(select(Catalog).where(Catalog.id == catalog_id))
        return r.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Catalog | None:
        r = await self.session.execute(select(Catalog).where(Catalog.name == slug))
        return r.scalar_one_or_none()

    async def get_for_user(self, user_id: UUID) -> Catalog | None:
        r = await self.session.execute(select(Catalog).where(Catalog.user_id == user_id))
        return r.scalar_one_or_none()

    async def name_available(self, name: str) -> bool:
        r = await self.session.execute(select(Catalog.id).where(Catalog.name == name))
        return r.first() is None

    async def create(self, catalog: Catalog) -> Catalog:
        self.session.add(catalog)
        await self.session.flush()
        return catalog

    async def count_categories(self, catalog_id: int) -> int:
        r = await self.session.execute(
            select(func.count()).select_from(Category).where(Category.catalog_id == catalog_id)
        )
        return r.scalar_one()

    async def count_items(self, catalog_id: int) -> int:
        r = await self.session.execute(
            select(func.count()).select_from(MenuItem).where(MenuItem.catalog_id == catalog_id)
        )
        return r.scalar_one()
