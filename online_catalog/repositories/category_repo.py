from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.models.category import Category
from online_catalog.models.menu_item import MenuItem


class CategoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_catalog(self, catalog_id: int) -> list[Category]:
        """Flat rows ordered by name; roots and children interleave, the tree builder sorts them out."""
        r = await self.session.execute(
            select(Category).where(Category.catalog_id == catalog_id).order_by(Category.name, Category.id)
        )
        return list(r.scalars().all())

    async def get(self, catalog_id: int, category_id: int) -> Category | None:
        r = await self.session.execute(
            select(Category).where(Category.id == category_id, Category.catalog_id == catalog_id)
        )
        return r.scalar_one_or_none()

    async def parent_map(self, catalog_id: int) -> dict[int, int | None]:
        r = await self.session.execute(
            select(Category.id, Category.parent_category_id).where(Category.catalog_id == catalog_id)
        )
        return {row.id: row.parent_category_id for row in r}

    async def create(self, category: Category) -> Category:
        self.session.add(category)
        await self.session.flush()
        return category

    async def delete_many(self, catalog_id: int, category_ids: list[int]) -> None:
        """Remove categories and their items; ids come from the caller's subtree walk."""
        if not category_ids:
            return
        await self.session.execute(
            delete(MenuItem).where(MenuItem.catalog_id == catalog_id, MenuItem.category_id.in_(category_ids))
        )
        await self.session.execute(
            delete(Category).where(Category.catalog_id == catalog_id, Category.id.in_(category_ids))
        )
