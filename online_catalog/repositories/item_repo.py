from __future__ import annotations

from collections import defaultdict

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.models.category import Category
from online_catalog.models.menu_item import ItemVariant, MenuItem, ProductImage


class ItemRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_catalog(self, catalog_id: int) -> list[MenuItem]:
        r = await self.session.execute(
            select(MenuItem).where(MenuItem.catalog_id == catalog_id).order_by(MenuItem.created_at, MenuItem.id)
        )
        return list(r.scalars().all())

    async def list_with_category_names(self, catalog_id: int) -> list[tuple[MenuItem, str | None]]:
        r = await self.session.execute(
            select(MenuItem, Category.name)
            .outerjoin(Category, Category.id == MenuItem.category_id)
            .where(MenuItem.catalog_id == catalog_id)
            .order_by(MenuItem.created_at, MenuItem.id)
        )
        return [(row[0], row[1]) for row in r.all()]

    async def get(self, catalog_id: int, item_id: int) -> MenuItem | None:
        r = await self.session.execute(
            select(MenuItem).where(MenuItem.id == item_id, MenuItem.catalog_id == catalog_id)
        )
        return r.scalar_one_or_none()

    async def get_many(self, catalog_id: int, item_ids: list[int]) -> dict[int, MenuItem]:
        if not item_ids:
            return {}
        r = await self.session.execute(
            select(MenuItem).where(MenuItem.catalog_id == catalog_id, MenuItem.id.in_(item_ids))
        )
        return {item.id: item for item in r.scalars().all()}

    async def related(self, item: MenuItem, limit: int) -> list[MenuItem]:
        r = await self.session.execute(
            select(MenuItem)
            .where(
                MenuItem.catalog_id == item.catalog_id,
                MenuItem.category_id == item.category_id,
                MenuItem.id != item.id,
            )
            .order_by(MenuItem.created_at.desc(), MenuItem.id.desc())
            .limit(limit)
        )
        return list(r.scalars().all())

    async def create(self, item: MenuItem) -> MenuItem:
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete(self, item: MenuItem) -> None:
        await self.session.execute(delete(ItemVariant).where(ItemVariant.menu_item_id == item.id))
        await self.session.execute(delete(ProductImage).where(ProductImage.menu_item_id == item.id))
        await self.session.delete(item)
        await self.session.flush()

    # Variants

    async def variants_for(self, item_id: int) -> list[ItemVariant]:
        r = await self.session.execute(
            select(ItemVariant).where(ItemVariant.menu_item_id == item_id).order_by(ItemVariant.price, ItemVariant.id)
        )
        return list(r.scalars().all())

    async def variants_by_item(self, item_ids: list[int]) -> dict[int, list[ItemVariant]]:
        grouped: dict[int, list[ItemVariant]] = defaultdict(list)
        if not item_ids:
            return grouped
        r = await self.session.execute(
            select(ItemVariant)
            .where(ItemVariant.menu_item_id.in_(item_ids))
            .order_by(ItemVariant.price, ItemVariant.id)
        )
        for v in r.scalars().all():
            grouped[v.menu_item_id].append(v)
        return grouped

    async def get_variant(self, item_id: int, variant_id: int) -> ItemVariant | None:
        r = await self.session.execute(
            select(ItemVariant).where(ItemVariant.id == variant_id, ItemVariant.menu_item_id == item_id)
        )
        return r.scalar_one_or_none()

    async def add_variant(self, variant: ItemVariant) -> ItemVariant:
        self.session.add(variant)
        await self.session.flush()
        return variant

    # Gallery

    async def images_for(self, item_id: int) -> list[ProductImage]:
        r = await self.session.execute(
            select(ProductImage)
            .where(ProductImage.menu_item_id == item_id)
            .order_by(ProductImage.created_at, ProductImage.id)
        )
        return list(r.scalars().all())

    async def get_image(self, item_id: int, image_id: int) -> ProductImage | None:
        r = await self.session.execute(
            select(ProductImage).where(ProductImage.id == image_id, ProductImage.menu_item_id == item_id)
        )
        return r.scalar_one_or_none()

    async def add_image(self, image: ProductImage) -> ProductImage:
        self.session.add(image)
        await self.session.flush()
        return image

    async def category_name(self, category_id: int) -> str | None:
        r = await self.session.execute(select(Category.name).where(Category.id == category_id))
        return r.scalar_one_or_none()
