"""
Dashboard product management: items with their optional main image, price variants
and gallery images.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.core.errors import MESSAGES, LimitReached, NotFound
from online_catalog.models.catalog import Catalog
from online_catalog.models.menu_item import ItemVariant, MenuItem, ProductImage
from online_catalog.models.user import User
from online_catalog.repositories.category_repo import CategoryRepository
from online_catalog.repositories.catalog_repo import CatalogRepository
from online_catalog.repositories.item_repo import ItemRepository
from online_catalog.schemas.item import (
    ItemCreate,
    ItemListResponse,
    ItemResponse,
    ItemUpdate,
    ProductImageSchema,
    VariantCreate,
    VariantSchema,
)
from online_catalog.services import storage_client
from online_catalog.services.catalog_service import plan_limits
from online_catalog.services.images import IncomingFile, item_image_path, upload_image

logger = logging.getLogger(__name__)


def item_response(
    item: MenuItem,
    category_name: Optional[str] = None,
    variants: Optional[list[ItemVariant]] = None,
    images: Optional[list[ProductImage]] = None,
) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        catalog_id=item.catalog_id,
        category_id=item.category_id,
        category_name=category_name,
        name=item.name,
        description=item.description,
        price=item.price,
        image_url=item.image_url,
        is_featured=item.is_featured,
        is_popular=item.is_popular,
        created_at=item.created_at,
        variants=[VariantSchema(id=v.id, name=v.name, price=v.price) for v in variants or []],
        images=[ProductImageSchema(id=i.id, image_url=i.image_url) for i in images or []],
    )


async def _upload_item_image(user: User, image: IncomingFile) -> str:
    url, _ = await upload_image(
        storage_client.MENU_IMAGES_BUCKET,
        lambda ext: item_image_path(str(user.id), ext),
        image,
        MESSAGES["image_upload_failed"],
    )
    return url


async def _require_category(session: AsyncSession, catalog: Catalog, category_id: int) -> None:
    if await CategoryRepository(session).get(catalog.id, category_id) is None:
        raise NotFound(code="category_not_found")


async def get_item_or_404(session: AsyncSession, catalog: Catalog, item_id: int) -> MenuItem:
    item = await ItemRepository(session).get(catalog.id, item_id)
    if item is None:
        raise NotFound(code="item_not_found")
    return item


async def list_items(session: AsyncSession, catalog: Catalog) -> ItemListResponse:
    repo = ItemRepository(session)
    rows = await repo.list_with_category_names(catalog.id)
    variants = await repo.variants_by_item([item.id for item, _ in rows])
    item_limit, _ = plan_limits(catalog.plan)
    return ItemListResponse(
        items=[item_response(item, name, variants.get(item.id)) for item, name in rows],
        total=len(rows),
        limit=item_limit,
    )


async def item_detail(session: AsyncSession, catalog: Catalog, item_id: int) -> ItemResponse:
    repo = ItemRepository(session)
    item = await get_item_or_404(session, catalog, item_id)
    return item_response(
        item,
        await repo.category_name(item.category_id),
        await repo.variants_for(item.id),
        await repo.images_for(item.id),
    )


async def create_item(
    session: AsyncSession,
    catalog: Catalog,
    user: User,
    data: ItemCreate,
    image: Optional[IncomingFile] = None,
) -> MenuItem:
    item_limit, _ = plan_limits(catalog.plan)
    if item_limit is not None:
        if await CatalogRepository(session).count_items(catalog.id) >= item_limit:
            raise LimitReached("item", item_limit)
    await _require_category(session, catalog, data.category_id)

    image_url = None
    if image is not None and image.data:
        image_url = await _upload_item_image(user, image)

    item = await ItemRepository(session).create(
        MenuItem(
            catalog_id=catalog.id,
            category_id=data.category_id,
            name=data.name.strip(),
            description=(data.description or "").strip() or None,
            price=data.price,
            image_url=image_url,
            is_featured=data.is_featured,
            is_popular=data.is_popular,
        )
    )
    logger.info("item_created", extra={"catalog_id": catalog.id, "user_id": user.id})
    return item


async def update_item(
    session: AsyncSession,
    catalog: Catalog,
    user: User,
    item_id: int,
    data: ItemUpdate,
    image: Optional[IncomingFile] = None,
) -> MenuItem:
    item = await get_item_or_404(session, catalog, item_id)
    if data.category_id is not None and data.category_id != item.category_id:
        await _require_category(session, catalog, data.category_id)
        item.category_id = data.category_id
    if data.name is not None:
        item.name = data.name.strip()
    if data.description is not None:
        item.description = data.description.strip() or None
    if data.price is not None:
        item.price = data.price
    if data.is_featured is not None:
        item.is_featured = data.is_featured
    if "is_popular" in data.model_fields_set:
        item.is_popular = data.is_popular
    if image is not None and image.data:
        item.image_url = await _upload_item_image(user, image)
    await session.flush()
    return item


async def delete_item(session: AsyncSession, catalog: Catalog, item_id: int) -> None:
    item = await get_item_or_404(session, catalog, item_id)
    await ItemRepository(session).delete(item)
    logger.info("item_deleted", extra={"catalog_id": catalog.id})


# Variants


async def add_variant(session: AsyncSession, catalog: Catalog, item_id: int, data: VariantCreate) -> ItemVariant:
    item = await get_item_or_404(session, catalog, item_id)
    return await ItemRepository(session).add_variant(
        ItemVariant(menu_item_id=item.id, name=data.name.strip(), price=data.price)
    )


async def delete_variant(session: AsyncSession, catalog: Catalog, item_id: int, variant_id: int) -> None:
    item = await get_item_or_404(session, catalog, item_id)
    variant = await ItemRepository(session).get_variant(item.id, variant_id)
    if variant is None:
        raise NotFound(code="variant_not_found")
    await session.delete(variant)
    await session.flush()


# Gallery


async def add_gallery_image(
    session: AsyncSession, catalog: Catalog, user: User, item_id: int, image: IncomingFile
) -> ProductImage:
    item = await get_item_or_404(session, catalog, item_id)
    url = await _upload_item_image(user, image)
    return await ItemRepository(session).add_image(ProductImage(menu_item_id=item.id, image_url=url))


async def delete_gallery_image(session: AsyncSession, catalog: Catalog, item_id: int, image_id: int) -> None:
    item = await get_item_or_404(session, catalog, item_id)
    image = await ItemRepository(session).get_image(item.id, image_id)
    if image is None:
        raise NotFound(code="image_not_found")
    await session.delete(image)
    await session.flush()
