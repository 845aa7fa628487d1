"""
Dashboard category management. Parent changes are validated against the catalog's
flat parent map before anything is written.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.core.errors import InvalidInput, LimitReached, NotFound
from online_catalog.models.catalog import Catalog
from online_catalog.models.category import Category
from online_catalog.repositories.catalog_repo import CatalogRepository
from online_catalog.repositories.category_repo import CategoryRepository
from online_catalog.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeResponse,
    CategoryUpdate,
)
from online_catalog.services.catalog_service import plan_limits
from online_catalog.services.catalog_tree import (
    build_category_tree,
    category_options,
    subtree_ids,
    would_create_cycle,
)

logger = logging.getLogger(__name__)


def category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        catalog_id=category.catalog_id,
        name=category.name,
        parent_category_id=category.parent_category_id,
    )


async def list_categories(
    session: AsyncSession, catalog: Catalog, exclude_id: Optional[int] = None
) -> CategoryTreeResponse:
    rows = await CategoryRepository(session).list_for_catalog(catalog.id)
    tree = build_category_tree(rows)
    _, category_limit = plan_limits(catalog.plan)
    return CategoryTreeResponse(
        categories=tree,
        options=category_options(tree, exclude_id),
        total=len(rows),
        limit=category_limit,
    )


async def _check_parent(
    repo: CategoryRepository,
    catalog: Catalog,
    category_id: Optional[int],
    parent_id: Optional[int],
) -> None:
    if parent_id is None:
        return
    if not catalog.enable_subcategories:
        raise InvalidInput(code="subcategories_disabled")
    if parent_id == category_id:
        raise InvalidInput(code="category_cycle")
    if await repo.get(catalog.id, parent_id) is None:
        raise NotFound(code="category_not_found")
    if would_create_cycle(category_id, parent_id, await repo.parent_map(catalog.id)):
        raise InvalidInput(code="category_cycle")


async def create_category(session: AsyncSession, catalog: Catalog, data: CategoryCreate) -> Category:
    repo = CategoryRepository(session)
    _, category_limit = plan_limits(catalog.plan)
    if category_limit is not None:
        if await CatalogRepository(session).count_categories(catalog.id) >= category_limit:
            raise LimitReached("category", category_limit)
    await _check_parent(repo, catalog, None, data.parent_category_id)
    category = await repo.create(
        Category(catalog_id=catalog.id, name=data.name.strip(), parent_category_id=data.parent_category_id)
    )
    logger.info("category_created", extra={"catalog_id": catalog.id})
    return category


async def update_category(
    session: AsyncSession, catalog: Catalog, category_id: int, data: CategoryUpdate
) -> Category:
    repo = CategoryRepository(session)
    category = await repo.get(catalog.id, category_id)
    if category is None:
        raise NotFound(code="category_not_found")
    if data.name is not None:
        category.name = data.name.strip()
    # An explicit null moves the category back to the top level.
    if "parent_category_id" in data.model_fields_set:
        await _check_parent(repo, catalog, category.id, data.parent_category_id)
        category.parent_category_id = data.parent_category_id
    await session.flush()
    return category


async def delete_category(session: AsyncSession, catalog: Catalog, category_id: int) -> list[int]:
    """Delete the category, its whole subtree and every item filed under them."""
    repo = CategoryRepository(session)
    if await repo.get(catalog.id, category_id) is None:
        raise NotFound(code="category_not_found")
    ids = subtree_ids(category_id, await repo.parent_map(catalog.id))
    await repo.delete_many(catalog.id, ids)
    logger.info("categories_deleted count=%d", len(ids), extra={"catalog_id": catalog.id})
    return ids
