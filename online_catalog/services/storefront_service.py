"""
Public storefront: catalog lookup by slug, category tree with item cards,
search filtering, view modes and the product detail page.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.config import Settings, get_settings
from online_catalog.core.errors import NotFound
from online_catalog.models.catalog import Catalog
from online_catalog.models.menu_item import MenuItem
from online_catalog.repositories.catalog_repo import CatalogRepository
from online_catalog.repositories.category_repo import CategoryRepository
from online_catalog.repositories.item_repo import ItemRepository
from online_catalog.schemas.catalog import CategoryNode
from online_catalog.schemas.item import ItemCard, VariantSchema
from online_catalog.schemas.storefront import (
    PriceOption,
    ProductDetailResponse,
    StoreInfo,
    StorefrontResponse,
    ViewMode,
)
from online_catalog.services.catalog_tree import build_category_tree, filter_tree, flatten_items
from online_catalog.services.whatsapp import format_amount, product_message, share_links, wa_link


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def is_new_item(item: MenuItem, settings: Settings, now: Optional[datetime] = None) -> bool:
    created = _aware(item.created_at)
    if created is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - created <= timedelta(days=settings.new_item_threshold_days)


def is_popular_item(item: MenuItem, settings: Settings) -> bool:
    if item.is_popular is not None:
        return item.is_popular
    return Decimal(item.price or 0) >= Decimal(str(settings.popular_price_threshold))


def item_href(slug: str, item_id: int) -> str:
    return f"/{slug}/item/{item_id}"


def item_card(item: MenuItem, slug: str, settings: Settings, now: Optional[datetime] = None) -> ItemCard:
    return ItemCard(
        id=item.id,
        category_id=item.category_id,
        name=item.name,
        description=item.description,
        price=item.price,
        price_label=f"{format_amount(item.price)} {settings.currency_label}",
        image_url=item.image_url,
        href=item_href(slug, item.id),
        is_new=is_new_item(item, settings, now),
        is_popular=is_popular_item(item, settings),
        is_featured=bool(item.is_featured),
    )


def store_info(catalog: Catalog, settings: Settings, items: Sequence[ItemCard] = ()) -> StoreInfo:
    store_name = catalog.store_name
    hero = catalog.cover_url or next((i.image_url for i in items if i.image_url), None)
    return StoreInfo(
        name=catalog.name,
        display_name=store_name,
        description=catalog.description,
        slogan=catalog.slogan,
        title=f"{store_name} | {catalog.slogan}" if catalog.slogan else store_name,
        logo_url=catalog.logo_url,
        cover_url=catalog.cover_url,
        hero_image=hero,
        theme=catalog.theme,
        whatsapp_number=catalog.whatsapp_number,
        is_closed=not catalog.is_open,
        url=f"{settings.public_base_url}/{catalog.name}",
    )


def apply_view(tree: Sequence[CategoryNode], view: ViewMode) -> list[CategoryNode]:
    """Compact cards carry no description."""
    if view != ViewMode.COMPACT:
        return list(tree)
    return [
        node.model_copy(
            update={
                "items": [i.model_copy(update={"description": None}) for i in node.items],
                "subcategories": apply_view(node.subcategories, view),
            }
        )
        for node in tree
    ]


async def get_catalog_or_404(session: AsyncSession, slug: str) -> Catalog:
    catalog = await CatalogRepository(session).get_by_slug(slug)
    if catalog is None:
        raise NotFound(code="catalog_not_found")
    return catalog


async def load_category_tree(session: AsyncSession, catalog: Catalog) -> list[CategoryNode]:
    settings = get_settings()
    categories = await CategoryRepository(session).list_for_catalog(catalog.id)
    items = await ItemRepository(session).list_for_catalog(catalog.id)
    now = datetime.now(timezone.utc)
    by_category: dict[int, list[ItemCard]] = defaultdict(list)
    for item in items:
        by_category[item.category_id].append(item_card(item, catalog.name, settings, now))
    return build_category_tree(categories, by_category)


async def load_storefront(
    session: AsyncSession,
    slug: str,
    query: Optional[str] = None,
    view: ViewMode = ViewMode.MASONRY,
) -> StorefrontResponse:
    settings = get_settings()
    catalog = await get_catalog_or_404(session, slug)
    tree = await load_category_tree(session, catalog)
    all_items = flatten_items(tree)
    shown = apply_view(filter_tree(tree, query), view)
    return StorefrontResponse(
        catalog=store_info(catalog, settings, all_items),
        view=view,
        query=(query or "").strip() or None,
        categories=shown,
        items_count=len(flatten_items(shown)),
    )


def gallery(main_image: Optional[str], gallery_urls: Sequence[str]) -> list[str]:
    """Gallery images in upload order; the main image goes first when it is not already there."""
    urls = list(gallery_urls)
    if urls:
        if main_image and main_image not in urls:
            return [main_image] + urls
        return urls
    return [main_image] if main_image else []


async def product_detail(session: AsyncSession, slug: str, item_id: int) -> ProductDetailResponse:
    settings = get_settings()
    catalog = await get_catalog_or_404(session, slug)
    repo = ItemRepository(session)
    item = await repo.get(catalog.id, item_id)
    if item is None:
        raise NotFound(code="item_not_found")

    variants = await repo.variants_for(item.id)
    images = await repo.images_for(item.id)
    category_name = await repo.category_name(item.category_id)
    related = await repo.related(item, settings.related_items_limit)

    product_url = f"{settings.public_base_url}/{catalog.name}/item/{item.id}"
    store_name = catalog.store_name

    def option(price: Decimal, variant_id: Optional[int] = None, name: Optional[str] = None) -> PriceOption:
        message = product_message(item.name, store_name, price, product_url, settings.currency_label, name)
        return PriceOption(
            variant_id=variant_id,
            name=name,
            price=price,
            price_label=f"{format_amount(price)} {settings.currency_label}",
            whatsapp_url=wa_link(catalog.whatsapp_number, message),
        )

    # variants_for() returns them cheapest first
    options = [option(v.price, v.id, v.name) for v in variants]
    selected = options[0] if options else option(item.price)
    card = item_card(item, catalog.name, settings)

    return ProductDetailResponse(
        catalog=store_info(catalog, settings, [card]),
        product=card,
        category_name=category_name,
        variants=[VariantSchema(id=v.id, name=v.name, price=v.price) for v in variants],
        selected=selected,
        options=options,
        images=gallery(item.image_url, [i.image_url for i in images]),
        related=[item_card(r, catalog.name, settings) for r in related],
        product_url=product_url,
        share=share_links(product_url, f"{item.name} - {store_name}"),
    )
