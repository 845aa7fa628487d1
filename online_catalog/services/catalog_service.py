"""
Merchant catalog lifecycle: slug checks, creation with logo upload, settings updates,
dashboard summary and plan limits.
Creation uploads the logo first and removes it again if the catalog row cannot be inserted.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.config import get_settings
from online_catalog.core.errors import MESSAGES, Conflict, InvalidInput, NotFound
from online_catalog.models.catalog import THEMES, Catalog, CatalogPlan
from online_catalog.models.user import User
from online_catalog.repositories.catalog_repo import CatalogRepository
from online_catalog.schemas.catalog import (
    CatalogResponse,
    CatalogSettingsUpdate,
    DashboardResponse,
    NameAvailability,
    PlanInfo,
)
from online_catalog.services import storage_client
from online_catalog.services.images import IncomingFile, branding_path, upload_image
from online_catalog.services.slugs import (
    SLUG_MAX,
    SLUG_MIN,
    SLUG_RE,
    ascii_slug,
    fallback_slug,
    is_valid_slug,
    with_suffix,
)

logger = logging.getLogger(__name__)

COUNTRY_CODE_RE = re.compile(r"^\+\d{1,4}$")
_SUFFIX_ATTEMPTS = 5


def plan_limits(plan: CatalogPlan) -> tuple[Optional[int], Optional[int]]:
    """(item_limit, category_limit); paid plans are unlimited."""
    settings = get_settings()
    if plan == CatalogPlan.BASIC:
        return settings.basic_plan_item_limit, settings.basic_plan_category_limit
    return None, None


def plan_info(plan: CatalogPlan) -> PlanInfo:
    item_limit, category_limit = plan_limits(plan)
    return PlanInfo(plan=plan.value, label=plan.label, item_limit=item_limit, category_limit=category_limit)


def catalog_response(catalog: Catalog) -> CatalogResponse:
    return CatalogResponse(
        id=catalog.id,
        name=catalog.name,
        display_name=catalog.display_name,
        description=catalog.description,
        slogan=catalog.slogan,
        logo_url=catalog.logo_url,
        cover_url=catalog.cover_url,
        whatsapp_number=catalog.whatsapp_number,
        country_code=catalog.country_code,
        theme=catalog.theme,
        plan=catalog.plan.value,
        enable_subcategories=catalog.enable_subcategories,
        is_open=catalog.is_open,
        created_at=catalog.created_at,
    )


def validate_slug(name: str) -> str:
    name = (name or "").strip()
    if len(name) < SLUG_MIN or len(name) > SLUG_MAX:
        raise InvalidInput(code="slug_length")
    if not SLUG_RE.match(name):
        raise InvalidInput(code="invalid_slug")
    return name


def validate_display_name(display_name: Optional[str]) -> str:
    display_name = (display_name or "").strip()
    if not 3 <= len(display_name) <= 50:
        raise InvalidInput(code="display_name_length")
    return display_name


def normalize_whatsapp(number: Optional[str], country_code: Optional[str] = None) -> Optional[str]:
    number = re.sub(r"[\s-]", "", number or "")
    if not number:
        return None
    if number.startswith("+"):
        return number
    return (country_code or get_settings().default_country_code) + number


async def get_user_catalog(session: AsyncSession, user: User) -> Catalog:
    catalog = await CatalogRepository(session).get_for_user(user.id)
    if catalog is None:
        raise NotFound(code="catalog_not_found")
    return catalog


async def check_name(session: AsyncSession, name: str) -> NameAvailability:
    valid = is_valid_slug(name)
    available = valid and await CatalogRepository(session).name_available(name)
    return NameAvailability(name=name, valid=valid, available=available)


async def suggest_name(session: AsyncSession, display_name: Optional[str], email: Optional[str] = None) -> str:
    """
    Slug from the display name (ASCII only), else from the email local part, else a
    time-based fallback. A taken slug gets a random numeric suffix.
    """
    repo = CatalogRepository(session)
    base = ascii_slug(display_name or "")
    if not is_valid_slug(base) and email:
        base = re.sub(r"[^a-z0-9]", "", email.split("@")[0].lower())[:SLUG_MAX]
    if not is_valid_slug(base):
        base = fallback_slug()
    if await repo.name_available(base):
        return base
    for _ in range(_SUFFIX_ATTEMPTS):
        candidate = with_suffix(base)
        if await repo.name_available(candidate):
            return candidate
    return fallback_slug()


async def create_catalog(
    session: AsyncSession,
    user: User,
    display_name: Optional[str],
    name: Optional[str] = None,
    whatsapp_number: Optional[str] = None,
    logo: Optional[IncomingFile] = None,
) -> Catalog:
    repo = CatalogRepository(session)
    if await repo.get_for_user(user.id) is not None:
        raise Conflict(code="catalog_exists")

    display_name = validate_display_name(display_name)
    if name:
        name = validate_slug(name)
        if not await repo.name_available(name):
            raise Conflict(code="catalog_name_taken")
    else:
        name = await suggest_name(session, display_name, user.email)

    whatsapp = normalize_whatsapp(whatsapp_number) or normalize_whatsapp(user.phone)

    logo_url: Optional[str] = None
    logo_path: Optional[str] = None
    if logo is not None and logo.data:
        logo_url, logo_path = await upload_image(
            storage_client.LOGOS_BUCKET,
            lambda ext: branding_path(str(user.id), ext),
            logo,
            MESSAGES["logo_upload_failed"],
        )

    catalog = Catalog(
        user_id=user.id,
        name=name,
        display_name=display_name,
        whatsapp_number=whatsapp,
        country_code=get_settings().default_country_code,
        logo_url=logo_url,
    )
    try:
        await repo.create(catalog)
    except IntegrityError:
        logger.exception("catalog_insert_failed", extra={"user_id": user.id})
        await session.rollback()
        if logo_path:
            await storage_client.remove_objects(storage_client.LOGOS_BUCKET, [logo_path])
        raise Conflict(code="catalog_create_failed")
    logger.info("catalog_created", extra={"user_id": user.id, "catalog_id": catalog.id})
    return catalog


async def update_settings(
    session: AsyncSession,
    user: User,
    fields: CatalogSettingsUpdate,
    logo: Optional[IncomingFile] = None,
    cover: Optional[IncomingFile] = None,
) -> Catalog:
    repo = CatalogRepository(session)
    catalog = await get_user_catalog(session, user)

    if fields.name and fields.name != catalog.name:
        name = validate_slug(fields.name)
        if not await repo.name_available(name):
            raise Conflict(code="catalog_name_taken")
        catalog.name = name
    if fields.display_name:
        catalog.display_name = validate_display_name(fields.display_name)
    if fields.theme is not None:
        if fields.theme not in THEMES:
            raise InvalidInput(code="invalid_theme")
        catalog.theme = fields.theme
    if fields.country_code is not None:
        if not COUNTRY_CODE_RE.match(fields.country_code):
            raise InvalidInput(code="invalid_country_code")
        catalog.country_code = fields.country_code
    if fields.whatsapp_number is not None:
        catalog.whatsapp_number = normalize_whatsapp(fields.whatsapp_number, catalog.country_code)
    if fields.description is not None:
        catalog.description = fields.description.strip() or None
    if fields.slogan is not None:
        catalog.slogan = fields.slogan.strip() or None
    if fields.enable_subcategories is not None:
        catalog.enable_subcategories = fields.enable_subcategories
    if fields.is_open is not None:
        catalog.is_open = fields.is_open

    replaced: list[tuple[str, Optional[str]]] = []
    if logo is not None and logo.data:
        replaced.append((storage_client.LOGOS_BUCKET, catalog.logo_url))
        catalog.logo_url, _ = await upload_image(
            storage_client.LOGOS_BUCKET,
            lambda ext: branding_path(str(user.id), ext),
            logo,
            MESSAGES["logo_upload_failed"],
        )
    if cover is not None and cover.data:
        replaced.append((storage_client.COVERS_BUCKET, catalog.cover_url))
        catalog.cover_url, _ = await upload_image(
            storage_client.COVERS_BUCKET,
            lambda ext: branding_path(str(user.id), ext),
            cover,
            MESSAGES["cover_upload_failed"],
        )

    await session.flush()
    for bucket, old_url in replaced:
        old_path = storage_client.object_path(bucket, old_url)
        if old_path:
            await storage_client.remove_objects(bucket, [old_path])
    logger.info("catalog_updated", extra={"user_id": user.id, "catalog_id": catalog.id})
    return catalog


async def dashboard_summary(session: AsyncSession, user: User) -> DashboardResponse:
    settings = get_settings()
    repo = CatalogRepository(session)
    catalog = await repo.get_for_user(user.id)
    if catalog is None:
        display_hint = user.phone or user.email.split("@")[0]
        return DashboardResponse(catalog=None, suggested_name=await suggest_name(session, display_hint, user.email))
    return DashboardResponse(
        catalog=catalog_response(catalog),
        plan=plan_info(catalog.plan),
        categories_count=await repo.count_categories(catalog.id),
        items_count=await repo.count_items(catalog.id),
        catalog_url=f"{settings.public_base_url}/{catalog.name}",
        # QR codes always point at production
        qr_code_url=f"https://online-catalog.net/{catalog.name}",
        needs_customization=not catalog.logo_url or not catalog.cover_url,
    )


async def set_plan(session: AsyncSession, catalog_id: int, plan: str) -> Catalog:
    try:
        new_plan = CatalogPlan(plan)
    except ValueError:
        raise InvalidInput(code="invalid_plan")
    catalog = await CatalogRepository(session).get_by_id(catalog_id)
    if catalog is None:
        raise NotFound(code="catalog_not_found")
    catalog.plan = new_plan
    await session.flush()
    logger.info("catalog_plan_changed", extra={"catalog_id": catalog.id, "plan": new_plan.value})
    return catalog
