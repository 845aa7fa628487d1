"""
Merchant dashboard: catalog creation and settings, categories, items, variants and gallery.
All routes act on the caller's own catalog. Forms with images are multipart.
"""
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.core.auth import get_current_user
from online_catalog.core.errors import InvalidInput, first_error
from online_catalog.db import get_db
from online_catalog.models.catalog import Catalog
from online_catalog.models.user import User
from online_catalog.schemas.catalog import (
    CatalogResponse,
    CatalogSettingsUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryTreeResponse,
    CategoryUpdate,
    DashboardResponse,
)
from online_catalog.schemas.item import (
    ItemCreate,
    ItemListResponse,
    ItemResponse,
    ItemUpdate,
    ProductImageSchema,
    VariantCreate,
    VariantSchema,
)
from online_catalog.services import catalog_service, category_service, item_service
from online_catalog.services.images import IncomingFile

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


async def current_catalog(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> Catalog:
    return await catalog_service.get_user_catalog(session, current_user)


async def _incoming(upload: Optional[UploadFile]) -> Optional[IncomingFile]:
    """An empty file input arrives as a part without filename; treat it as absent."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    if not data:
        return None
    return IncomingFile(filename=upload.filename, content_type=upload.content_type, data=data)


def _form_fields(**fields: Any) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


@router.get("", response_model=DashboardResponse, summary="Dashboard overview")
async def overview(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    return await catalog_service.dashboard_summary(session, current_user)


@router.post(
    "/catalog",
    response_model=CatalogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create catalog",
    description="One catalog per account. The slug is derived from display_name when `name` is omitted.",
)
async def create_catalog(
    display_name: str = Form(...),
    name: Optional[str] = Form(None),
    whatsapp_number: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CatalogResponse:
    catalog = await catalog_service.create_catalog(
        session, current_user, display_name, name, whatsapp_number, await _incoming(logo)
    )
    return catalog_service.catalog_response(catalog)


@router.get("/settings", response_model=CatalogResponse, summary="Catalog settings")
async def read_settings(catalog: Catalog = Depends(current_catalog)) -> CatalogResponse:
    return catalog_service.catalog_response(catalog)


@router.patch("/settings", response_model=CatalogResponse, summary="Update catalog settings")
async def update_settings(
    name: Optional[str] = Form(None),
    display_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    slogan: Optional[str] = Form(None),
    whatsapp_number: Optional[str] = Form(None),
    country_code: Optional[str] = Form(None),
    theme: Optional[str] = Form(None),
    enable_subcategories: Optional[bool] = Form(None),
    is_open: Optional[bool] = Form(None),
    logo: Optional[UploadFile] = File(None),
    cover: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CatalogResponse:
    try:
        fields = CatalogSettingsUpdate(
            **_form_fields(
                name=name,
                display_name=display_name,
                description=description,
                slogan=slogan,
                whatsapp_number=whatsapp_number,
                country_code=country_code,
                theme=theme,
                enable_subcategories=enable_subcategories,
                is_open=is_open,
            )
        )
    except ValidationError as e:
        raise first_error(e)
    catalog = await catalog_service.update_settings(
        session, current_user, fields, await _incoming(logo), await _incoming(cover)
    )
    return catalog_service.catalog_response(catalog)


# Categories


@router.get("/categories", response_model=CategoryTreeResponse, summary="Category tree and parent options")
async def list_categories(
    exclude_id: Optional[int] = None,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> CategoryTreeResponse:
    return await category_service.list_categories(session, catalog, exclude_id)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"description": "LIMIT_REACHED on the basic plan"}},
)
async def create_category(
    body: CategoryCreate,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await category_service.create_category(session, catalog, body)
    return category_service.category_response(category)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await category_service.update_category(session, catalog, category_id, body)
    return category_service.category_response(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> None:
    await category_service.delete_category(session, catalog, category_id)


# Items


@router.get("/items", response_model=ItemListResponse, summary="All items with category names")
async def list_items(
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> ItemListResponse:
    return await item_service.list_items(session, catalog)


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> ItemResponse:
    return await item_service.item_detail(session, catalog, item_id)


@router.post(
    "/items",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"description": "LIMIT_REACHED on the basic plan"}},
)
async def create_item(
    name: str = Form(...),
    price: Decimal = Form(...),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    is_featured: bool = Form(False),
    is_popular: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> ItemResponse:
    try:
        data = ItemCreate(
            name=name,
            price=price,
            category_id=category_id,
            description=description,
            is_featured=is_featured,
            is_popular=is_popular,
        )
    except ValidationError as e:
        raise first_error(e)
    item = await item_service.create_item(session, catalog, current_user, data, await _incoming(image))
    return await item_service.item_detail(session, catalog, item.id)


@router.patch("/items/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    name: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None),
    category_id: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    is_featured: Optional[bool] = Form(None),
    is_popular: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> ItemResponse:
    try:
        data = ItemUpdate(
            **_form_fields(
                name=name,
                price=price,
                category_id=category_id,
                description=description,
                is_featured=is_featured,
                is_popular=is_popular,
            )
        )
    except ValidationError as e:
        raise first_error(e)
    await item_service.update_item(session, catalog, current_user, item_id, data, await _incoming(image))
    return await item_service.item_detail(session, catalog, item_id)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> None:
    await item_service.delete_item(session, catalog, item_id)


@router.post("/items/{item_id}/variants", response_model=VariantSchema, status_code=status.HTTP_201_CREATED)
async def add_variant(
    item_id: int,
    body: VariantCreate,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> VariantSchema:
    variant = await item_service.add_variant(session, catalog, item_id, body)
    return VariantSchema(id=variant.id, name=variant.name, price=variant.price)


@router.delete("/items/{item_id}/variants/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variant(
    item_id: int,
    variant_id: int,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> None:
    await item_service.delete_variant(session, catalog, item_id, variant_id)


@router.post("/items/{item_id}/images", response_model=ProductImageSchema, status_code=status.HTTP_201_CREATED)
async def add_image(
    item_id: int,
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> ProductImageSchema:
    incoming = await _incoming(image)
    if incoming is None:
        raise InvalidInput(code="image_required", field="image")
    row = await item_service.add_gallery_image(session, catalog, current_user, item_id, incoming)
    return ProductImageSchema(id=row.id, image_url=row.image_url)


@router.delete("/items/{item_id}/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    item_id: int,
    image_id: int,
    catalog: Catalog = Depends(current_catalog),
    session: AsyncSession = Depends(get_db),
) -> None:
    await item_service.delete_gallery_image(session, catalog, item_id, image_id)
