from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from online_catalog.schemas.item import ItemCard


class CategoryNode(BaseModel):
    id: int
    name: str
    parent_category_id: Optional[int] = None
    items: list[ItemCard] = Field(default_factory=list)
    subcategories: list["CategoryNode"] = Field(default_factory=list)


class CategoryOption(BaseModel):
    id: int
    label: str
    level: int


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    parent_category_id: Optional[int] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    parent_category_id: Optional[int] = None


class CategoryResponse(BaseModel):
    id: int
    catalog_id: int
    name: str
    parent_category_id: Optional[int] = None


class CategoryTreeResponse(BaseModel):
    """GET /dashboard/categories: tree plus parent dropdown options."""

    categories: list[CategoryNode]
    options: list[CategoryOption]
    total: int
    limit: Optional[int] = None


class CatalogResponse(BaseModel):
    id: int
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    slogan: Optional[str] = None
    logo_url: Optional[str] = None
    cover_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    country_code: Optional[str] = None
    theme: str
    plan: str
    enable_subcategories: bool
    is_open: bool
    created_at: datetime


class PlanInfo(BaseModel):
    plan: str
    label: str
    item_limit: Optional[int] = None
    category_limit: Optional[int] = None


class DashboardResponse(BaseModel):
    catalog: Optional[CatalogResponse] = None
    suggested_name: Optional[str] = None
    plan: Optional[PlanInfo] = None
    categories_count: int = 0
    items_count: int = 0
    catalog_url: Optional[str] = None
    qr_code_url: Optional[str] = None
    needs_customization: bool = False


class NameAvailability(BaseModel):
    name: str
    valid: bool
    available: bool


class PlanUpdate(BaseModel):
    plan: str


class CatalogSettingsUpdate(BaseModel):
    """PATCH /dashboard/settings form fields; None keeps the current value."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    slogan: Optional[str] = Field(None, max_length=120)
    whatsapp_number: Optional[str] = Field(None, max_length=32)
    country_code: Optional[str] = None
    theme: Optional[str] = None
    enable_subcategories: Optional[bool] = None
    is_open: Optional[bool] = None
