from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class VariantSchema(BaseModel):
    id: int
    name: str
    price: Decimal


class VariantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class ProductImageSchema(BaseModel):
    id: int
    image_url: str


class ItemCard(BaseModel):
    """A product as shown on storefront cards."""

    id: int
    category_id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    price_label: str
    image_url: Optional[str] = None
    href: str
    is_new: bool = False
    is_popular: bool = False
    is_featured: bool = False


class ItemResponse(BaseModel):
    """Dashboard item row."""

    id: int
    catalog_id: int
    category_id: int
    category_name: Optional[str] = None
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    is_featured: bool
    is_popular: Optional[bool] = None
    created_at: datetime
    variants: list[VariantSchema] = Field(default_factory=list)
    images: list[ProductImageSchema] = Field(default_factory=list)


class ItemListResponse(BaseModel):
    items: list[ItemResponse]
    total: int
    limit: Optional[int] = None


class ItemCreate(BaseModel):
    """Form fields of POST /dashboard/items (image travels separately)."""

    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    category_id: int
    is_featured: bool = False
    is_popular: Optional[bool] = None


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    category_id: Optional[int] = None
    is_featured: Optional[bool] = None
    is_popular: Optional[bool] = None
