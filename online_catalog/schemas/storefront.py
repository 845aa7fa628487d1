from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from online_catalog.schemas.catalog import CategoryNode
from online_catalog.schemas.item import ItemCard, VariantSchema


class ViewMode(str, Enum):
    MASONRY = "masonry"
    GRID = "grid"
    LIST = "list"
    COMPACT = "compact"


class StoreInfo(BaseModel):
    name: str
    display_name: str
    description: Optional[str] = None
    slogan: Optional[str] = None
    title: str
    logo_url: Optional[str] = None
    cover_url: Optional[str] = None
    hero_image: Optional[str] = None
    theme: str
    whatsapp_number: Optional[str] = None
    is_closed: bool = False
    url: str


class StorefrontResponse(BaseModel):
    """GET /storefront/{slug}"""

    catalog: StoreInfo
    view: ViewMode
    query: Optional[str] = None
    categories: list[CategoryNode]
    items_count: int


class PriceOption(BaseModel):
    variant_id: Optional[int] = None
    name: Optional[str] = None
    price: Decimal
    price_label: str
    whatsapp_url: Optional[str] = None


class ProductDetailResponse(BaseModel):
    """GET /storefront/{slug}/items/{item_id}"""

    catalog: StoreInfo
    product: ItemCard
    category_name: Optional[str] = None
    variants: list[VariantSchema] = Field(default_factory=list)
    selected: PriceOption
    options: list[PriceOption] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    related: list[ItemCard] = Field(default_factory=list)
    product_url: str
    share: dict[str, str] = Field(default_factory=dict)


class CartAdd(BaseModel):
    item_id: int
    quantity: int = Field(default=1, ge=1, le=999)


class CartQuantity(BaseModel):
    quantity: int


class CartLine(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal


class CartResponse(BaseModel):
    items: list[CartLine]
    total: Decimal
    item_count: int
    can_order: bool


class OrderLinkResponse(BaseModel):
    message: str
    url: Optional[str] = None
    can_order: bool
