"""
Public storefront: GET /api/v1/storefront/{slug}, product pages and the cookie-held cart.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.db import get_db
from online_catalog.models.catalog import Catalog
from online_catalog.schemas.storefront import (
    CartAdd,
    CartQuantity,
    CartResponse,
    OrderLinkResponse,
    ProductDetailResponse,
    StorefrontResponse,
    ViewMode,
)
from online_catalog.services import cart_service, storefront_service
from online_catalog.services.cart import Cart, storage_key

router = APIRouter(prefix="/storefront", tags=["storefront"])

CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


async def _load_cart(request: Request, session: AsyncSession, slug: str, catalog: Catalog) -> Cart:
    return await cart_service.reprice(session, Cart.load(request.cookies, slug), catalog)


def _store_cart(response: Response, slug: str, cart: Cart) -> None:
    response.set_cookie(storage_key(slug), cart.dumps(), max_age=CART_COOKIE_MAX_AGE, samesite="lax")


@router.get(
    "/{slug}",
    response_model=StorefrontResponse,
    summary="Storefront",
    description="Catalog info and category tree with item cards. `q` filters items by name or description.",
)
async def get_storefront(
    slug: str,
    q: Optional[str] = Query(None, max_length=100),
    view: ViewMode = ViewMode.MASONRY,
    session: AsyncSession = Depends(get_db),
) -> StorefrontResponse:
    return await storefront_service.load_storefront(session, slug, q, view)


@router.get("/{slug}/items/{item_id}", response_model=ProductDetailResponse, summary="Product page")
async def get_product(slug: str, item_id: int, session: AsyncSession = Depends(get_db)) -> ProductDetailResponse:
    return await storefront_service.product_detail(session, slug, item_id)


# Cart


@router.get("/{slug}/cart", response_model=CartResponse, summary="Current cart")
async def get_cart(
    slug: str, request: Request, response: Response, session: AsyncSession = Depends(get_db)
) -> CartResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    cart = await _load_cart(request, session, slug, catalog)
    _store_cart(response, slug, cart)
    return cart_service.cart_view(cart, catalog)


@router.post("/{slug}/cart/items", response_model=CartResponse, summary="Add to cart")
async def add_cart_item(
    slug: str,
    body: CartAdd,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> CartResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    cart = await _load_cart(request, session, slug, catalog)
    cart = await cart_service.add_to_cart(session, cart, catalog, body.item_id, body.quantity)
    _store_cart(response, slug, cart)
    return cart_service.cart_view(cart, catalog)


@router.patch("/{slug}/cart/items/{item_id}", response_model=CartResponse, summary="Change quantity")
async def update_cart_item(
    slug: str,
    item_id: int,
    body: CartQuantity,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> CartResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    cart = await _load_cart(request, session, slug, catalog)
    cart.set_quantity(item_id, body.quantity)
    _store_cart(response, slug, cart)
    return cart_service.cart_view(cart, catalog)


@router.delete("/{slug}/cart/items/{item_id}", response_model=CartResponse, summary="Remove from cart")
async def remove_cart_item(
    slug: str,
    item_id: int,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> CartResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    cart = await _load_cart(request, session, slug, catalog)
    cart.remove(item_id)
    _store_cart(response, slug, cart)
    return cart_service.cart_view(cart, catalog)


@router.delete("/{slug}/cart", response_model=CartResponse, summary="Empty cart")
async def clear_cart(slug: str, response: Response, session: AsyncSession = Depends(get_db)) -> CartResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    cart = Cart()
    _store_cart(response, slug, cart)
    return cart_service.cart_view(cart, catalog)


@router.get(
    "/{slug}/cart/order-link",
    response_model=OrderLinkResponse,
    summary="WhatsApp order link",
    description="Order message for the cart and its wa.me link; url is null when ordering is not possible.",
)
async def get_order_link(slug: str, request: Request, session: AsyncSession = Depends(get_db)) -> OrderLinkResponse:
    catalog = await storefront_service.get_catalog_or_404(session, slug)
    return cart_service.order_link(await _load_cart(request, session, slug, catalog), catalog)
