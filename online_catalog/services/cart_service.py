"""
Storefront cart endpoints: the cart arrives in a per-catalog cookie, products are
repriced from the catalog on every request so names and prices never come from the client.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.config import get_settings
from online_catalog.core.errors import NotFound
from online_catalog.models.catalog import Catalog
from online_catalog.repositories.item_repo import ItemRepository
from online_catalog.schemas.storefront import CartLine, CartResponse, OrderLinkResponse
from online_catalog.services.cart import Cart, CartItem
from online_catalog.services.whatsapp import cart_message, wa_link

logger = logging.getLogger(__name__)


def can_order(cart: Cart, catalog: Catalog) -> bool:
    return len(cart) > 0 and bool(catalog.whatsapp_number)


def cart_view(cart: Cart, catalog: Catalog) -> CartResponse:
    return CartResponse(
        items=[
            CartLine(id=i.id, name=i.name, price=i.price, quantity=i.quantity, line_total=i.line_total)
            for i in cart.items
        ],
        total=cart.total,
        item_count=cart.item_count,
        can_order=can_order(cart, catalog),
    )


async def reprice(session: AsyncSession, cart: Cart, catalog: Catalog) -> Cart:
    """Rebuild the cookie lines from the catalog's items; lines for deleted items are dropped."""
    if not cart.items:
        return cart
    items = await ItemRepository(session).get_many(catalog.id, [line.id for line in cart.items])
    lines = [
        CartItem(id=line.id, name=items[line.id].name, price=items[line.id].price, quantity=line.quantity)
        for line in cart.items
        if line.id in items
    ]
    if len(lines) < len(cart.items):
        logger.info("cart_lines_dropped", extra={"catalog_id": catalog.id, "dropped": len(cart.items) - len(lines)})
    return Cart(lines)


async def add_to_cart(session: AsyncSession, cart: Cart, catalog: Catalog, item_id: int, quantity: int = 1) -> Cart:
    item = await ItemRepository(session).get(catalog.id, item_id)
    if item is None:
        raise NotFound(code="item_not_found")
    cart.add(item.id, item.name, item.price, quantity)
    return cart


def order_link(cart: Cart, catalog: Catalog) -> OrderLinkResponse:
    message = cart_message(catalog.store_name, cart.items, cart.total, get_settings().currency_label)
    if not can_order(cart, catalog):
        return OrderLinkResponse(message=message, url=None, can_order=False)
    return OrderLinkResponse(message=message, url=wa_link(catalog.whatsapp_number, message), can_order=True)
