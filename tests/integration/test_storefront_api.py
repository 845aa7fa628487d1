"""
Integration tests for the public storefront: tree, search, view modes, product page,
cookie cart, order links, manifest and service worker.
"""
import base64
import json
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from online_catalog.models import Catalog, ItemVariant, MenuItem, ProductImage

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/storefront/demo-shop"


def item_names(categories) -> list[str]:
    names = []
    for node in categories:
        names.extend(i["name"] for i in node["items"])
        names.extend(item_names(node["subcategories"]))
    return names


async def test_storefront_tree(client, stocked_catalog):
    resp = await client.get(BASE)
    assert resp.status_code == 200
    body = resp.json()

    assert body["catalog"]["display_name"] == "Demo Shop"
    assert body["catalog"]["theme"] == "default"
    assert body["catalog"]["hero_image"] == "http://img.test/latte.webp"
    assert body["catalog"]["is_closed"] is False
    assert body["view"] == "masonry"
    assert [c["name"] for c in body["categories"]] == ["Drinks", "Snacks"]
    assert [c["name"] for c in body["categories"][0]["subcategories"]] == ["Hot drinks"]
    assert item_names(body["categories"]) == ["Latte", "Tea", "Cookie"]
    assert body["items_count"] == 3

    latte = body["categories"][0]["subcategories"][0]["items"][0]
    assert latte["href"] == f"/demo-shop/item/{stocked_catalog['latte'].id}"
    assert latte["is_new"] is True
    assert latte["is_popular"] is True
    assert latte["price_label"] == "45 ج.م"
    tea = body["categories"][0]["subcategories"][0]["items"][1]
    assert tea["is_popular"] is False


async def test_storefront_search_prunes_categories(client, stocked_catalog):
    resp = await client.get(BASE, params={"q": "MILK"})
    body = resp.json()
    assert body["query"] == "MILK"
    assert [c["name"] for c in body["categories"]] == ["Drinks"]
    assert item_names(body["categories"]) == ["Latte"]
    assert body["items_count"] == 1

    nothing = (await client.get(BASE, params={"q": "pizza"})).json()
    assert nothing["categories"] == []

    blank = (await client.get(BASE, params={"q": "  "})).json()
    assert blank["query"] is None
    assert blank["items_count"] == 3


async def test_compact_view_drops_descriptions(client, stocked_catalog):
    body = (await client.get(BASE, params={"view": "compact"})).json()
    assert body["view"] == "compact"
    items = body["categories"][0]["subcategories"][0]["items"]
    assert all(i["description"] is None for i in items)

    grid = (await client.get(BASE, params={"view": "grid"})).json()
    assert grid["categories"][0]["subcategories"][0]["items"][0]["description"] == "Espresso with steamed milk"


async def test_unknown_store(client):
    resp = await client.get("/api/v1/storefront/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "catalog_not_found"
    assert resp.json()["message"] == "الكتالوج غير موجود"


async def test_closed_store_and_cover_hero(client, session: AsyncSession, stocked_catalog):
    catalog: Catalog = stocked_catalog["catalog"]
    catalog.is_open = False
    catalog.cover_url = "http://img.test/cover.webp"
    catalog.slogan = "Fresh every day"
    await session.commit()

    info = (await client.get(BASE)).json()["catalog"]
    assert info["is_closed"] is True
    assert info["hero_image"] == "http://img.test/cover.webp"
    assert info["title"] == "Demo Shop | Fresh every day"


async def test_product_page(client, session: AsyncSession, stocked_catalog):
    latte: MenuItem = stocked_catalog["latte"]
    session.add_all(
        [
            ItemVariant(menu_item_id=latte.id, name="Large", price=Decimal("65")),
            ItemVariant(menu_item_id=latte.id, name="Small", price=Decimal("45")),
            ItemVariant(menu_item_id=latte.id, name="Medium", price=Decimal("55")),
            ProductImage(menu_item_id=latte.id, image_url="http://img.test/latte-2.webp"),
        ]
    )
    await session.commit()

    resp = await client.get(f"{BASE}/items/{latte.id}")
    assert resp.status_code == 200
    body = resp.json()

    assert body["category_name"] == "Hot drinks"
    assert [v["name"] for v in body["variants"]] == ["Small", "Medium", "Large"]
    assert body["selected"]["name"] == "Small"
    assert body["images"] == ["http://img.test/latte.webp", "http://img.test/latte-2.webp"]
    assert [r["name"] for r in body["related"]] == ["Tea"]
    assert body["product_url"] == f"https://online-catalog.net/demo-shop/item/{latte.id}"

    link = urlparse(body["selected"]["whatsapp_url"])
    assert link.netloc == "wa.me" and link.path == "/201001234567"
    text = parse_qs(link.query)["text"][0]
    assert text.startswith("أرغب في طلب Latte (Small) من Demo Shop.")
    assert f"/demo-shop/item/{latte.id}" in text
    assert set(body["share"]) == {"whatsapp", "instagram"}


async def test_product_without_variants_uses_base_price(client, stocked_catalog):
    cookie: MenuItem = stocked_catalog["cookie"]
    body = (await client.get(f"{BASE}/items/{cookie.id}")).json()
    assert body["variants"] == []
    assert body["selected"]["variant_id"] is None
    assert Decimal(body["selected"]["price"]) == Decimal("15")
    assert body["images"] == []
    assert body["related"] == []


async def test_product_from_another_store_is_not_found(client, stocked_catalog):
    resp = await client.get(f"{BASE}/items/999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "item_not_found"


async def test_cart_flow(client, stocked_catalog):
    latte = stocked_catalog["latte"]
    cookie = stocked_catalog["cookie"]

    empty = (await client.get(f"{BASE}/cart")).json()
    assert empty["items"] == [] and empty["can_order"] is False

    resp = await client.post(f"{BASE}/cart/items", json={"item_id": latte.id, "quantity": 2})
    assert resp.status_code == 200
    assert "cart_demo-shop" in resp.cookies
    assert Decimal(resp.json()["total"]) == Decimal("90")

    await client.post(f"{BASE}/cart/items", json={"item_id": cookie.id})
    body = (await client.post(f"{BASE}/cart/items", json={"item_id": latte.id})).json()
    assert [(i["name"], i["quantity"]) for i in body["items"]] == [("Latte", 3), ("Cookie", 1)]
    assert body["item_count"] == 4
    assert Decimal(body["total"]) == Decimal("150")
    assert body["can_order"] is True

    body = (await client.patch(f"{BASE}/cart/items/{latte.id}", json={"quantity": 0})).json()
    assert body["items"][0]["quantity"] == 1

    link = (await client.get(f"{BASE}/cart/order-link")).json()
    assert link["can_order"] is True
    assert link["url"].startswith("https://wa.me/201001234567?text=")
    assert link["message"].startswith("طلب جديد من كتالوج Demo Shop:\n\n• Latte × 1 — 45 ج.م")
    assert link["message"].endswith("الإجمالي: 60 ج.م")

    body = (await client.delete(f"{BASE}/cart/items/{cookie.id}")).json()
    assert [i["name"] for i in body["items"]] == ["Latte"]

    body = (await client.delete(f"{BASE}/cart")).json()
    assert body["items"] == [] and body["item_count"] == 0

    link = (await client.get(f"{BASE}/cart/order-link")).json()
    assert link["can_order"] is False
    assert link["url"] is None


async def test_cart_rejects_unknown_item_and_bad_cookie(client, stocked_catalog):
    resp = await client.post(f"{BASE}/cart/items", json={"item_id": 999})
    assert resp.status_code == 404

    client.cookies.set("cart_demo-shop", "not-a-cart")
    body = (await client.get(f"{BASE}/cart")).json()
    assert body["items"] == []


async def test_cart_is_repriced_from_catalog(client, session: AsyncSession, stocked_catalog):
    latte = stocked_catalog["latte"]
    lines = [
        {"id": latte.id, "name": "Latte", "price": "0.01", "quantity": 3},
        {"id": 999999, "name": "Ghost item", "price": "1", "quantity": 1},
    ]
    forged = base64.urlsafe_b64encode(json.dumps(lines).encode()).decode().rstrip("=")
    client.cookies.set("cart_demo-shop", forged)

    body = (await client.get(f"{BASE}/cart")).json()
    assert [(i["id"], i["name"], i["quantity"]) for i in body["items"]] == [(latte.id, "Latte", 3)]
    assert Decimal(body["items"][0]["price"]) == Decimal("45")
    assert Decimal(body["total"]) == Decimal("135")

    link = (await client.get(f"{BASE}/cart/order-link")).json()
    assert "• Latte × 3 — 135 ج.م" in link["message"]
    assert link["message"].endswith("الإجمالي: 135 ج.م")
    assert "Ghost" not in link["message"]

    latte.price = Decimal("50")
    await session.commit()
    body = (await client.patch(f"{BASE}/cart/items/{latte.id}", json={"quantity": 2})).json()
    assert Decimal(body["total"]) == Decimal("100")


async def test_cart_needs_whatsapp_number_to_order(client, session: AsyncSession, stocked_catalog):
    stocked_catalog["catalog"].whatsapp_number = None
    await session.commit()
    await client.post(f"{BASE}/cart/items", json={"item_id": stocked_catalog["tea"].id})
    link = (await client.get(f"{BASE}/cart/order-link")).json()
    assert link["can_order"] is False
    assert link["url"] is None


async def test_manifest_and_service_worker(client, stocked_catalog):
    manifest = (await client.get("/demo-shop/manifest")).json()
    assert manifest["name"] == "Demo Shop"
    assert manifest["start_url"] == "/demo-shop"
    assert manifest["description"] == "كتالوج Demo Shop الإلكتروني"

    fallback = (await client.get("/unknown-store/manifest")).json()
    assert fallback["name"] == "كتالوج"
    assert fallback["start_url"] == "/unknown-store"

    sw = await client.get("/sw.js")
    assert sw.status_code == 200
    assert sw.headers["content-type"].startswith("application/javascript")
    assert "online-menu-cache-v2" in sw.text


async def test_health_and_request_id(client):
    resp = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "req-123"
