#!/usr/bin/env python3
"""
Seed an admin, a demo merchant and a small demo catalog for local/dev.
Passwords are set via env or defaults for dev only.
Run after migrations: python -m scripts.seed_demo
"""
from __future__ import annotations

import asyncio
import os
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# category -> subcategory (or None) -> [(item, price, [(variant, price)])]
DEMO_CATALOG = [
    ("مشروبات ساخنة", None, [
        ("لاتيه", "45", [("صغير", "45"), ("وسط", "55"), ("كبير", "65")]),
        ("إسبريسو", "35", [("سنجل", "35"), ("دبل", "45")]),
    ]),
    ("مشروبات باردة", None, [
        ("آيس كوفي", "50", []),
    ]),
    ("حلويات", "مشروبات ساخنة", [
        ("دونات", "30", [("جليز", "30"), ("شوكولاتة", "35")]),
    ]),
]


async def seed() -> None:
    from online_catalog.core.security import hash_password
    from online_catalog.db import db_transaction
    from online_catalog.models import Catalog, CatalogPlan, Category, ItemVariant, MenuItem, User, UserRole
    from online_catalog.repositories.user_repo import UserRepository

    admin_password = os.environ.get("SEED_ADMIN_PASSWORD", "Admin1234")
    merchant_password = os.environ.get("SEED_MERCHANT_PASSWORD", "Merchant1234")

    async with db_transaction() as session:
        users = UserRepository(session)
        if await users.get_by_email("admin@catalog.app") is None:
            await users.create(
                User(
                    email="admin@catalog.app",
                    hashed_password=hash_password(admin_password),
                    role=UserRole.ADMIN,
                    email_confirmed=True,
                )
            )
        if await users.get_by_email("demo@catalog.app") is not None:
            print("Demo merchant already seeded.")
            return
        merchant = await users.create(
            User(
                email="demo@catalog.app",
                hashed_password=hash_password(merchant_password),
                role=UserRole.MERCHANT,
                email_confirmed=True,
            )
        )
        catalog = Catalog(
            user_id=merchant.id,
            name="demo-cafe",
            display_name="Demo Cafe",
            slogan="قهوة مختصة",
            whatsapp_number="+201000000000",
            country_code="+20",
            plan=CatalogPlan.PRO,
            enable_subcategories=True,
        )
        session.add(catalog)
        await session.flush()

        categories: dict[str, Category] = {}
        for name, parent, items in DEMO_CATALOG:
            category = Category(
                catalog_id=catalog.id,
                name=name,
                parent_category_id=categories[parent].id if parent else None,
            )
            session.add(category)
            await session.flush()
            categories[name] = category
            for item_name, price, variants in items:
                item = MenuItem(catalog_id=catalog.id, category_id=category.id, name=item_name, price=Decimal(price))
                session.add(item)
                await session.flush()
                for variant_name, variant_price in variants:
                    session.add(ItemVariant(menu_item_id=item.id, name=variant_name, price=Decimal(variant_price)))
    print("Demo data seeded (admin@catalog.app, demo@catalog.app, /demo-cafe).")


def main() -> None:
    asyncio.run(seed())


if __name__ == "__main__":
    main()
