from __future__ import annotations

import argparse

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import Category, Menu, Product
from services.api.app.services import catalog_base
from services.api.app.services.catalog_memory import (
    DEMO_CATEGORIES,
    DEMO_MENUS,
    DEMO_PRODUCTS,
)
from services.api.app.services.catalog_sql import menu_groups_to_json
from sqlalchemy.orm import Session


def seed_catalog(
    db: Session,
    categories: list[catalog_base.Category],
    products: list[catalog_base.Product],
    menus: list[catalog_base.Menu],
) -> int:
    """Insert catalog entities that are not stored yet. Returns how many rows were added."""

    added = 0

    for c in categories:
        if db.get(Category, c.id) is None:
            db.add(
                Category(
                    id=c.id,
                    name=c.name,
                    sort_order=c.order,
                    active=c.active,
                    image_path=c.image_path,
                    type=c.type.value,
                )
            )
            added += 1

    for p in products:
        if db.get(Product, p.id) is None:
            db.add(
                Product(
                    id=p.id,
                    name=p.name,
                    description=p.description,
                    image_path=p.image_path,
                    category_id=p.category_id,
                    active=p.active,
                    sort_order=p.order,
                    ingredients_json=list(p.ingredients),
                    price_pickup_cents=p.prices.pickup,
                    price_delivery_cents=p.prices.delivery,
                )
            )
            added += 1

    for m in menus:
        if db.get(Menu, m.id) is None:
            db.add(
                Menu(
                    id=m.id,
                    name=m.name,
                    description=m.description,
                    image_path=m.image_path,
                    active=m.active,
                    sort_order=m.order,
                    price_pickup_cents=m.prices.pickup,
                    price_delivery_cents=m.prices.delivery,
                    groups_json=menu_groups_to_json(m.groups),
                )
            )
            added += 1

    db.commit()
    return added


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the demo kebab catalog into the database")
    parser.add_argument(
        "--skip-inactive",
        action="store_true",
        help="Do not load catalog entries that are disabled in the demo data",
    )
    args = parser.parse_args()

    init_db()

    categories = list(DEMO_CATEGORIES)
    products = list(DEMO_PRODUCTS)
    menus = list(DEMO_MENUS)
    if args.skip_inactive:
        categories = [c for c in categories if c.active]
        products = [p for p in products if p.active]
        menus = [m for m in menus if m.active]

    db = db_session()
    try:
        added = seed_catalog(db, categories, products, menus)
        print(f"Seeded catalog rows={added}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
