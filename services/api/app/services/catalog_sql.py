from __future__ import annotations

from typing import Any

from services.api.app.db import models
from services.api.app.services.catalog_base import (
    Category,
    CategoryType,
    Menu,
    MenuAllowed,
    MenuGroup,
    Prices,
    Product,
    order_by_ids,
)
from sqlalchemy.orm import Session


class SqlCatalog:
    name = "sql"

    def __init__(self, db: Session) -> None:
        self._db = db

    def observe_categories(self) -> list[Category]:
        rows = (
            self._db.query(models.Category)
            .filter(models.Category.active.is_(True))
            .order_by(models.Category.sort_order.asc(), models.Category.id.asc())
            .all()
        )
        return [_category_from_row(r) for r in rows]

    def observe_products(self, category_id: str | None = None) -> list[Product]:
        q = self._db.query(models.Product).filter(models.Product.active.is_(True))
        if category_id is not None:
            q = q.filter(models.Product.category_id == category_id)
        rows = q.order_by(models.Product.sort_order.asc(), models.Product.id.asc()).all()
        return [_product_from_row(r) for r in rows]

    def observe_menus(self) -> list[Menu]:
        rows = (
            self._db.query(models.Menu)
            .filter(models.Menu.active.is_(True))
            .order_by(models.Menu.sort_order.asc(), models.Menu.id.asc())
            .all()
        )
        return [_menu_from_row(r) for r in rows]

    def get_products_by_ids(self, ids: list[str]) -> list[Product]:
        if not ids:
            return []
        rows = self._db.query(models.Product).filter(models.Product.id.in_(set(ids))).all()
        return order_by_ids([_product_from_row(r) for r in rows], ids)

    def get_menus_by_ids(self, ids: list[str]) -> list[Menu]:
        if not ids:
            return []
        rows = self._db.query(models.Menu).filter(models.Menu.id.in_(set(ids))).all()
        return order_by_ids([_menu_from_row(r) for r in rows], ids)


def _category_from_row(row: models.Category) -> Category:
    try:
        type_ = CategoryType(str(row.type or "").strip().upper())
    except ValueError:
        type_ = CategoryType.PRODUCTS

    return Category(
        id=row.id,
        name=row.name,
        order=row.sort_order,
        active=row.active,
        image_path=row.image_path,
        type=type_,
    )


def _product_from_row(row: models.Product) -> Product:
    ingredients = row.ingredients_json if isinstance(row.ingredients_json, list) else []
    return Product(
        id=row.id,
        name=row.name,
        category_id=row.category_id,
        prices=Prices(pickup=row.price_pickup_cents, delivery=row.price_delivery_cents),
        description=row.description,
        image_path=row.image_path,
        active=row.active,
        order=row.sort_order,
        ingredients=tuple(str(i) for i in ingredients if isinstance(i, str)),
    )


def _menu_from_row(row: models.Menu) -> Menu:
    return Menu(
        id=row.id,
        name=row.name,
        prices=Prices(pickup=row.price_pickup_cents, delivery=row.price_delivery_cents),
        groups=menu_groups_from_json(row.groups_json),
        description=row.description,
        image_path=row.image_path,
        active=row.active,
        order=row.sort_order,
    )


def _prices_from_json(raw: Any) -> Prices | None:
    if not isinstance(raw, dict):
        return None
    pickup = raw.get("pickup")
    delivery = raw.get("delivery")
    return Prices(
        pickup=int(pickup) if isinstance(pickup, (int, float)) else None,
        delivery=int(delivery) if isinstance(delivery, (int, float)) else None,
    )


def _prices_to_json(prices: Prices | None) -> dict[str, int | None] | None:
    if prices is None:
        return None
    return {"pickup": prices.pickup, "delivery": prices.delivery}


def menu_groups_from_json(raw: Any) -> tuple[MenuGroup, ...]:
    if not isinstance(raw, list):
        return ()

    groups: list[MenuGroup] = []
    for g in raw:
        if not isinstance(g, dict) or not g.get("id"):
            continue
        allowed: list[MenuAllowed] = []
        for a in g.get("allowed") or []:
            if not isinstance(a, dict) or not a.get("product_id"):
                continue
            allowed.append(
                MenuAllowed(
                    product_id=str(a["product_id"]),
                    delta=_prices_from_json(a.get("delta")),
                    default=bool(a.get("default", False)),
                    allow_ingredient_removal=bool(a.get("allow_ingredient_removal", True)),
                )
            )
        groups.append(
            MenuGroup(
                id=str(g["id"]),
                name=str(g.get("name") or g["id"]),
                min=int(g.get("min", 0)),
                max=int(g.get("max", 0)),
                allowed=tuple(allowed),
            )
        )
    return tuple(groups)


def menu_groups_to_json(groups: tuple[MenuGroup, ...]) -> list[dict]:
    return [
        {
            "id": g.id,
            "name": g.name,
            "min": g.min,
            "max": g.max,
            "allowed": [
                {
                    "product_id": a.product_id,
                    "delta": _prices_to_json(a.delta),
                    "default": a.default,
                    "allow_ingredient_removal": a.allow_ingredient_removal,
                }
                for a in g.allowed
            ],
        }
        for g in groups
    ]
