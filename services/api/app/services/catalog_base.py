from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class CategoryType(str, Enum):
    PRODUCTS = "PRODUCTS"
    MENUS = "MENUS"


@dataclass(frozen=True, slots=True)
class Prices:
    """Per-channel unit prices in cents. Either side may be missing."""

    pickup: int | None = None
    delivery: int | None = None


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str
    order: int
    active: bool
    image_path: str | None = None
    type: CategoryType = CategoryType.PRODUCTS


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    category_id: str
    prices: Prices
    description: str | None = None
    image_path: str | None = None
    active: bool = True
    order: int = 0
    ingredients: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MenuAllowed:
    product_id: str
    # Supplement over the menu base price, per channel.
    delta: Prices | None = None
    default: bool = False
    allow_ingredient_removal: bool = True


@dataclass(frozen=True, slots=True)
class MenuGroup:
    id: str
    name: str
    min: int
    max: int
    allowed: tuple[MenuAllowed, ...] = ()

    def allowed_ids(self) -> frozenset[str]:
        return frozenset(a.product_id for a in self.allowed)

    def option(self, product_id: str) -> MenuAllowed | None:
        for allowed in self.allowed:
            if allowed.product_id == product_id:
                return allowed
        return None


@dataclass(frozen=True, slots=True)
class Menu:
    id: str
    name: str
    prices: Prices
    groups: tuple[MenuGroup, ...] = field(default_factory=tuple)
    description: str | None = None
    image_path: str | None = None
    active: bool = True
    order: int = 0


class CatalogSource(Protocol):
    """Read contract the order core needs from the catalog.

    ``observe_*`` return the active entities ordered by display order and are re-read on
    every call. Point lookups ignore the ``active`` flag so callers can tell a disabled
    item from a deleted one; missing ids are omitted and input order is kept.
    """

    name: str

    def observe_categories(self) -> list[Category]: ...

    def observe_products(self, category_id: str | None = None) -> list[Product]: ...

    def observe_menus(self) -> list[Menu]: ...

    def get_products_by_ids(self, ids: list[str]) -> list[Product]: ...

    def get_menus_by_ids(self, ids: list[str]) -> list[Menu]: ...


def order_by_ids(items: list, ids: list[str]) -> list:
    """Return ``items`` in the order of ``ids`` (de-duplicated), dropping unknown ids."""

    by_id = {item.id: item for item in items}
    out = []
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            continue
        seen.add(item_id)
        item = by_id.get(item_id)
        if item is not None:
            out.append(item)
    return out
