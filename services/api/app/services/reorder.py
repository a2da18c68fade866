from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from packages.shared.schemas.order_v1 import (
    MenuReorderLineV1,
    ProductReorderLineV1,
    ReorderLineV1,
)
from services.api.app.services.cart import Cart, MenuSelection, ProductCustomization
from services.api.app.services.catalog_base import CatalogSource
from services.api.app.services.menu_validation import validate_menu_selections

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkippedLine:
    index: int
    kind: str
    ref_id: str
    reason: str


@dataclass(slots=True)
class ReorderResult:
    cart: Cart
    skipped: list[SkippedLine] = field(default_factory=list)


def rebuild_cart(lines: Sequence[ReorderLineV1], catalog: CatalogSource) -> ReorderResult:
    """Turn stored reorder lines back into a cart.

    Prices are not carried over: the cart is priced again against the current catalog.
    Lines whose product or menu is gone or disabled are reported instead of restored.
    """

    product_ids: list[str] = []
    menu_ids: list[str] = []
    for line in lines:
        if isinstance(line, ProductReorderLineV1):
            product_ids.append(line.product_id)
        elif isinstance(line, MenuReorderLineV1):
            menu_ids.append(line.menu_id)
            for chosen in line.selections.values():
                product_ids.extend(sel.product_id for sel in chosen)

    products = {p.id: p for p in catalog.get_products_by_ids(product_ids)}
    menus = {m.id: m for m in catalog.get_menus_by_ids(menu_ids)}

    result = ReorderResult(cart=Cart())

    for index, line in enumerate(lines):
        if isinstance(line, ProductReorderLineV1):
            product = products.get(line.product_id)
            if product is None or not product.active:
                reason = "missing" if product is None else "inactive"
                result.skipped.append(SkippedLine(index, "product", line.product_id, reason))
                continue

            result.cart.add_product(
                product.id,
                ProductCustomization.of(line.removed_ingredients),
                qty=line.qty,
            )

        elif isinstance(line, MenuReorderLineV1):
            menu = menus.get(line.menu_id)
            if menu is None or not menu.active:
                reason = "missing" if menu is None else "inactive"
                result.skipped.append(SkippedLine(index, "menu", line.menu_id, reason))
                continue

            selections = {
                group_id: [
                    MenuSelection(
                        product_id=sel.product_id,
                        customization=ProductCustomization.of(sel.removed_ingredients),
                    )
                    for sel in chosen
                ]
                for group_id, chosen in line.selections.items()
            }

            reason = _selection_problem(selections, products)
            if reason is None and validate_menu_selections(menu, selections) is not None:
                reason = "selection_invalid"
            if reason is not None:
                result.skipped.append(SkippedLine(index, "menu", line.menu_id, reason))
                continue

            result.cart.add_menu(menu.id, selections, qty=line.qty)

        else:
            raise TypeError(f"Unexpected reorder line: {line!r}")

    for skipped in result.skipped:
        logger.warning(
            "Reorder skipped %s %s at line %d: %s",
            skipped.kind,
            skipped.ref_id,
            skipped.index,
            skipped.reason,
        )

    return result


def _selection_problem(selections: dict[str, list[MenuSelection]], products: dict) -> str | None:
    for chosen in selections.values():
        for sel in chosen:
            product = products.get(sel.product_id)
            if product is None:
                return "selection_missing"
            if not product.active:
                return "selection_inactive"
    return None
