from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from packages.shared.schemas.order_v1 import (
    MenuReorderLineV1,
    MenuSelectionSnapshotV1,
    OrderLinePreviewV1,
    OrderModeV1,
    ProductReorderLineV1,
    ReorderLineV1,
)
from services.api.app.services.cart import (
    Cart,
    CartMenuLine,
    CartProductLine,
    ProductCustomization,
)
from services.api.app.services.catalog_base import CatalogSource, Menu, Product
from services.api.app.services.menu_validation import validate_menu_selections
from services.api.app.services.orders_base import (
    InvalidQuantityError,
    MenuSelectionInvalidError,
    UnknownCatalogItemError,
    UnpricedLineError,
)
from services.api.app.services.pricing import menu_unit_price, price_for


@dataclass(frozen=True, slots=True)
class TranslatedOrder:
    lines: list[ReorderLineV1]
    previews: list[OrderLinePreviewV1]
    total_cents: int
    items_count: int

    def item_snapshots(self) -> list[dict]:
        """Flat line snapshots stored next to the reorder lines for listings and audits."""

        out: list[dict] = []
        for line, preview in zip(self.lines, self.previews):
            if isinstance(line, ProductReorderLineV1):
                ref_id = line.product_id
            elif isinstance(line, MenuReorderLineV1):
                ref_id = line.menu_id
            else:
                raise TypeError(f"Unexpected reorder line: {line!r}")

            out.append(
                {
                    "type": line.type,
                    "ref_id": ref_id,
                    "name": line.name,
                    "qty": line.qty,
                    "unit_price_cents": line.unit_price_cents,
                    "subtotal_cents": line.unit_price_cents * line.qty,
                    "text": preview.text,
                }
            )
        return out


def translate(cart: Cart, mode: OrderModeV1 | None, catalog: CatalogSource) -> TranslatedOrder:
    """Price and denormalize every cart line against the catalog as it reads right now.

    The first line that cannot be ordered aborts the translation.
    """

    lines = cart.lines
    for index, line in enumerate(lines):
        if isinstance(line.qty, bool) or not isinstance(line.qty, int) or line.qty < 1:
            raise InvalidQuantityError(index, line.qty)

    product_ids: list[str] = []
    menu_ids: list[str] = []
    for line in lines:
        if isinstance(line, CartProductLine):
            product_ids.append(line.product_id)
        elif isinstance(line, CartMenuLine):
            menu_ids.append(line.menu_id)
            for chosen in line.selections.values():
                product_ids.extend(sel.product_id for sel in chosen)

    products = {p.id: p for p in catalog.get_products_by_ids(product_ids)}
    menus = {m.id: m for m in catalog.get_menus_by_ids(menu_ids)}

    out_lines: list[ReorderLineV1] = []
    previews: list[OrderLinePreviewV1] = []
    total = 0
    items_count = 0

    for line in lines:
        if isinstance(line, CartProductLine):
            reorder_line, text = _translate_product(line, mode, products)
        elif isinstance(line, CartMenuLine):
            reorder_line, text = _translate_menu(line, mode, menus, products)
        else:
            raise TypeError(f"Unexpected cart line: {line!r}")

        out_lines.append(reorder_line)
        previews.append(OrderLinePreviewV1(qty=line.qty, text=text))
        total += reorder_line.unit_price_cents * line.qty
        items_count += line.qty

    return TranslatedOrder(
        lines=out_lines,
        previews=previews,
        total_cents=total,
        items_count=items_count,
    )


def _translate_product(
    line: CartProductLine,
    mode: OrderModeV1 | None,
    products: dict[str, Product],
) -> tuple[ProductReorderLineV1, str]:
    product = _active_product(products, line.product_id)

    unit = price_for(product, mode)
    if unit is None:
        raise UnpricedLineError("product", product.id, mode)

    removed = ordered_removed(line.customization, product.ingredients)
    reorder_line = ProductReorderLineV1(
        product_id=product.id,
        name=product.name,
        image_path=product.image_path,
        unit_price_cents=unit,
        qty=line.qty,
        removed_ingredients=removed,
    )
    return reorder_line, _label(product.name, removed)


def _translate_menu(
    line: CartMenuLine,
    mode: OrderModeV1 | None,
    menus: dict[str, Menu],
    products: dict[str, Product],
) -> tuple[MenuReorderLineV1, str]:
    menu = menus.get(line.menu_id)
    if menu is None or not menu.active:
        raise UnknownCatalogItemError("menu", line.menu_id)

    error = validate_menu_selections(menu, line.selections)
    if error is not None:
        raise MenuSelectionInvalidError(menu.id, error)

    unit = menu_unit_price(menu, line.selections, mode)
    if unit is None:
        raise UnpricedLineError("menu", menu.id, mode)

    selections: dict[str, list[MenuSelectionSnapshotV1]] = {}
    chosen_names: list[str] = []
    for group in menu.groups:
        chosen = line.selections.get(group.id, ())
        if not chosen:
            continue
        snapshots: list[MenuSelectionSnapshotV1] = []
        for sel in chosen:
            product = _active_product(products, sel.product_id)
            removed = ordered_removed(sel.customization, product.ingredients)
            snapshots.append(
                MenuSelectionSnapshotV1(product_id=product.id, removed_ingredients=removed)
            )
            chosen_names.append(_label(product.name, removed))
        selections[group.id] = snapshots

    reorder_line = MenuReorderLineV1(
        menu_id=menu.id,
        name=menu.name,
        image_path=menu.image_path,
        unit_price_cents=unit,
        qty=line.qty,
        selections=selections,
    )
    text = f"{menu.name}: {', '.join(chosen_names)}" if chosen_names else menu.name
    return reorder_line, text


def _active_product(products: dict[str, Product], product_id: str) -> Product:
    product = products.get(product_id)
    if product is None or not product.active:
        raise UnknownCatalogItemError("product", product_id)
    return product


def ordered_removed(
    customization: ProductCustomization,
    ingredients: Sequence[str],
) -> list[str]:
    """Removed ingredients in recipe order; names the recipe does not know go last."""

    removed = customization.removed_ingredients
    known = [i for i in ingredients if i in removed]
    unknown = sorted(removed.difference(ingredients))
    return known + unknown


def _label(name: str, removed: Sequence[str]) -> str:
    if not removed:
        return name
    return f"{name} (without {', '.join(removed)})"
