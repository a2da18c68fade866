from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class ProductCustomization:
    """Removed ingredients for one product. An empty set means "as it comes"."""

    removed_ingredients: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return len(self.removed_ingredients) == 0

    @classmethod
    def of(cls, removed: Sequence[str] | None) -> ProductCustomization:
        return cls(frozenset(removed or ()))


NO_CUSTOMIZATION = ProductCustomization()


@dataclass(frozen=True, slots=True)
class MenuSelection:
    product_id: str
    customization: ProductCustomization = NO_CUSTOMIZATION


@dataclass(frozen=True, slots=True)
class CartProductLine:
    line_id: str
    product_id: str
    qty: int
    customization: ProductCustomization = NO_CUSTOMIZATION


@dataclass(frozen=True, slots=True)
class CartMenuLine:
    line_id: str
    menu_id: str
    qty: int
    # group id -> chosen options
    selections: Mapping[str, tuple[MenuSelection, ...]] = field(default_factory=dict)


CartLine = CartProductLine | CartMenuLine


class InvalidQuantity(ValueError):
    def __init__(self, qty: object) -> None:
        super().__init__(f"Quantity must be a positive integer, got {qty!r}")
        self.qty = qty


def _check_qty(qty: int) -> None:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise InvalidQuantity(qty)


def _normalize_selections(
    selections: Mapping[str, Sequence[MenuSelection]],
) -> tuple[tuple[str, tuple[tuple[str, frozenset[str]], ...]], ...]:
    # Equivalent menus compare equal regardless of group or option order.
    return tuple(
        (group_id, tuple(sorted((s.product_id, s.customization.removed_ingredients) for s in chosen)))
        for group_id, chosen in sorted(selections.items())
        if chosen
    )


class Cart:
    """In-progress cart. Lines reference catalog ids only; pricing happens at translation."""

    def __init__(self, lines: Sequence[CartLine] = ()) -> None:
        self._lines: list[CartLine] = list(lines)

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def items_count(self) -> int:
        return sum(line.qty for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def add_product(
        self,
        product_id: str,
        customization: ProductCustomization | None = None,
        qty: int = 1,
    ) -> CartProductLine:
        _check_qty(qty)
        customization = customization or NO_CUSTOMIZATION

        for i, line in enumerate(self._lines):
            if (
                isinstance(line, CartProductLine)
                and line.product_id == product_id
                and line.customization.removed_ingredients == customization.removed_ingredients
            ):
                merged = replace(line, qty=line.qty + qty)
                self._lines[i] = merged
                return merged

        line = CartProductLine(
            line_id=uuid4().hex,
            product_id=product_id,
            qty=qty,
            customization=customization,
        )
        self._lines.append(line)
        return line

    def add_menu(
        self,
        menu_id: str,
        selections: Mapping[str, Sequence[MenuSelection]],
        qty: int = 1,
    ) -> CartMenuLine:
        _check_qty(qty)
        frozen = {group_id: tuple(chosen) for group_id, chosen in selections.items()}
        key = _normalize_selections(frozen)

        for i, line in enumerate(self._lines):
            if (
                isinstance(line, CartMenuLine)
                and line.menu_id == menu_id
                and _normalize_selections(line.selections) == key
            ):
                merged = replace(line, qty=line.qty + qty)
                self._lines[i] = merged
                return merged

        line = CartMenuLine(line_id=uuid4().hex, menu_id=menu_id, qty=qty, selections=frozen)
        self._lines.append(line)
        return line

    def update_quantity(self, line_id: str, qty: int) -> None:
        if qty <= 0:
            self.remove(line_id)
            return
        _check_qty(qty)
        self._lines = [replace(l, qty=qty) if l.line_id == line_id else l for l in self._lines]

    def remove(self, line_id: str) -> None:
        self._lines = [l for l in self._lines if l.line_id != line_id]

    def clear(self) -> None:
        self._lines = []
