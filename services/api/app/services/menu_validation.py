from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from services.api.app.services.cart import MenuSelection
from services.api.app.services.catalog_base import Menu


@dataclass(frozen=True, slots=True)
class CountOutOfRange:
    group_name: str
    min: int
    max: int
    actual: int

    code = "menu_count_out_of_range"


@dataclass(frozen=True, slots=True)
class OptionNotAllowed:
    group_name: str
    product_id: str

    code = "menu_option_not_allowed"


MenuSelectionError = CountOutOfRange | OptionNotAllowed


def validate_menu_selections(
    menu: Menu,
    selections: Mapping[str, Sequence[MenuSelection]],
) -> MenuSelectionError | None:
    """Return the first violation, or ``None`` when the selections are valid.

    Groups are checked in catalog order. Within a group the count check runs before the
    allowed-option check. Bounds are inclusive. Selections filed under a group the menu
    does not define are reported after every known group passes.
    """

    for group in menu.groups:
        chosen = selections.get(group.id, ())

        if len(chosen) < group.min or len(chosen) > group.max:
            return CountOutOfRange(
                group_name=group.name,
                min=group.min,
                max=group.max,
                actual=len(chosen),
            )

        allowed = group.allowed_ids()
        for sel in chosen:
            if sel.product_id not in allowed:
                return OptionNotAllowed(group_name=group.name, product_id=sel.product_id)

    known = {group.id for group in menu.groups}
    for group_id, chosen in selections.items():
        if group_id not in known and chosen:
            return OptionNotAllowed(group_name=group_id, product_id=chosen[0].product_id)

    return None
