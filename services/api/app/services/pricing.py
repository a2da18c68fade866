from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from packages.shared.schemas.order_v1 import OrderModeV1
from services.api.app.services.cart import MenuSelection
from services.api.app.services.catalog_base import Menu, Prices


class Priced(Protocol):
    prices: Prices


def price_for(item: Priced, mode: OrderModeV1 | None) -> int | None:
    """Unit price in cents for ``mode``, falling back to the other channel.

    Not every item is sold on both channels, but browsing still needs a representative
    price. ``None`` means the item cannot be ordered at all; callers must not treat it
    as zero.
    """

    prices = item.prices
    if mode == OrderModeV1.DELIVERY:
        return prices.delivery if prices.delivery is not None else prices.pickup
    return prices.pickup if prices.pickup is not None else prices.delivery


def _delta_for(delta: Prices | None, mode: OrderModeV1 | None) -> int:
    # Supplements are channel specific: no fallback, missing means free.
    if delta is None:
        return 0
    value = delta.delivery if mode == OrderModeV1.DELIVERY else delta.pickup
    return value or 0


def menu_unit_price(
    menu: Menu,
    selections: Mapping[str, Sequence[MenuSelection]],
    mode: OrderModeV1 | None,
) -> int | None:
    base = price_for(menu, mode)
    if base is None:
        return None

    deltas = 0
    for group in menu.groups:
        for sel in selections.get(group.id, ()):
            allowed = group.option(sel.product_id)
            deltas += _delta_for(allowed.delta if allowed else None, mode)
    return base + deltas
