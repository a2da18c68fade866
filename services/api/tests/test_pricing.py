from __future__ import annotations

import pytest
from packages.shared.schemas.order_v1 import OrderModeV1
from services.api.app.services.cart import MenuSelection
from services.api.app.services.catalog_base import (
    Menu,
    MenuAllowed,
    MenuGroup,
    Prices,
    Product,
)
from services.api.app.services.catalog_memory import DEMO_MENUS
from services.api.app.services.pricing import menu_unit_price, price_for


def _product(pickup: int | None, delivery: int | None) -> Product:
    return Product(
        id="p-1",
        name="Test",
        category_id="c-1",
        prices=Prices(pickup=pickup, delivery=delivery),
    )


@pytest.mark.parametrize(
    ("pickup", "delivery", "mode", "expected"),
    [
        (650, 750, OrderModeV1.DELIVERY, 750),
        (650, None, OrderModeV1.DELIVERY, 650),
        (650, 750, OrderModeV1.PICKUP, 650),
        (None, 300, OrderModeV1.PICKUP, 300),
        (650, 750, None, 650),
        (None, 300, None, 300),
        (None, None, OrderModeV1.PICKUP, None),
        (None, None, OrderModeV1.DELIVERY, None),
    ],
)
def test_price_for_falls_back_between_channels(
    pickup: int | None,
    delivery: int | None,
    mode: OrderModeV1 | None,
    expected: int | None,
) -> None:
    assert price_for(_product(pickup, delivery), mode) == expected


def test_zero_price_is_not_treated_as_missing() -> None:
    assert price_for(_product(0, 500), OrderModeV1.PICKUP) == 0


def _kebab_menu() -> Menu:
    return next(m for m in DEMO_MENUS if m.id == "menu-kebab")


def _selections(main: str) -> dict[str, list[MenuSelection]]:
    return {
        "main": [MenuSelection(product_id=main)],
        "side": [MenuSelection(product_id="fries")],
        "drink": [MenuSelection(product_id="cocacola")],
    }


def test_menu_unit_price_adds_option_supplements() -> None:
    menu = _kebab_menu()
    assert menu_unit_price(menu, _selections("kebab-classic"), OrderModeV1.PICKUP) == 950
    assert menu_unit_price(menu, _selections("durum"), OrderModeV1.PICKUP) == 1000
    assert menu_unit_price(menu, _selections("durum"), OrderModeV1.DELIVERY) == 1150


def test_menu_supplement_does_not_fall_back_between_channels() -> None:
    menu = Menu(
        id="m-1",
        name="Menu",
        prices=Prices(pickup=900, delivery=1000),
        groups=(
            MenuGroup(
                id="main",
                name="Main",
                min=1,
                max=1,
                allowed=(MenuAllowed(product_id="p-1", delta=Prices(pickup=100)),),
            ),
        ),
    )
    selections = {"main": [MenuSelection(product_id="p-1")]}

    assert menu_unit_price(menu, selections, OrderModeV1.PICKUP) == 1000
    assert menu_unit_price(menu, selections, OrderModeV1.DELIVERY) == 1000


def test_menu_without_base_price_is_unpriced() -> None:
    menu = Menu(id="m-1", name="Menu", prices=Prices())
    assert menu_unit_price(menu, {}, OrderModeV1.PICKUP) is None
