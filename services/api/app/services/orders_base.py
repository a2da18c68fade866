from __future__ import annotations

from typing import Protocol

from packages.shared.schemas.order_v1 import OrderModeV1, OrderSummaryV1
from services.api.app.services.cart import Cart
from services.api.app.services.menu_validation import MenuSelectionError


class OrderError(Exception):
    """Base class for order core errors."""


class OrderValidationError(OrderError):
    """Input that can never become a valid order as given. Carries a stable ``code``."""

    code = "invalid_order"


class EmptyCartError(OrderValidationError):
    code = "empty_cart"

    def __init__(self) -> None:
        super().__init__("Cannot submit an empty cart.")


class MissingModeError(OrderValidationError):
    code = "missing_mode"

    def __init__(self) -> None:
        super().__init__("Choose pickup or delivery before submitting the order.")


class MissingAddressError(OrderValidationError):
    code = "missing_address"

    def __init__(self) -> None:
        super().__init__("Delivery orders need an address.")


class InvalidQuantityError(OrderValidationError):
    code = "invalid_quantity"

    def __init__(self, line_index: int, qty: object) -> None:
        super().__init__(f"Line {line_index} has an invalid quantity: {qty!r}")
        self.line_index = line_index
        self.qty = qty


class UnknownCatalogItemError(OrderValidationError):
    code = "unknown_item"

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"Unknown or inactive {kind}: {item_id}")
        self.kind = kind
        self.item_id = item_id


class UnpricedLineError(OrderValidationError):
    code = "unpriced_line"

    def __init__(self, kind: str, item_id: str, mode: OrderModeV1 | None) -> None:
        channel = mode.value if mode is not None else "any channel"
        super().__init__(f"No price for {kind} {item_id} ({channel})")
        self.kind = kind
        self.item_id = item_id
        self.mode = mode


class MenuSelectionInvalidError(OrderValidationError):
    def __init__(self, menu_id: str, error: MenuSelectionError) -> None:
        super().__init__(f"Invalid selections for menu {menu_id} in group {error.group_name!r}")
        self.menu_id = menu_id
        self.error = error
        self.code = error.code


class OrderStateError(OrderError):
    code = "inactive_context"

    def __init__(self, message: str = "There is no active order for this session.") -> None:
        super().__init__(message)


class OrderSubmissionError(OrderError):
    """The atomic write failed. Nothing was stored, so the caller may retry."""


class OrdersRepository(Protocol):
    def submit(
        self,
        owner_id: str,
        cart: Cart,
        mode: OrderModeV1 | None,
        address_id: str | None,
    ) -> str: ...

    def observe_my_orders(self, owner_id: str, limit: int = 20) -> list[OrderSummaryV1]: ...
