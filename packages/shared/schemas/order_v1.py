"""Shared order schema (v1).

Submitted orders carry denormalized line snapshots. Clients render order history and
the "repeat order" flow from these models, so they must stay backwards compatible.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class OrderModeV1(str, Enum):
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


class OrderLinePreviewV1(BaseModel):
    qty: int
    text: str


class MenuSelectionSnapshotV1(BaseModel):
    product_id: str
    removed_ingredients: list[str] = Field(default_factory=list)


class ProductReorderLineV1(BaseModel):
    type: Literal["product"] = "product"
    product_id: str
    # Snapshots taken at submission time. Never re-resolved against the catalog.
    name: str | None = None
    image_path: str | None = None
    unit_price_cents: int
    qty: int = Field(..., ge=1)
    removed_ingredients: list[str] = Field(default_factory=list)


class MenuReorderLineV1(BaseModel):
    type: Literal["menu"] = "menu"
    menu_id: str
    name: str | None = None
    image_path: str | None = None
    unit_price_cents: int
    qty: int = Field(..., ge=1)
    # Group key -> chosen options, in the order they were picked.
    selections: dict[str, list[MenuSelectionSnapshotV1]] = Field(default_factory=dict)


ReorderLineV1 = Annotated[
    Union[ProductReorderLineV1, MenuReorderLineV1],
    Field(discriminator="type"),
]

reorder_lines_adapter: TypeAdapter[list[ReorderLineV1]] = TypeAdapter(list[ReorderLineV1])


class OrderSummaryV1(BaseModel):
    id: str
    # Null only until the storage layer has resolved the server timestamp.
    created_at: datetime | None = None
    status: str
    total_cents: int
    mode: OrderModeV1
    address_id: str | None = None
    items_count: int
    previews: list[OrderLinePreviewV1] = Field(default_factory=list)
    reorder_lines: list[ReorderLineV1] = Field(default_factory=list)
