from __future__ import annotations

from typing import Annotated, Literal, Union

from packages.shared.schemas.order_v1 import OrderLinePreviewV1, OrderModeV1, ReorderLineV1
from pydantic import BaseModel, Field


class MenuSelectionIn(BaseModel):
    product_id: str
    removed_ingredients: list[str] = Field(default_factory=list)


class ProductCartLine(BaseModel):
    type: Literal["product"] = "product"
    line_id: str | None = None
    product_id: str
    qty: int = Field(1, ge=1)
    removed_ingredients: list[str] = Field(default_factory=list)


class MenuCartLine(BaseModel):
    type: Literal["menu"] = "menu"
    line_id: str | None = None
    menu_id: str
    qty: int = Field(1, ge=1)
    selections: dict[str, list[MenuSelectionIn]] = Field(default_factory=dict)


CartLineModel = Annotated[Union[ProductCartLine, MenuCartLine], Field(discriminator="type")]


class OrderQuoteRequest(BaseModel):
    mode: OrderModeV1 | None = None
    lines: list[CartLineModel] = Field(default_factory=list)


class OrderQuoteResponse(BaseModel):
    mode: OrderModeV1 | None = None
    lines: list[ReorderLineV1]
    previews: list[OrderLinePreviewV1]
    total_cents: int
    items_count: int


class OrderSubmitRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)
    lines: list[CartLineModel] = Field(default_factory=list)

    # When omitted, the owner's current order session decides.
    mode: OrderModeV1 | None = None
    address_id: str | None = None


class OrderSubmitResponse(BaseModel):
    order_id: str
    status: str
    mode: OrderModeV1
    total_cents: int
    items_count: int


class ReorderRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)


class SkippedLineOut(BaseModel):
    index: int
    kind: str
    ref_id: str
    reason: str


class ReorderResponse(BaseModel):
    order_id: str
    lines: list[CartLineModel]
    skipped: list[SkippedLineOut] = Field(default_factory=list)
