from __future__ import annotations

from packages.shared.schemas.order_v1 import OrderModeV1
from pydantic import BaseModel, Field


class SessionStartRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)
    mode: OrderModeV1
    address_id: str | None = None


class SessionOwnerRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)


class OrderContextOut(BaseModel):
    owner_id: str
    mode: OrderModeV1 | None = None
    address_id: str | None = None
    browsing_only: bool
    is_active: bool
    state: str
