"""Shared event schema (v1).

The backend stores an append-only event log for order sessions and submitted orders.
Clients can consume these events to render an audit trail.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EntityTypeV1(str, Enum):
    ORDER = "Order"
    ORDER_SESSION = "OrderSession"


class EventTypeV1(str, Enum):
    SESSION_STARTED = "SESSION_STARTED"
    SESSION_BROWSING = "SESSION_BROWSING"
    SESSION_CLEARED = "SESSION_CLEARED"
    ORDER_SUBMITTED = "ORDER_SUBMITTED"


class EventV1(BaseModel):
    id: str
    owner_id: str

    entity_type: EntityTypeV1
    entity_id: str

    event_type: EventTypeV1
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str
