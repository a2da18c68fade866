from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import uuid4

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from packages.shared.schemas.order_v1 import OrderModeV1
from services.api.app.db import models
from services.api.app.db.database import db_session
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class OrderContextState(str, Enum):
    EMPTY = "EMPTY"
    BROWSING = "BROWSING"
    PICKUP_READY = "PICKUP_READY"
    DELIVERY_PENDING = "DELIVERY_PENDING"
    DELIVERY_READY = "DELIVERY_READY"


@dataclass(frozen=True, slots=True)
class OrderContext:
    """Fulfillment intent of the current session.

    Always replaced as a whole so mode and address can never disagree.
    """

    mode: OrderModeV1 | None = None
    address_id: str | None = None
    browsing_only: bool = False

    @property
    def is_active(self) -> bool:
        if self.browsing_only:
            return False
        if self.mode == OrderModeV1.PICKUP:
            return True
        if self.mode == OrderModeV1.DELIVERY:
            return self.address_id is not None
        return False

    @property
    def state(self) -> OrderContextState:
        if self.browsing_only:
            return OrderContextState.BROWSING
        if self.mode == OrderModeV1.PICKUP:
            return OrderContextState.PICKUP_READY
        if self.mode == OrderModeV1.DELIVERY:
            if self.address_id is None:
                return OrderContextState.DELIVERY_PENDING
            return OrderContextState.DELIVERY_READY
        return OrderContextState.EMPTY


EMPTY_CONTEXT = OrderContext()

Listener = Callable[[OrderContext], None]


class OrderSession:
    """Latest-value holder for one session's :class:`OrderContext`.

    There is one writer (the session owner) and any number of readers. New subscribers
    are called immediately with the current value.

    When ``persist`` is given it runs before every swap; if it raises, the current value
    stays in place and no subscriber is notified.
    """

    def __init__(
        self,
        initial: OrderContext = EMPTY_CONTEXT,
        persist: Listener | None = None,
    ) -> None:
        self._context = initial
        self._persist = persist
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._listeners: list[Listener] = []

    @property
    def context(self) -> OrderContext:
        return self._context

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            current = self._context
        listener(current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def start_order(self, mode: OrderModeV1, address_id: str | None = None) -> OrderContext:
        return self._replace(OrderContext(mode=mode, address_id=address_id, browsing_only=False))

    def set_browsing_only(self) -> OrderContext:
        return self._replace(OrderContext(browsing_only=True))

    def clear(self) -> OrderContext:
        return self._replace(EMPTY_CONTEXT)

    def _replace(self, context: OrderContext) -> OrderContext:
        with self._write_lock:
            if self._persist is not None:
                self._persist(context)
            with self._lock:
                self._context = context
                listeners = list(self._listeners)
        for listener in listeners:
            listener(context)
        return context


class OrderSessionStore:
    """Live sessions per owner, hydrated from and written back to ``order_sessions``."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._sessions: dict[str, OrderSession] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str) -> OrderSession:
        with self._lock:
            session = self._sessions.get(owner_id)
            if session is not None:
                return session

            session = OrderSession(
                self._load(owner_id),
                persist=lambda context: self._save(owner_id, context),
            )
            self._sessions[owner_id] = session
            return session

    def discard(self, owner_id: str) -> None:
        """Clear and forget the owner's session (logout)."""

        with self._lock:
            session = self._sessions.pop(owner_id, None)
        if session is not None:
            session.clear()
        else:
            self._save(owner_id, EMPTY_CONTEXT)

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()

    def _load(self, owner_id: str) -> OrderContext:
        db = self._session_factory()
        try:
            row = db.get(models.OrderSession, owner_id)
            if row is None:
                return EMPTY_CONTEXT

            try:
                mode = OrderModeV1(row.mode) if row.mode else None
            except ValueError:
                logger.warning("Ignoring unknown stored mode %r for owner %s", row.mode, owner_id)
                mode = None

            return OrderContext(
                mode=mode,
                address_id=row.address_id,
                browsing_only=bool(row.browsing_only),
            )
        finally:
            db.close()

    def _save(self, owner_id: str, context: OrderContext) -> None:
        db = self._session_factory()
        try:
            row = db.get(models.OrderSession, owner_id)
            if row is None:
                row = models.OrderSession(owner_id=owner_id)
                db.add(row)

            row.mode = context.mode.value if context.mode else None
            row.address_id = context.address_id
            row.browsing_only = context.browsing_only
            row.updated_at = datetime.utcnow()

            db.add(
                models.EventLog(
                    id=uuid4().hex,
                    owner_id=owner_id,
                    entity_type=EntityTypeV1.ORDER_SESSION.value,
                    entity_id=owner_id,
                    event_type=_event_for(context).value,
                    event_payload_json={
                        "mode": row.mode,
                        "address_id": context.address_id,
                        "browsing_only": context.browsing_only,
                        "state": context.state.value,
                    },
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.info("Order session %s -> %s", owner_id, context.state.value)


def _event_for(context: OrderContext) -> EventTypeV1:
    if context.browsing_only:
        return EventTypeV1.SESSION_BROWSING
    if context.mode is None:
        return EventTypeV1.SESSION_CLEARED
    return EventTypeV1.SESSION_STARTED


session_store = OrderSessionStore(db_session)
