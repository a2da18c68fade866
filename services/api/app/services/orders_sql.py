from __future__ import annotations

import logging
import threading
import time
from uuid import uuid4

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from packages.shared.schemas.order_v1 import (
    OrderLinePreviewV1,
    OrderModeV1,
    OrderSummaryV1,
    reorder_lines_adapter,
)
from services.api.app.db.models import EventLog, Order
from services.api.app.services.cart import Cart
from services.api.app.services.catalog_base import CatalogSource
from services.api.app.services.orders_base import (
    EmptyCartError,
    MissingAddressError,
    MissingModeError,
    OrderSubmissionError,
)
from services.api.app.services.translator import TranslatedOrder, translate
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Later statuses are owned by the fulfillment side.
INITIAL_STATUS = "PENDING"

_seq_lock = threading.Lock()
_last_seq = 0


def _next_seq() -> int:
    """Strictly increasing within the process, close to wall-clock nanoseconds."""

    global _last_seq
    with _seq_lock:
        _last_seq = max(time.time_ns(), _last_seq + 1)
        return _last_seq


class SqlOrdersRepository:
    def __init__(self, db: Session, catalog: CatalogSource) -> None:
        self._db = db
        self._catalog = catalog

    def submit(
        self,
        owner_id: str,
        cart: Cart,
        mode: OrderModeV1 | None,
        address_id: str | None,
    ) -> str:
        """Validate, translate and store the order in a single transaction.

        All validation happens before anything is written. Returns the new order id.
        """

        if cart.is_empty():
            raise EmptyCartError()
        if mode is None:
            raise MissingModeError()
        if mode == OrderModeV1.DELIVERY and not address_id:
            raise MissingAddressError()

        logger.info(
            "Submitting order owner=%s mode=%s lines=%d",
            owner_id,
            mode.value,
            len(cart.lines),
        )

        translated = translate(cart, mode, self._catalog)
        return self._write(owner_id, mode, address_id, translated)

    def _write(
        self,
        owner_id: str,
        mode: OrderModeV1,
        address_id: str | None,
        translated: TranslatedOrder,
    ) -> str:
        order_id = uuid4().hex
        stored_address = address_id if mode == OrderModeV1.DELIVERY else None

        self._db.add(
            Order(
                id=order_id,
                owner_id=owner_id,
                status=INITIAL_STATUS,
                total_cents=translated.total_cents,
                items_count=translated.items_count,
                mode=mode.value,
                address_id=stored_address,
                seq=_next_seq(),
                items_json=translated.item_snapshots(),
                reorder_lines_json=reorder_lines_adapter.dump_python(
                    translated.lines, mode="json"
                ),
            )
        )
        self._db.add(
            EventLog(
                id=uuid4().hex,
                owner_id=owner_id,
                entity_type=EntityTypeV1.ORDER.value,
                entity_id=order_id,
                event_type=EventTypeV1.ORDER_SUBMITTED.value,
                event_payload_json={
                    "mode": mode.value,
                    "address_id": stored_address,
                    "total_cents": translated.total_cents,
                    "items_count": translated.items_count,
                },
            )
        )

        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error("Order write failed for owner=%s: %s", owner_id, e, exc_info=True)
            raise OrderSubmissionError("The order could not be stored. Please retry.") from e

        logger.info("Order %s created total=%d", order_id, translated.total_cents)
        return order_id

    def observe_my_orders(self, owner_id: str, limit: int = 20) -> list[OrderSummaryV1]:
        rows = (
            self._db.query(Order)
            .filter(Order.owner_id == owner_id)
            .order_by(Order.created_at.desc(), Order.seq.desc())
            .limit(limit)
            .all()
        )
        return [order_summary_from_row(r) for r in rows]

    def get_order(self, owner_id: str, order_id: str) -> OrderSummaryV1 | None:
        row = self._db.get(Order, order_id)
        if row is None or row.owner_id != owner_id:
            return None
        return order_summary_from_row(row)


def order_summary_from_row(row: Order) -> OrderSummaryV1:
    items = row.items_json if isinstance(row.items_json, list) else []
    previews = [
        OrderLinePreviewV1(qty=int(i.get("qty") or 0), text=str(i.get("text") or i.get("name") or ""))
        for i in items
        if isinstance(i, dict)
    ]

    return OrderSummaryV1(
        id=row.id,
        created_at=row.created_at,
        status=row.status,
        total_cents=row.total_cents,
        mode=OrderModeV1(row.mode),
        address_id=row.address_id,
        items_count=row.items_count,
        previews=previews,
        reorder_lines=reorder_lines_adapter.validate_python(row.reorder_lines_json or []),
    )
