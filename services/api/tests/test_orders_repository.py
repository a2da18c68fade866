from __future__ import annotations

from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest
from packages.shared.schemas.order_v1 import (
    MenuReorderLineV1,
    OrderModeV1,
    ProductReorderLineV1,
)
from services.api.app.db.models import EventLog, Order
from services.api.app.services.cart import Cart, MenuSelection, ProductCustomization
from services.api.app.services.catalog_base import Prices, Product
from services.api.app.services.catalog_memory import DEMO_PRODUCTS, InMemoryCatalog
from services.api.app.services.orders_base import (
    EmptyCartError,
    MissingAddressError,
    MissingModeError,
    OrderSubmissionError,
    UnpricedLineError,
)
from services.api.app.services.orders_sql import INITIAL_STATUS, SqlOrdersRepository
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Session, None, None]:
    db_path = tmp_path / "kebap_orders.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("KEBAP_DB_AUTO_CREATE", "true")

    from services.api.app.db.database import db_session
    from services.api.app.db.init_db import init_db

    init_db()
    session = db_session()
    try:
        yield session
    finally:
        session.close()


def _cart() -> Cart:
    cart = Cart()
    cart.add_product("kebab-classic", ProductCustomization.of(["lettuce"]), qty=2)
    cart.add_menu(
        "menu-kebab",
        {
            "main": [MenuSelection("kebab-classic")],
            "side": [MenuSelection("fries")],
            "drink": [MenuSelection("cocacola")],
        },
    )
    return cart


def _order_count(db: Session) -> int:
    return db.query(Order).count()


def test_submit_writes_order_and_event(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    order_id = repo.submit("u-1", _cart(), OrderModeV1.DELIVERY, "addr-1")

    row = db.get(Order, order_id)
    assert row is not None
    assert row.owner_id == "u-1"
    assert row.status == INITIAL_STATUS
    assert row.total_cents == 2 * 750 + 1100
    assert row.items_count == 3
    assert row.address_id == "addr-1"
    assert row.created_at is not None

    events = db.query(EventLog).filter(EventLog.entity_id == order_id).all()
    assert [e.event_type for e in events] == ["ORDER_SUBMITTED"]


def test_pickup_order_does_not_store_address(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    order_id = repo.submit("u-1", _cart(), OrderModeV1.PICKUP, "addr-1")

    assert db.get(Order, order_id).address_id is None


def test_empty_cart_is_rejected(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    with pytest.raises(EmptyCartError):
        repo.submit("u-1", Cart(), OrderModeV1.PICKUP, None)

    assert _order_count(db) == 0


def test_missing_mode_is_rejected(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    with pytest.raises(MissingModeError):
        repo.submit("u-1", _cart(), None, None)

    assert _order_count(db) == 0


def test_delivery_without_address_fails_before_any_write(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    with pytest.raises(MissingAddressError):
        repo.submit("u-1", _cart(), OrderModeV1.DELIVERY, None)

    assert _order_count(db) == 0
    assert db.query(EventLog).count() == 0


def test_unpriced_line_blocks_the_whole_order(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())
    cart = _cart()
    cart.add_product("water")

    with pytest.raises(UnpricedLineError):
        repo.submit("u-1", cart, OrderModeV1.PICKUP, None)

    assert _order_count(db) == 0


def test_failed_write_leaves_nothing_behind(
    db: Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    def boom() -> None:
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", boom)

    with pytest.raises(OrderSubmissionError):
        repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None)

    assert _order_count(db) == 0
    assert db.query(EventLog).count() == 0


def test_observe_my_orders_newest_first_with_limit(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    ids = [repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None) for _ in range(3)]
    other = repo.submit("u-2", _cart(), OrderModeV1.PICKUP, None)

    for day, order_id in enumerate(ids, start=1):
        db.get(Order, order_id).created_at = datetime(2024, 1, day, 12, 0, 0)
    db.commit()

    summaries = repo.observe_my_orders("u-1", limit=2)

    assert [s.id for s in summaries] == [ids[2], ids[1]]
    assert other not in {s.id for s in repo.observe_my_orders("u-1")}


def test_observe_my_orders_newest_first_within_same_second(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    ids = [repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None) for _ in range(5)]

    summaries = repo.observe_my_orders("u-1")

    assert [s.id for s in summaries] == list(reversed(ids))


def test_observe_my_orders_breaks_timestamp_ties_by_insertion(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())

    ids = [repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None) for _ in range(3)]
    for order_id in ids:
        db.get(Order, order_id).created_at = datetime(2024, 1, 1, 12, 0, 0)
    db.commit()

    assert [s.id for s in repo.observe_my_orders("u-1")] == [ids[2], ids[1], ids[0]]


def test_summary_embeds_previews_and_reorder_lines(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())
    order_id = repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None)

    (summary,) = repo.observe_my_orders("u-1")

    assert summary.id == order_id
    assert summary.mode == OrderModeV1.PICKUP
    assert summary.total_cents == 2 * 650 + 950
    assert summary.items_count == 3
    assert [p.qty for p in summary.previews] == [2, 1]
    assert summary.previews[0].text == "Classic Kebab (without lettuce)"

    product_line, menu_line = summary.reorder_lines
    assert isinstance(product_line, ProductReorderLineV1)
    assert product_line.removed_ingredients == ["lettuce"]
    assert isinstance(menu_line, MenuReorderLineV1)
    assert menu_line.selections["drink"][0].product_id == "cocacola"


def test_history_keeps_snapshots_after_catalog_changes(db: Session) -> None:
    order_id = SqlOrdersRepository(db, InMemoryCatalog.demo()).submit(
        "u-1", _cart(), OrderModeV1.PICKUP, None
    )

    renamed = [
        Product(
            id=p.id,
            name="Renamed",
            category_id=p.category_id,
            prices=Prices(pickup=1, delivery=1),
        )
        for p in DEMO_PRODUCTS
    ]
    repo = SqlOrdersRepository(db, InMemoryCatalog(products=renamed))

    summary = repo.get_order("u-1", order_id)

    assert summary is not None
    assert summary.reorder_lines[0].name == "Classic Kebab"
    assert summary.reorder_lines[0].unit_price_cents == 650


def test_get_order_is_scoped_to_owner(db: Session) -> None:
    repo = SqlOrdersRepository(db, InMemoryCatalog.demo())
    order_id = repo.submit("u-1", _cart(), OrderModeV1.PICKUP, None)

    assert repo.get_order("u-2", order_id) is None
    assert repo.get_order("u-1", "missing") is None
