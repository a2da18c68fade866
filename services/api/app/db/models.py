from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    image_path: Mapped[str | None] = mapped_column(String, nullable=True)
    type: Mapped[str] = mapped_column(String, nullable=False, default="PRODUCTS")


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    image_path: Mapped[str | None] = mapped_column(String, nullable=True)
    category_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ingredients_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    price_pickup_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price_delivery_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Menu(Base):
    __tablename__ = "menus"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    image_path: Mapped[str | None] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    price_pickup_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price_delivery_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # [{id, name, min, max, allowed: [{product_id, delta: {pickup, delivery}, default, ...}]}]
    groups_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class OrderSession(Base):
    __tablename__ = "order_sessions"

    owner_id: Mapped[str] = mapped_column(String, primary_key=True)
    mode: Mapped[str | None] = mapped_column(String, nullable=True)
    address_id: Mapped[str | None] = mapped_column(String, nullable=True)
    browsing_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    status: Mapped[str] = mapped_column(String, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    items_count: Mapped[int] = mapped_column(Integer, nullable=False)
    mode: Mapped[str] = mapped_column(String, nullable=False)
    address_id: Mapped[str | None] = mapped_column(String, nullable=True)

    items_json: Mapped[list] = mapped_column(JSON, nullable=False)
    reorder_lines_json: Mapped[list] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )
    # Insertion order; breaks ties between orders created within the same clock tick.
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)


class EventLog(Base):
    __tablename__ = "event_log"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    event_payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
