"""
shop_orders.db.models

Persistence schema for orders.

Responsibilities:
- Define ORM models:
  - Order: customer checkout record correlated with a payment intent
  - OrderItem: line items owned by an order (cascade-deleted with it)
- Keep payment/order status enumerations closed at both the ORM and DB level.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Uuid as SAUuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shop_orders.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity; production systems may use tz-aware types.
    return datetime.utcnow()


class PaymentStatus(enum.StrEnum):
    pending = "pending"
    processing = "processing"
    succeeded = "succeeded"
    failed = "failed"
    canceled = "canceled"


class OrderStatus(enum.StrEnum):
    processing = "processing"
    confirmed = "confirmed"
    printing = "printing"
    completed = "completed"
    shipped = "shipped"
    delivered = "delivered"
    canceled = "canceled"


def _status_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Stored as VARCHAR + CHECK so raw SQL writes are rejected too, not just ORM writes.
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=16,
        values_callable=lambda e: [m.value for m in e],
    )


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)

    customer_name: Mapped[str] = mapped_column(String(256), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    shipping_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="eur")

    payment_intent_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        _status_enum(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.pending,
    )
    order_status: Mapped[OrderStatus] = mapped_column(
        _status_enum(OrderStatus, "order_status"),
        nullable=False,
        default=OrderStatus.processing,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
    )

    __table_args__ = (Index("ix_orders_user_created", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, payment_intent_id={self.payment_intent_id!r}, "
            f"payment_status={self.payment_status}, order_status={self.order_status})>"
        )


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product_id: Mapped[str] = mapped_column(String(128), nullable=False)
    product_name: Mapped[str] = mapped_column(String(256), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    selected_color: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    order: Mapped[Order] = relationship(back_populates="items")

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),)



# Newest-first listings scan this index in order.
Index("ix_orders_created_at", Order.created_at.desc())


# --- Module Notes -----------------------------------------------------------
# Ownership is not a DB concern here; see `shop_orders.policies` for the row rules
# the facade applies before every read and write.
