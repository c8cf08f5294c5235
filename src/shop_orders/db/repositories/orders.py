"""
shop_orders.db.repositories.orders

Repository for `Order` and `OrderItem` entities.

Responsibilities:
- Insert orders and their line items.
- Fetch orders with items eagerly loaded (by id, payment intent, owner).
- Apply status changes, including the bulk payment-outcome update keyed on the
  payment intent rather than the order id.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shop_orders.db.models import Order, OrderItem, OrderStatus, PaymentStatus


class OrderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, items: Iterable[dict[str, Any]] = (), **fields: Any) -> Order:
        order = Order(**fields)
        # Assigning the collection up front keeps `order.items` loaded (no async lazy load).
        order.items = [OrderItem(**item) for item in items]
        self._session.add(order)
        await self._session.flush()
        return order

    async def add_items(self, order: Order, items: Iterable[dict[str, Any]]) -> list[OrderItem]:
        # `order` must come from a query that loaded `items` (see `get`).
        created = [OrderItem(**item) for item in items]
        order.items.extend(created)
        await self._session.flush()
        return created

    async def get(self, order_id: uuid.UUID, *, for_update: bool = False) -> Order:
        # scalar_one: NoResultFound surfaces to the caller unchanged.
        stmt = select(Order).where(Order.id == order_id).options(selectinload(Order.items))
        if for_update:
            stmt = stmt.with_for_update()
        return (await self._session.execute(stmt)).scalar_one()

    async def get_by_payment_intent(self, payment_intent_id: str) -> Order:
        stmt = (
            select(Order)
            .where(Order.payment_intent_id == payment_intent_id)
            .options(selectinload(Order.items))
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def list_for_user(self, user_id: str) -> list[Order]:
        # Newest first; id breaks ties between orders created in the same tick.
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items))
            .order_by(desc(Order.created_at), desc(Order.id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_order_status(self, order: Order, status: OrderStatus) -> Order:
        order.order_status = status
        order.updated_at = datetime.utcnow()
        await self._session.flush()
        return order

    async def apply_payment_outcome(
        self,
        *,
        payment_intent_id: str,
        payment_status: PaymentStatus,
        order_status: OrderStatus,
    ) -> int:
        """
        Overwrite both statuses for the order correlated with `payment_intent_id`.

        Returns the number of rows matched (0 when the token is unknown).
        """
        stmt = (
            update(Order)
            .where(Order.payment_intent_id == payment_intent_id)
            .values(
                payment_status=payment_status,
                order_status=order_status,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def delete(self, order: Order) -> None:
        await self._session.delete(order)
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Ownership checks live in the service layer; this repo is identity-agnostic.
