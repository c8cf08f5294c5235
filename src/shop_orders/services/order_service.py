"""
shop_orders.services.order_service

Order access facade (transaction owner for application callers).

Responsibilities:
- Create orders (with optional items) on behalf of an explicit caller.
- Read orders by payment intent or owner, items included.
- Advance fulfillment status.
- Apply ownership policies before every read/write.

Storage errors (NoResultFound, MultipleResultsFound, IntegrityError, ...) are not
translated here; they surface to the caller as raised by SQLAlchemy.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_orders.auth.models import Principal
from shop_orders.db.models import Order, OrderItem, OrderStatus
from shop_orders.db.repositories.orders import OrderRepo
from shop_orders.observability.logging import get_logger
from shop_orders.policies import (
    ensure_can_insert_items,
    ensure_can_insert_order,
    ensure_can_list_orders,
    ensure_can_read_order,
    ensure_can_set_initial_status,
    ensure_can_update_order,
)
from shop_orders.schemas import OrderCreate, OrderItemCreate

log = get_logger(__name__)


class OrderService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._orders = OrderRepo(session)

    async def create_order(self, principal: Principal, data: OrderCreate) -> Order:
        fields = data.order_fields()
        if fields["user_id"] is None and not principal.is_service:
            fields["user_id"] = principal.subject
        ensure_can_insert_order(principal, fields["user_id"])
        ensure_can_set_initial_status(principal, data.payment_status, data.order_status)

        try:
            order = await self._orders.create(
                items=[i.model_dump() for i in data.items], **fields
            )
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        log.info(
            "order_created",
            order_id=str(order.id),
            user_id=order.user_id,
            payment_intent_id=order.payment_intent_id,
            items=len(order.items),
        )
        return order

    async def get_order_by_payment_intent(self, principal: Principal, payment_intent_id: str) -> Order:
        order = await self._orders.get_by_payment_intent(payment_intent_id)
        ensure_can_read_order(principal, order)
        return order

    async def get_user_orders(self, principal: Principal, user_id: str) -> list[Order]:
        ensure_can_list_orders(principal, user_id)
        return await self._orders.list_for_user(user_id)

    async def update_order_status(
        self,
        principal: Principal,
        order_id: uuid.UUID,
        status: OrderStatus | str,
    ) -> Order:
        # Raises ValueError for anything outside the enumeration.
        new_status = OrderStatus(status)

        try:
            order = await self._orders.get(order_id, for_update=True)
            ensure_can_update_order(principal, order)
            previous = order.order_status
            await self._orders.set_order_status(order, new_status)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        log.info(
            "order_status_updated",
            order_id=str(order.id),
            previous=previous.value,
            order_status=new_status.value,
            actor=principal.subject,
        )
        return order

    async def add_items(
        self,
        principal: Principal,
        order_id: uuid.UUID,
        items: Sequence[OrderItemCreate],
    ) -> list[OrderItem]:
        try:
            order = await self._orders.get(order_id, for_update=True)
            ensure_can_insert_items(principal, order)
            created = await self._orders.add_items(order, [i.model_dump() for i in items])
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return created


# --- Module Notes -----------------------------------------------------------
# The HTTP router maps the raised exceptions to status codes; other callers (scripts,
# tests) see them directly.
