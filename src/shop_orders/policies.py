"""
shop_orders.policies

Row-level access rules for orders and order items.

Responsibilities:
- Decide whether a `Principal` may read, insert or update a given order.
- Derive item permissions from the parent order (items carry no owner of their own).
- Keep new orders from non-service callers at pending/processing.
"""

from __future__ import annotations

from shop_orders.auth.models import Principal
from shop_orders.db.models import Order, OrderStatus, PaymentStatus


class OrderAccessDenied(Exception):
    def __init__(self, action: str, subject: str) -> None:
        super().__init__(f"{subject} may not {action} this order")
        self.action = action
        self.subject = subject


def _owns(principal: Principal, user_id: str | None) -> bool:
    # Orders without an owner are reachable only by the service identity.
    return principal.is_service or (user_id is not None and user_id == principal.subject)


def ensure_can_insert_order(principal: Principal, user_id: str | None) -> None:
    if not _owns(principal, user_id):
        raise OrderAccessDenied("insert", principal.subject)


def ensure_can_read_order(principal: Principal, order: Order) -> None:
    if not _owns(principal, order.user_id):
        raise OrderAccessDenied("read", principal.subject)


def ensure_can_update_order(principal: Principal, order: Order) -> None:
    if not _owns(principal, order.user_id):
        raise OrderAccessDenied("update", principal.subject)


def ensure_can_insert_items(principal: Principal, order: Order) -> None:
    if not _owns(principal, order.user_id):
        raise OrderAccessDenied("add items to", principal.subject)


def ensure_can_list_orders(principal: Principal, user_id: str) -> None:
    if not _owns(principal, user_id):
        raise OrderAccessDenied("list", principal.subject)


def ensure_can_set_initial_status(
    principal: Principal, payment_status: PaymentStatus, order_status: OrderStatus
) -> None:
    # Payment state past the defaults is only ever written by the reconciler.
    if principal.is_service:
        return
    if payment_status is not PaymentStatus.pending or order_status is not OrderStatus.processing:
        raise OrderAccessDenied("set the payment state of", principal.subject)
