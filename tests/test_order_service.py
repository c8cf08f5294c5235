"""
tests.test_order_service

Order facade behaviour with explicit principals.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import MultipleResultsFound, NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import order_payload
from shop_orders.auth.models import Principal
from shop_orders.db.models import OrderStatus, PaymentStatus
from shop_orders.db.repositories.orders import OrderRepo
from shop_orders.policies import OrderAccessDenied
from shop_orders.schemas import OrderCreate, OrderItemCreate
from shop_orders.services.order_service import OrderService

ALICE = Principal(subject="alice", roles=frozenset())
BOB = Principal(subject="bob", roles=frozenset())
SERVICE = Principal.service()


@pytest.mark.asyncio
async def test_create_order_defaults_owner_to_caller(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(ALICE, OrderCreate(**order_payload(payment_intent_id="pi_1")))

    assert order.user_id == "alice"
    assert order.payment_status is PaymentStatus.pending
    assert order.order_status is OrderStatus.processing
    assert order.total_amount == Decimal("49.90")
    assert order.shipping_address["postalCode"] == "N1 9GU"
    assert [(i.product_id, i.quantity, i.selected_color) for i in order.items] == [
        ("poster-01", 2, "black")
    ]


@pytest.mark.parametrize("missing", ["customer_name", "customer_email", "total_amount"])
def test_create_order_requires_core_fields(missing: str) -> None:
    body = order_payload()
    del body[missing]
    with pytest.raises(ValidationError):
        OrderCreate(**body)


def test_item_quantity_validated_before_storage() -> None:
    with pytest.raises(ValidationError):
        OrderItemCreate(product_id="p", product_name="P", quantity=0, unit_price="1.00")


@pytest.mark.asyncio
async def test_create_order_for_someone_else_is_denied(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    with pytest.raises(OrderAccessDenied):
        await svc.create_order(ALICE, OrderCreate(**order_payload(user_id="bob")))


@pytest.mark.asyncio
async def test_service_may_create_for_any_user(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(SERVICE, OrderCreate(**order_payload(user_id="bob")))
    assert order.user_id == "bob"


@pytest.mark.asyncio
async def test_user_cannot_create_order_already_paid(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    body = order_payload(payment_status="succeeded", order_status="delivered")
    with pytest.raises(OrderAccessDenied):
        await svc.create_order(ALICE, OrderCreate(**body))
    with pytest.raises(OrderAccessDenied):
        await svc.create_order(ALICE, OrderCreate(**order_payload(order_status="shipped")))

    assert await svc.get_user_orders(ALICE, "alice") == []


@pytest.mark.asyncio
async def test_service_may_create_order_with_explicit_statuses(session: AsyncSession) -> None:
    body = order_payload(user_id="bob", payment_status="succeeded", order_status="confirmed")
    order = await OrderService(session=session).create_order(SERVICE, OrderCreate(**body))
    assert order.payment_status is PaymentStatus.succeeded
    assert order.order_status is OrderStatus.confirmed


@pytest.mark.asyncio
async def test_get_order_by_payment_intent_includes_items(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    created = await svc.create_order(ALICE, OrderCreate(**order_payload(payment_intent_id="pi_x")))

    found = await svc.get_order_by_payment_intent(ALICE, "pi_x")
    assert found.id == created.id
    assert len(found.items) == 1


@pytest.mark.asyncio
async def test_get_order_by_unknown_payment_intent_raises(session: AsyncSession) -> None:
    with pytest.raises(NoResultFound):
        await OrderService(session=session).get_order_by_payment_intent(ALICE, "pi_missing")


@pytest.mark.asyncio
async def test_get_order_by_payment_intent_denies_other_users(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    await svc.create_order(ALICE, OrderCreate(**order_payload(payment_intent_id="pi_a")))
    with pytest.raises(OrderAccessDenied):
        await svc.get_order_by_payment_intent(BOB, "pi_a")


@pytest.mark.asyncio
async def test_multiple_match_surfaces_storage_error(session: AsyncSession, monkeypatch) -> None:
    async def _boom(self, payment_intent_id):
        raise MultipleResultsFound("Multiple rows were found when exactly one was required")

    monkeypatch.setattr(OrderRepo, "get_by_payment_intent", _boom)
    with pytest.raises(MultipleResultsFound):
        await OrderService(session=session).get_order_by_payment_intent(SERVICE, "pi_any")


@pytest.mark.asyncio
async def test_user_orders_newest_first(session: AsyncSession) -> None:
    repo = OrderRepo(session)
    base = datetime(2025, 6, 1, 12, 0, 0)
    # Inserted out of order on purpose.
    for label, offset in (("middle", 1), ("oldest", 0), ("newest", 2)):
        await repo.create(
            user_id="alice",
            customer_name=label,
            customer_email="alice@example.com",
            total_amount=Decimal("1.00"),
            created_at=base + timedelta(minutes=offset),
        )
    await repo.create(
        user_id="bob", customer_name="other", customer_email="bob@example.com", total_amount=Decimal("1")
    )
    await session.commit()

    orders = await OrderService(session=session).get_user_orders(ALICE, "alice")
    assert [o.customer_name for o in orders] == ["newest", "middle", "oldest"]


@pytest.mark.asyncio
async def test_user_orders_empty_is_not_an_error(session: AsyncSession) -> None:
    assert await OrderService(session=session).get_user_orders(ALICE, "alice") == []


@pytest.mark.asyncio
async def test_listing_another_users_orders_is_denied(session: AsyncSession) -> None:
    with pytest.raises(OrderAccessDenied):
        await OrderService(session=session).get_user_orders(ALICE, "bob")


@pytest.mark.asyncio
async def test_update_order_status_refreshes_timestamp(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(ALICE, OrderCreate(**order_payload()))
    order.updated_at = datetime(2020, 1, 1)
    await session.commit()

    updated = await svc.update_order_status(ALICE, order.id, "shipped")
    assert updated.order_status is OrderStatus.shipped
    assert updated.updated_at > datetime(2020, 1, 1)


@pytest.mark.asyncio
async def test_update_order_status_rejects_unknown_value(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(ALICE, OrderCreate(**order_payload()))
    with pytest.raises(ValueError):
        await svc.update_order_status(ALICE, order.id, "teleported")


@pytest.mark.asyncio
async def test_update_missing_order_raises(session: AsyncSession) -> None:
    with pytest.raises(NoResultFound):
        await OrderService(session=session).update_order_status(ALICE, uuid.uuid4(), "shipped")


@pytest.mark.asyncio
async def test_update_by_non_owner_is_denied(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(ALICE, OrderCreate(**order_payload()))
    order_id = order.id
    with pytest.raises(OrderAccessDenied):
        await svc.update_order_status(BOB, order_id, "shipped")

    # The failed update rolled back and expired loaded rows; reload explicitly.
    reloaded = await OrderRepo(session).get(order_id)
    assert reloaded.order_status is OrderStatus.processing


@pytest.mark.asyncio
async def test_add_items_inherits_order_ownership(session: AsyncSession) -> None:
    svc = OrderService(session=session)
    order = await svc.create_order(ALICE, OrderCreate(**order_payload(items=[])))
    item = OrderItemCreate(product_id="mug", product_name="Mug", unit_price="8.50")

    created = await svc.add_items(ALICE, order.id, [item])
    assert created[0].order_id == order.id
    assert created[0].quantity == 1

    with pytest.raises(OrderAccessDenied):
        await svc.add_items(BOB, order.id, [item])
