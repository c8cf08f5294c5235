"""
shop_orders.api.routers.orders

Order endpoints for application callers.

Responsibilities:
- Authenticate the caller (apikey + bearer) and pass the `Principal` to `OrderService`.
- Translate storage/policy exceptions raised by the service into HTTP errors.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from shop_orders.api.deps import db_session
from shop_orders.auth.deps import get_principal, require_api_key
from shop_orders.auth.models import Principal
from shop_orders.policies import OrderAccessDenied
from shop_orders.schemas import (
    OrderCreate,
    OrderItemOut,
    OrderItemsAdd,
    OrderOut,
    OrderStatusUpdate,
)
from shop_orders.services.order_service import OrderService

router = APIRouter(
    prefix="/v1/orders",
    tags=["orders"],
    dependencies=[Depends(require_api_key)],
)


def order_service(session: AsyncSession = Depends(db_session)) -> OrderService:
    return OrderService(session=session)


@contextmanager
def _http_errors(*, denied_status: int = HTTP_404_NOT_FOUND) -> Iterator[None]:
    try:
        yield
    except NoResultFound as e:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Order not found") from e
    except MultipleResultsFound as e:
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="Payment intent matches several orders"
        ) from e
    except OrderAccessDenied as e:
        # Reads hide foreign orders as 404; writes say 403.
        detail = "Order not found" if denied_status == HTTP_404_NOT_FOUND else str(e)
        raise HTTPException(status_code=denied_status, detail=detail) from e
    except IntegrityError as e:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Order conflicts with existing data") from e


@router.post("", response_model=OrderOut, status_code=HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(order_service),
) -> OrderOut:
    with _http_errors(denied_status=HTTP_403_FORBIDDEN):
        order = await service.create_order(principal, body)
    return OrderOut.model_validate(order)


@router.get("", response_model=list[OrderOut])
async def list_orders(
    user_id: str | None = Query(default=None, max_length=256),
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(order_service),
) -> list[OrderOut]:
    with _http_errors(denied_status=HTTP_403_FORBIDDEN):
        orders = await service.get_user_orders(principal, user_id or principal.subject)
    return [OrderOut.model_validate(o) for o in orders]


@router.get("/by-payment-intent/{payment_intent_id}", response_model=OrderOut)
async def get_order_by_payment_intent(
    payment_intent_id: str,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(order_service),
) -> OrderOut:
    with _http_errors():
        order = await service.get_order_by_payment_intent(principal, payment_intent_id)
    return OrderOut.model_validate(order)


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(order_service),
) -> OrderOut:
    with _http_errors(denied_status=HTTP_403_FORBIDDEN):
        order = await service.update_order_status(principal, order_id, body.order_status)
    return OrderOut.model_validate(order)


@router.post(
    "/{order_id}/items",
    response_model=list[OrderItemOut],
    status_code=HTTP_201_CREATED,
)
async def add_order_items(
    order_id: uuid.UUID,
    body: OrderItemsAdd,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(order_service),
) -> list[OrderItemOut]:
    with _http_errors(denied_status=HTTP_403_FORBIDDEN):
        items = await service.add_items(principal, order_id, body.items)
    return [OrderItemOut.model_validate(i) for i in items]


# --- Module Notes -----------------------------------------------------------
# Ownership failures on update return 403 only after the order is found; unknown ids
# are always 404.
