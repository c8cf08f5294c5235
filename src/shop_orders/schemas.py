"""
shop_orders.schemas

Pydantic models at the service boundary.

Responsibilities:
- Validate order/item input before it reaches the database.
- Serialize ORM rows for API responses.
- Model the payment provider's event envelope.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shop_orders.db.models import OrderStatus, PaymentStatus


class ShippingAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1, alias="postalCode")
    country: str = Field(min_length=1)


class OrderItemCreate(BaseModel):
    product_id: str = Field(min_length=1, max_length=128)
    product_name: str = Field(min_length=1, max_length=256)
    quantity: int = Field(default=1, gt=0)
    unit_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    selected_color: str | None = Field(default=None, max_length=64)


class OrderCreate(BaseModel):
    # Defaults to the caller when omitted.
    user_id: str | None = Field(default=None, max_length=256)

    customer_name: str = Field(min_length=1, max_length=256)
    customer_email: str = Field(min_length=3, max_length=320)
    customer_phone: str | None = Field(default=None, max_length=64)
    shipping_address: ShippingAddress | None = None

    total_amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    currency: str = Field(default="eur", min_length=3, max_length=3)

    payment_intent_id: str | None = Field(default=None, max_length=255)
    payment_status: PaymentStatus = PaymentStatus.pending
    order_status: OrderStatus = OrderStatus.processing

    items: list[OrderItemCreate] = Field(default_factory=list)

    def order_fields(self) -> dict[str, Any]:
        fields = self.model_dump(exclude={"items", "shipping_address"})
        fields["shipping_address"] = (
            self.shipping_address.model_dump(by_alias=True) if self.shipping_address else None
        )
        return fields


class OrderStatusUpdate(BaseModel):
    order_status: OrderStatus


class OrderItemsAdd(BaseModel):
    items: list[OrderItemCreate] = Field(min_length=1)


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    selected_color: str | None
    created_at: datetime


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str | None
    customer_name: str
    customer_email: str
    customer_phone: str | None
    shipping_address: dict[str, Any] | None
    total_amount: Decimal
    currency: str
    payment_intent_id: str | None
    payment_status: PaymentStatus
    order_status: OrderStatus
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemOut] = Field(default_factory=list)


class PaymentObject(BaseModel):
    # Only `id` is read; the provider sends many more fields.
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)


class PaymentEventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: PaymentObject


class PaymentEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str = Field(min_length=1)
    # Only dispatched event types need a payment object.
    data: PaymentEventData | None = None
