"""
shop_orders.services.reconciler

Payment event reconciliation.

Responsibilities:
- Verify the provider's signature over the raw webhook body.
- Parse the event envelope.
- Map `payment_intent.*` event types to (payment_status, order_status) and apply
  them to the order correlated by payment intent id, as the service identity.

Per-event storage failures are logged and reported in the outcome, not raised; the
webhook still acknowledges delivery so the provider does not retry-storm.
"""

from __future__ import annotations

from dataclasses import dataclass

import stripe
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shop_orders.auth.models import Principal
from shop_orders.db.models import OrderStatus, PaymentStatus
from shop_orders.db.repositories.orders import OrderRepo
from shop_orders.observability.logging import get_logger
from shop_orders.policies import OrderAccessDenied
from shop_orders.schemas import PaymentEvent

log = get_logger(__name__)


PAYMENT_OUTCOMES: dict[str, tuple[PaymentStatus, OrderStatus]] = {
    "payment_intent.succeeded": (PaymentStatus.succeeded, OrderStatus.confirmed),
    "payment_intent.payment_failed": (PaymentStatus.failed, OrderStatus.canceled),
    "payment_intent.canceled": (PaymentStatus.canceled, OrderStatus.canceled),
}


class WebhookSignatureError(Exception):
    pass


class MalformedEventError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    event_type: str
    payment_intent_id: str | None
    handled: bool
    rows_matched: int = 0
    error: str | None = None


def verify_signature(*, payload: bytes, signature: str | None, secret: str, tolerance: int) -> None:
    if not signature:
        raise WebhookSignatureError("missing stripe-signature header")
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookSignatureError("payload is not valid UTF-8") from e
    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e)) from e


def parse_event(payload: bytes) -> PaymentEvent:
    try:
        return PaymentEvent.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedEventError(str(e)) from e


class PaymentEventReconciler:
    def __init__(self, *, session: AsyncSession, principal: Principal) -> None:
        if not principal.is_service:
            raise OrderAccessDenied("reconcile", principal.subject)
        self._session = session
        self._principal = principal
        self._orders = OrderRepo(session)

    async def reconcile(self, event: PaymentEvent) -> ReconcileOutcome:
        log.info("payment_event_received", event_type=event.type, event_id=event.id)

        outcome = PAYMENT_OUTCOMES.get(event.type)
        if outcome is None:
            log.info("payment_event_unhandled", event_type=event.type)
            return ReconcileOutcome(event_type=event.type, payment_intent_id=None, handled=False)

        if event.data is None:
            raise MalformedEventError(f"{event.type} event carries no payment object")
        payment_intent_id = event.data.object.id
        payment_status, order_status = outcome

        try:
            rows = await self._orders.apply_payment_outcome(
                payment_intent_id=payment_intent_id,
                payment_status=payment_status,
                order_status=order_status,
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.error(
                "payment_event_update_failed",
                event_type=event.type,
                payment_intent_id=payment_intent_id,
                error=str(e),
            )
            return ReconcileOutcome(
                event_type=event.type,
                payment_intent_id=payment_intent_id,
                handled=True,
                error=str(e),
            )

        if rows == 0:
            log.warning(
                "payment_event_unmatched",
                event_type=event.type,
                payment_intent_id=payment_intent_id,
            )
        else:
            log.info(
                "payment_event_applied",
                event_type=event.type,
                payment_intent_id=payment_intent_id,
                payment_status=payment_status.value,
                order_status=order_status.value,
                rows=rows,
            )
        return ReconcileOutcome(
            event_type=event.type,
            payment_intent_id=payment_intent_id,
            handled=True,
            rows_matched=rows,
        )


# --- Module Notes -----------------------------------------------------------
# Updates are unconditional overwrites: replaying an event is harmless, but two events
# for the same intent arriving out of order resolve as last-writer-wins.
