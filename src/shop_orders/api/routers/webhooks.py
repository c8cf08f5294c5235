"""
shop_orders.api.routers.webhooks

Payment provider webhook endpoint.

Responsibilities:
- Answer CORS preflight and reject non-POST methods.
- Refuse to run without the persistence endpoint and service-role credential.
- Verify the event signature, then hand the event to `PaymentEventReconciler`.

Response contract (plain text bodies):
- 200 "ok"                            OPTIONS
- 200 "Webhook processed successfully" event accepted (even if no order matched)
- 400 "Invalid signature"             missing/invalid stripe-signature
- 405 "Method not allowed"            any other method
- 500 "Service configuration error"   missing config
- 500 "Webhook processing failed"     malformed body or unexpected error
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from shop_orders.api.deps import sessionmaker_from_app, settings_dep
from shop_orders.auth.models import Principal
from shop_orders.observability.logging import get_logger
from shop_orders.services.reconciler import (
    PaymentEventReconciler,
    WebhookSignatureError,
    parse_event,
    verify_signature,
)
from shop_orders.settings import Settings

log = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

WEBHOOK_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, stripe-signature",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _reply(body: str, status_code: int = 200) -> PlainTextResponse:
    return PlainTextResponse(body, status_code=status_code, headers=WEBHOOK_CORS_HEADERS)


@router.api_route(
    "/webhook",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"],
    response_class=PlainTextResponse,
)
async def payment_webhook(
    request: Request,
    settings: Settings = Depends(settings_dep),
) -> PlainTextResponse:
    if request.method == "OPTIONS":
        return _reply("ok")
    if request.method != "POST":
        return _reply("Method not allowed", HTTP_405_METHOD_NOT_ALLOWED)

    session_factory = sessionmaker_from_app(request)
    if not settings.reconciler_configured or session_factory is None:
        log.error("webhook_config_missing")
        return _reply("Service configuration error", HTTP_500_INTERNAL_SERVER_ERROR)
    if not settings.stripe_webhook_secret and settings.env == "prod":
        log.error("webhook_secret_missing")
        return _reply("Service configuration error", HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        payload = await request.body()
        if settings.stripe_webhook_secret:
            verify_signature(
                payload=payload,
                signature=request.headers.get("stripe-signature"),
                secret=settings.stripe_webhook_secret,
                tolerance=settings.webhook_tolerance_seconds,
            )
        else:
            log.warning("webhook_signature_unverified", env=settings.env)

        event = parse_event(payload)
        async with session_factory() as session:
            reconciler = PaymentEventReconciler(session=session, principal=Principal.service())
            await reconciler.reconcile(event)
    except WebhookSignatureError as e:
        log.warning(
            "webhook_signature_rejected",
            error=str(e),
            stripe_signature=request.headers.get("stripe-signature"),
        )
        return _reply("Invalid signature", HTTP_400_BAD_REQUEST)
    except Exception:
        log.exception("webhook_processing_failed")
        return _reply("Webhook processing failed", HTTP_500_INTERNAL_SERVER_ERROR)

    return _reply("Webhook processed successfully")
