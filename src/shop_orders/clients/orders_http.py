"""
shop_orders.clients.orders_http

Thin async client for the `/v1/orders` API.

Responsibilities:
- Attach the public `apikey` header and the caller's bearer token.
- Expose the order facade operations as plain dict-returning calls.
- Let HTTP failures surface as `httpx.HTTPStatusError`.

Construct one per caller and pass it down; there is no module-level instance.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx


class OrdersClientConfigError(Exception):
    pass


class OrdersApiClient:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        base_url: str | None,
        anon_key: str | None,
        access_token: str,
    ) -> None:
        if not base_url or not anon_key:
            raise OrdersClientConfigError("Missing order service URL or public API key")
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {access_token}",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        r = await self._http.request(
            method, f"{self._base_url}{path}", headers=self._headers, **kwargs
        )
        r.raise_for_status()
        return r.json()

    async def create_order(self, order: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/orders", json=order)

    async def get_order_by_payment_intent(self, payment_intent_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/orders/by-payment-intent/{payment_intent_id}")

    async def get_user_orders(self, user_id: str | None = None) -> list[dict[str, Any]]:
        params = {"user_id": user_id} if user_id else None
        return await self._request("GET", "/v1/orders", params=params)

    async def update_order_status(self, order_id: uuid.UUID | str, status: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/v1/orders/{order_id}/status", json={"order_status": status}
        )
