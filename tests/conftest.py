"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an ASGI HTTP client,
sessions for direct DB assertions, and credential/signature helpers.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from shop_orders.api.app import create_app
from shop_orders.auth.jwt import JwtConfig, issue_token
from shop_orders.settings import Settings

SERVICE_KEY = "service-role-test-key"
ANON_KEY = "anon-test-key"
WEBHOOK_SECRET = "whsec_test_secret"


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "env": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        "service_role_key": SERVICE_KEY,
        "anon_key": ANON_KEY,
        "stripe_webhook_secret": WEBHOOK_SECRET,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def session(app: FastAPI) -> AsyncIterator[AsyncSession]:
    async with app.state.sessionmaker() as s:
        yield s


@pytest.fixture
def user_headers(settings: Settings) -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        token = issue_token(cfg=JwtConfig.from_settings(settings), subject=user_id)
        return {"apikey": ANON_KEY, "Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def service_headers() -> dict[str, str]:
    return {"apikey": ANON_KEY, "Authorization": f"Bearer {SERVICE_KEY}"}


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def order_payload(**overrides) -> dict:
    body = {
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "total_amount": "49.90",
        "shipping_address": {
            "address": "12 Analytical St",
            "city": "London",
            "postalCode": "N1 9GU",
            "country": "GB",
        },
        "items": [
            {
                "product_id": "poster-01",
                "product_name": "Engine Poster",
                "quantity": 2,
                "unit_price": "24.95",
                "selected_color": "black",
            }
        ],
    }
    body.update(overrides)
    return body
