"""
shop_orders.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Encapsulate app.state access patterns (settings/engine/sessionmaker).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from shop_orders.settings import Settings, get_settings


def settings_dep(request: Request) -> Settings:
    # The app factory pins its settings on app.state; fall back to env for bare routers.
    return getattr(request.app.state, "settings", None) or get_settings()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession] | None:
    # Created during app lifespan in `shop_orders.api.app.create_app`; None without a database_url.
    return getattr(request.app.state, "sessionmaker", None)


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] | None = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    if session_factory is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Database not configured")
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session
