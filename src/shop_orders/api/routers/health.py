"""
shop_orders.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Liveness check (`/healthz`).
- Readiness check (`/readyz`): DB round trip plus whether the payment webhook can run.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from shop_orders.api.deps import db_session, settings_dep
from shop_orders.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {
        "status": "ready",
        "webhook": "configured" if settings.reconciler_configured else "unconfigured",
    }
