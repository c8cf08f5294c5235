"""
shop_orders.api.app

FastAPI app factory for the order service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shop_orders.api.routers.dev_auth import router as dev_auth_router
from shop_orders.api.routers.health import router as health_router
from shop_orders.api.routers.orders import router as orders_router
from shop_orders.api.routers.webhooks import router as webhooks_router
from shop_orders.db.init_db import init_db
from shop_orders.db.session import create_engine, create_sessionmaker
from shop_orders.observability.logging import configure_logging, get_logger
from shop_orders.observability.middleware import RequestContextMiddleware
from shop_orders.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, webhook_configured=settings.reconciler_configured)
        engine = None
        if settings.database_url:
            engine = create_engine(settings)
            app.state.engine = engine
            app.state.sessionmaker = create_sessionmaker(engine)
            if settings.env in ("dev", "test"):
                # Prod schema comes from Alembic migrations.
                await init_db(engine)
        else:
            log.warning("database_unconfigured")
        try:
            yield
        finally:
            if engine is not None:
                await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Shop Orders",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sessionmaker = None

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(orders_router)
    app.include_router(webhooks_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Business rules stay in services/policies; this file only wires them together.
