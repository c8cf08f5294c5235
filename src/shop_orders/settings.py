"""
shop_orders.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (service-role key, webhook secret, JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `ORDERS_`).

    The webhook refuses to work unless both `database_url` and `service_role_key`
    are present; the facade only needs `database_url`.
    """

    model_config = SettingsConfigDict(env_prefix="ORDERS_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "shop-orders"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence endpoint. None means "not provisioned".
    database_url: str | None = "sqlite+aiosqlite:///./orders.db"

    # Elevated credential: a bearer token equal to this key acts as the service identity.
    service_role_key: str | None = Field(default=None, repr=False)
    # Public client key, checked against the `apikey` header when set.
    anon_key: str | None = Field(default=None, repr=False)

    # Payment provider
    stripe_webhook_secret: str | None = Field(default=None, repr=False)
    webhook_tolerance_seconds: int = 300

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "shop-orders"
    jwt_audience: str = "shop-orders-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    @property
    def reconciler_configured(self) -> bool:
        return bool(self.database_url) and bool(self.service_role_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `create_app(settings=...)` stores the instance on app.state; request handlers read
# it from there so tests can run with isolated settings.
