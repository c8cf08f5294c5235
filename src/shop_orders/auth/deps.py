"""
shop_orders.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Check the public `apikey` header when a public key is configured.
- Convert a bearer credential into a typed `Principal`:
  - the configured service-role key maps to the elevated service identity;
  - anything else must be a valid user JWT.
"""

from __future__ import annotations

import hmac

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from shop_orders.api.deps import settings_dep
from shop_orders.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from shop_orders.auth.models import SERVICE_ROLE, Principal
from shop_orders.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def require_api_key(
    apikey: str | None = Header(default=None),
    settings: Settings = Depends(settings_dep),
) -> None:
    if not settings.anon_key:
        return
    if apikey is None or not hmac.compare_digest(apikey, settings.anon_key):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    token = creds.credentials
    if settings.service_role_key and hmac.compare_digest(token, settings.service_role_key):
        return Principal.service()

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=token)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    roles_raw = payload.get("roles", [])
    if not subject:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    if not isinstance(roles_raw, list):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token roles")

    # The service role is only granted through the service-role key, never via a user token.
    roles: frozenset[str] = frozenset(str(r) for r in roles_raw) - {SERVICE_ROLE}
    return Principal(subject=subject, roles=roles)


# --- Module Notes -----------------------------------------------------------
# Authorization (ownership) is not decided here; `shop_orders.policies` does that
# against the loaded rows.
