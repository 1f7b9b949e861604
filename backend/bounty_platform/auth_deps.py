from __future__ import annotations
import hmac
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bounty_platform.config import Settings, get_settings

security = HTTPBearer(auto_error=False)


def _check_bearer(expected: str, credentials: HTTPAuthorizationCredentials | None) -> None:
    # An unset secret leaves the route open
    if not expected:
        return
    token = credentials.credentials if credentials else ""
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    _check_bearer(settings.admin_api_key, credentials)


async def require_webhook_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    _check_bearer(settings.webhook_secret, credentials)
