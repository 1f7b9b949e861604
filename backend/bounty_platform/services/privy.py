from __future__ import annotations
import base64
from typing import Any
from urllib.parse import quote
import httpx
import structlog
from bounty_platform.config import Settings
from bounty_platform.errors import ConfigurationError, UpstreamError

log = structlog.get_logger()

SERVICE = "privy"


class PrivyClient:
    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self._http = http
        self.settings = settings

    @property
    def configured(self) -> bool:
        return bool(self.settings.privy_app_id and self.settings.privy_app_secret)

    def _headers(self) -> dict[str, str]:
        if not self.configured:
            raise ConfigurationError("Missing Privy credentials")
        app_id, secret = self.settings.privy_app_id, self.settings.privy_app_secret
        basic = base64.b64encode(f"{app_id}:{secret}".encode()).decode()
        return {
            "Content-Type": "application/json",
            "privy-app-id": app_id,
            "Authorization": f"Basic {basic}",
        }

    async def _call(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        url = f"{self.settings.privy_api_url.rstrip('/')}{path}"
        try:
            resp = await self._http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(SERVICE, "Network error connecting to Privy", details=str(e)) from e
        try:
            body = resp.json()
        except ValueError:
            body = {"message": resp.text}
        if resp.status_code >= 400:
            log.error("privy.error", status=resp.status_code, path=path)
            raise UpstreamError(SERVICE, "Privy API request failed", upstream_status=resp.status_code, details=body)
        return body if isinstance(body, dict) else {"data": body}

    async def set_custom_metadata(self, did: str, metadata: dict[str, Any]) -> dict[str, Any]:
        log.info("privy.update_metadata", did=did, keys=sorted(metadata))
        return await self._call(
            "POST", f"/users/{quote(did, safe='')}/custom_metadata", json={"custom_metadata": metadata}
        )

    async def app_info(self) -> dict[str, Any]:
        return await self._call("GET", "/apps/me")

    def config_summary(self) -> dict[str, Any]:
        app_id, secret = self.settings.privy_app_id, self.settings.privy_app_secret
        return {
            "hasAppId": bool(app_id),
            "hasAppSecret": bool(secret),
            "appIdLength": len(app_id),
            "appSecretLength": len(secret),
            "appIdPrefix": f"{app_id[:8]}..." if app_id else "missing",
        }
