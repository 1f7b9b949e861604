from __future__ import annotations
import hashlib
import time
from typing import Any, Mapping
import httpx
import structlog
from bounty_platform.config import Settings
from bounty_platform.errors import ConfigurationError, UpstreamError

log = structlog.get_logger()

SERVICE = "cloudinary"

RAW_DOCUMENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def resource_type_for(mime: str | None) -> str:
    if not mime:
        return "auto"
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime in RAW_DOCUMENT_TYPES:
        return "raw"
    return "auto"


def mime_from_data_uri(data: str) -> str | None:
    # data:<mime>;base64,<payload>
    if not data.startswith("data:") or ";" not in data:
        return None
    return data[5:].split(";", 1)[0] or None


def format_context(context: Mapping[str, Any]) -> str:
    """key=value|key=value with '=' and '|' inside values percent-escaped."""
    parts = []
    for key, value in context.items():
        safe = str(value).replace("=", "%3D").replace("|", "%7C")
        parts.append(f"{key}={safe}")
    return "|".join(parts)


def upload_params(
    *,
    timestamp: int | str,
    folder: str | None = None,
    public_id: str | None = None,
    tags: list[str] | None = None,
    context: Mapping[str, Any] | None = None,
    overwrite: bool | None = None,
) -> dict[str, str]:
    """Signable upload parameters, sorted by key."""
    params: dict[str, str] = {"timestamp": str(timestamp)}
    if folder:
        params["folder"] = folder
    if public_id:
        params["public_id"] = public_id
    if tags:
        params["tags"] = ",".join(tags)
    if context:
        ctx = format_context(context)
        if ctx:
            params["context"] = ctx
    if overwrite is not None:
        params["overwrite"] = "true" if overwrite else "false"
    return dict(sorted(params.items()))


def sign(params: Mapping[str, str], api_secret: str) -> str:
    """Cloudinary signature: sha1 of sorted 'k=v&k=v' followed directly by the API secret."""
    to_sign = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v not in (None, ""))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryClient:
    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self._http = http
        self.settings = settings

    def _require(self) -> None:
        s = self.settings
        if not s.cloudinary_cloud_name or not s.cloudinary_api_key:
            raise ConfigurationError("Missing Cloudinary credentials")
        if not s.cloudinary_api_secret:
            raise ConfigurationError("Missing Cloudinary API secret")

    def signature(self, params: Mapping[str, str]) -> str:
        if not self.settings.cloudinary_api_secret:
            raise ConfigurationError("Missing Cloudinary API secret")
        return sign(params, self.settings.cloudinary_api_secret)

    async def upload(
        self,
        data_uri: str,
        *,
        folder: str | None = None,
        public_id: str | None = None,
        tags: list[str] | None = None,
        context: Mapping[str, Any] | None = None,
        resource_type: str | None = None,
        overwrite: bool | None = None,
    ) -> dict[str, Any]:
        """Signed upload of a base64 data URI; returns Cloudinary's JSON (secure_url, public_id, ...)."""
        self._require()
        rtype = resource_type or resource_type_for(mime_from_data_uri(data_uri))
        params = upload_params(
            timestamp=int(time.time()), folder=folder, public_id=public_id,
            tags=tags, context=context, overwrite=overwrite,
        )
        form = dict(params, api_key=self.settings.cloudinary_api_key, signature=self.signature(params))
        url = f"{self.settings.cloudinary_api_url.rstrip('/')}/{self.settings.cloudinary_cloud_name}/{rtype}/upload"
        log.info("cloudinary.upload", resource_type=rtype, folder=folder, public_id=public_id)
        try:
            resp = await self._http.post(url, data=dict(form, file=data_uri))
        except httpx.HTTPError as e:
            raise UpstreamError(SERVICE, f"Cloudinary upload failed: {e}") from e
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            err = body.get("error") if isinstance(body, dict) else None
            msg = err.get("message") if isinstance(err, dict) else None
            raise UpstreamError(
                SERVICE, f"Cloudinary upload failed: {msg or resp.status_code}",
                upstream_status=resp.status_code, details=body or None,
            )
        if not isinstance(body, dict) or "secure_url" not in body:
            raise UpstreamError(SERVICE, "Upload failed - no result returned", details=body or None)
        return body

