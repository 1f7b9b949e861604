from __future__ import annotations
from typing import Any


class PlatformError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ConfigurationError(PlatformError):
    """A required credential or identifier is missing from the environment."""
    status_code = 500


class UpstreamError(PlatformError):
    """
    A third-party API (Airtable, Cloudinary, Privy) failed.
    status_code mirrors the upstream HTTP status when it is an error status,
    otherwise 502 (network failures, malformed payloads).
    """

    def __init__(
        self,
        service: str,
        message: str,
        *,
        upstream_status: int | None = None,
        error_type: str | None = None,
        details: Any = None,
    ):
        super().__init__(message, details=details)
        self.service = service
        self.upstream_status = upstream_status
        self.error_type = error_type
        if upstream_status is not None and 400 <= upstream_status < 600:
            self.status_code = upstream_status
        else:
            self.status_code = 502

    @property
    def not_found(self) -> bool:
        return self.upstream_status == 404 or self.error_type in ("NOT_FOUND", "MODEL_ID_NOT_FOUND")
