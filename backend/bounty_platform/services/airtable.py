from __future__ import annotations
from typing import Any
from urllib.parse import quote
import httpx
import structlog
from bounty_platform.config import Settings
from bounty_platform.errors import ConfigurationError, UpstreamError

log = structlog.get_logger()

SERVICE = "airtable"


def formula_string(value: str) -> str:
    """Quote a value for use inside an Airtable formula."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _error_from_response(resp: httpx.Response) -> UpstreamError:
    try:
        payload = resp.json()
    except ValueError:
        payload = {}
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        error_type = err.get("type")
        message = err.get("message") or error_type
    elif isinstance(err, str):
        error_type, message = err, err
    else:
        error_type, message = None, None
    message = message or f"Airtable request failed with status {resp.status_code}"
    return UpstreamError(
        SERVICE, message, upstream_status=resp.status_code, error_type=error_type, details=payload or None
    )


class AirtableClient:
    """Thin async wrapper over the Airtable REST API (one base)."""

    def __init__(self, http: httpx.AsyncClient, *, token: str, base_id: str, api_url: str):
        self._http = http
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    @classmethod
    def from_settings(cls, http: httpx.AsyncClient, settings: Settings) -> "AirtableClient":
        token = settings.airtable_personal_access_token
        if not token:
            raise ConfigurationError("AIRTABLE_PERSONAL_ACCESS_TOKEN is not defined in environment variables")
        if not settings.airtable_base_id:
            raise ConfigurationError("AIRTABLE_BASE_ID is not defined in environment variables")
        if not token.startswith("pat"):
            log.warning("airtable.token_format", hint="personal access tokens start with 'pat'")
        return cls(http, token=token, base_id=settings.airtable_base_id, api_url=settings.airtable_api_url)

    def _table_url(self, table: str, record_id: str | None = None) -> str:
        url = f"{self.api_url}/{self.base_id}/{quote(table, safe='')}"
        if record_id:
            url += f"/{quote(record_id, safe='')}"
        return url

    async def _request(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        log.debug("airtable.request", method=method, url=url)
        try:
            resp = await self._http.request(method, url, headers=self._headers, **kwargs)
        except httpx.TimeoutException as e:
            raise UpstreamError(SERVICE, "Airtable request timed out", details=str(e)) from e
        except httpx.HTTPError as e:
            raise UpstreamError(SERVICE, f"Could not reach Airtable: {e}") from e
        if resp.status_code >= 400:
            err = _error_from_response(resp)
            log.error("airtable.error", status=resp.status_code, error_type=err.error_type, message=err.message)
            raise err
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(SERVICE, "Airtable returned a non-JSON response") from e

    async def list_records(
        self,
        table: str,
        *,
        view: str | None = None,
        max_records: int | None = None,
        page_size: int | None = None,
        filter_by_formula: str | None = None,
        fields: list[str] | None = None,
        sort: list[tuple[str, str]] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch every page of a table listing, following Airtable's offset cursor."""
        params: list[tuple[str, str]] = []
        if view:
            params.append(("view", view))
        if max_records:
            params.append(("maxRecords", str(max_records)))
        if page_size:
            params.append(("pageSize", str(page_size)))
        if filter_by_formula:
            params.append(("filterByFormula", filter_by_formula))
        for name in fields or []:
            params.append(("fields[]", name))
        for i, (field, direction) in enumerate(sort or []):
            params.append((f"sort[{i}][field]", field))
            params.append((f"sort[{i}][direction]", direction))

        records: list[dict[str, Any]] = []
        offset: str | None = None
        url = self._table_url(table)
        while True:
            page_params = params + ([("offset", offset)] if offset else [])
            data = await self._request("GET", url, params=page_params)
            records.extend(data.get("records") or [])
            offset = data.get("offset")
            if not offset or (max_records and len(records) >= max_records):
                break
        return records[:max_records] if max_records else records

    async def get_record(self, table: str, record_id: str) -> dict[str, Any]:
        return await self._request("GET", self._table_url(table, record_id))

    async def create_record(self, table: str, fields: dict[str, Any], *, typecast: bool = False) -> dict[str, Any]:
        body: dict[str, Any] = {"fields": fields}
        if typecast:
            body["typecast"] = True
        return await self._request("POST", self._table_url(table), json=body)

    async def update_record(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", self._table_url(table, record_id), json={"fields": fields})

    async def ping(self, table: str) -> int:
        """Fetch at most one record; returns the number of records seen."""
        data = await self._request("GET", self._table_url(table), params={"maxRecords": "1"})
        return len(data.get("records") or [])


def describe_airtable_error(err: UpstreamError) -> str:
    """User-facing explanation for an Airtable failure during a write."""
    msg = err.message or ""
    kind = err.error_type or ""
    if "Unknown field name" in msg:
        field = msg.split('Unknown field name: "', 1)[-1].split('"', 1)[0] if '"' in msg else "unknown field"
        return (
            "Submission failed due to a configuration issue. "
            f'Please contact support and mention: Unknown field "{field}".'
        )
    if "cannot accept the provided value" in msg:
        field = msg.split('Field "', 1)[-1].split('"', 1)[0] if 'Field "' in msg else "unknown field"
        return (
            "Submission failed due to a configuration issue. "
            f'Please contact support and mention: Invalid value for field "{field}".'
        )
    if "INVALID_PERMISSIONS" in kind or "INVALID_PERMISSIONS" in msg:
        return "Permission error: The Airtable token doesn't have write access to this table."
    if err.not_found:
        return "The submission table could not be found. Please check your Airtable configuration."
    if "RATE_LIMIT" in kind or err.upstream_status == 429:
        return "Submission rate limited by Airtable. Please try again in a few minutes."
    if "timed out" in msg:
        return "The submission took too long to process. This might be due to network issues."
    return f"Error: {msg}"


def describe_connection_error(err: UpstreamError) -> str:
    if err.not_found:
        return "Base or table not found. Please check your Base ID and Table ID."
    if err.upstream_status in (401, 403) or "UNAUTHORIZED" in (err.error_type or ""):
        return (
            "Personal Access Token is invalid or doesn't have access to this base. "
            "Please check your token and permissions."
        )
    if err.upstream_status == 429:
        return "Rate limited by Airtable API. Please try again later."
    return err.message
