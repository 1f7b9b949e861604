from __future__ import annotations
from typing import Any
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from bounty_platform.auth_deps import require_admin
from bounty_platform.clients import get_bounty_service, get_privy
from bounty_platform.config import Settings, get_settings
from bounty_platform.errors import ConfigurationError, UpstreamError
from bounty_platform.services.airtable import describe_connection_error
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.privy import PrivyClient
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api/debug", tags=["debug"], dependencies=[Depends(require_admin)])


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "null" if value is None else type(value).__name__


def _prefix(value: str, n: int = 4) -> str | None:
    return f"{value[:n]}..." if value else None


@router.get("/environment-variables")
async def environment_variables(settings: Settings = Depends(get_settings)):
    token = settings.airtable_personal_access_token
    return {
        "environment": settings.environment,
        "airtable": {
            "hasToken": bool(token),
            "tokenPrefix": _prefix(token, 3),
            "tokenLooksValid": token.startswith("pat"),
            "baseId": settings.airtable_base_id or None,
            "bountiesTableId": settings.airtable_bounties_table_id or None,
            "submissionsTableId": settings.airtable_submissions_table_id or None,
            "view": settings.airtable_view or None,
        },
        "cloudinary": {
            "cloudName": settings.cloudinary_cloud_name or None,
            "hasApiKey": bool(settings.cloudinary_api_key),
            "hasApiSecret": bool(settings.cloudinary_api_secret),
        },
        "privy": {
            "hasAppId": bool(settings.privy_app_id),
            "hasAppSecret": bool(settings.privy_app_secret),
        },
        "mockFallbackEnabled": settings.mock_fallback_enabled,
    }


@router.get("/airtable-connection")
async def airtable_connection(svc: BountyService = Depends(get_bounty_service)):
    try:
        count = await svc.airtable.ping(svc.bounties_table)
    except ConfigurationError as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.message})
    except UpstreamError as e:
        log.warning("debug.airtable_unreachable", status=e.upstream_status, error_type=e.error_type)
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": describe_connection_error(e), "errorType": e.error_type},
        )
    return {
        "success": True,
        "message": "Successfully connected to Airtable",
        "recordCount": count,
        "baseId": svc.airtable.base_id,
        "tableId": svc.bounties_table,
    }


@router.get("/airtable-fields")
async def airtable_fields(svc: BountyService = Depends(get_bounty_service)):
    records = await svc.airtable.list_records(svc.bounties_table, max_records=1)
    if not records:
        return {"success": True, "recordId": None, "fields": []}
    record = records[0]
    fields = record.get("fields") or {}
    return {
        "success": True,
        "recordId": record.get("id"),
        "fields": [{"name": name, "type": _json_type(value)} for name, value in sorted(fields.items())],
    }


@router.get("/privy")
async def privy_check(privy: PrivyClient = Depends(get_privy)):
    summary = privy.config_summary()
    if not privy.configured:
        return JSONResponse(status_code=500, content={"success": False, "error": "Missing Privy credentials", "config": summary})
    try:
        app = await privy.app_info()
    except UpstreamError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.message, "details": e.details, "config": summary},
        )
    return {"success": True, "config": summary, "app": {"id": app.get("id"), "name": app.get("name")}}
