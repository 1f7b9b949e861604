from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
from bounty_platform.config import Settings, get_settings

router = APIRouter()

@router.get("/health")
async def health(request: Request, settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version(settings: Settings = Depends(get_settings)):
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
        "build": "docker",
    }
