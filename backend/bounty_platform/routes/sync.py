from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from bounty_platform.auth_deps import require_admin, require_webhook_secret
from bounty_platform.clients import get_bounty_service
from bounty_platform.schemas.bounty import SyncResult
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.sync import SyncTracker, get_sync_tracker
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["sync"])


@router.post("/sync", response_model=SyncResult, dependencies=[Depends(require_admin)])
async def sync_bounties(
    svc: BountyService = Depends(get_bounty_service),
    tracker: SyncTracker = Depends(get_sync_tracker),
):
    bounties, source = await svc.list_bounties()
    changed, timestamp = tracker.observe(bounties)
    log.info("sync.completed", count=len(bounties), changed=changed, source=source)
    return SyncResult(
        message="Changes detected and synced" if changed else "No changes detected",
        timestamp=timestamp,
        count=len(bounties),
        has_changes=changed,
    )


@router.post("/webhook/airtable", response_model=SyncResult, dependencies=[Depends(require_webhook_secret)])
async def airtable_webhook(
    request: Request,
    svc: BountyService = Depends(get_bounty_service),
    tracker: SyncTracker = Depends(get_sync_tracker),
):
    body = await request.body()
    log.info("webhook.received", bytes=len(body))
    bounties, _ = await svc.list_bounties()
    changed, timestamp = tracker.observe(bounties)
    return SyncResult(
        message="Webhook processed successfully",
        timestamp=timestamp,
        count=len(bounties),
        has_changes=changed,
    )
