from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Response
from bounty_platform.auth_deps import require_admin
from bounty_platform.clients import get_bounty_service
from bounty_platform.schemas.bounty import Bounty, BountyStatusUpdate, BountyStatusUpdated
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.normalize import is_canonical_status
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["bounties"])

LIST_CACHE = "public, s-maxage=60, stale-while-revalidate=300"


@router.get("/bounties", response_model=list[Bounty])
async def list_bounties(response: Response, svc: BountyService = Depends(get_bounty_service)):
    bounties, source = await svc.list_bounties()
    response.headers["Cache-Control"] = LIST_CACHE
    response.headers["X-Data-Source"] = source
    return bounties


@router.get("/bounties/{bounty_id}", response_model=Bounty)
async def get_bounty(bounty_id: str, response: Response, svc: BountyService = Depends(get_bounty_service)):
    bounty, source = await svc.get_bounty(bounty_id)
    if not bounty:
        raise HTTPException(status_code=404, detail="Bounty not found")
    response.headers["Cache-Control"] = LIST_CACHE
    response.headers["X-Data-Source"] = source
    return bounty


@router.patch("/bounties/{bounty_id}/status", response_model=BountyStatusUpdated, dependencies=[Depends(require_admin)])
async def update_bounty_status(
    bounty_id: str,
    payload: BountyStatusUpdate,
    svc: BountyService = Depends(get_bounty_service),
):
    # Writes accept only canonical values; synonyms are a read-side concern
    if not is_canonical_status(payload.status):
        raise HTTPException(status_code=400, detail="Invalid status. Must be one of: open, in-progress, closed")
    updated = await svc.update_status(bounty_id, payload.status)
    if not updated:
        raise HTTPException(status_code=404, detail="Bounty not found")
    return BountyStatusUpdated(
        message=f"Bounty status updated to {payload.status}",
        id=updated.id,
        status=payload.status,
    )


@router.get("/categories", response_model=list[str])
async def list_categories(svc: BountyService = Depends(get_bounty_service)):
    return await svc.categories()
