from __future__ import annotations
from fastapi import APIRouter, Depends
from bounty_platform.clients import get_privy
from bounty_platform.schemas.media import ProfileUpdateRequest
from bounty_platform.services.privy import PrivyClient

router = APIRouter(prefix="/api", tags=["profile"])


@router.post("/update-profile")
async def update_profile(payload: ProfileUpdateRequest, privy: PrivyClient = Depends(get_privy)):
    user = await privy.set_custom_metadata(payload.did, payload.metadata)
    return {"success": True, "user": user}
