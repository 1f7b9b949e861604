from __future__ import annotations
from fastapi import APIRouter, Query
from bounty_platform.schemas.bounty import Activity, PlatformStats, Winner
from bounty_platform.services import community

router = APIRouter(prefix="/api", tags=["community"])


@router.get("/winners", response_model=list[Winner])
async def winners(limit: int | None = Query(default=None, ge=1, le=100)):
    return community.recent_winners(limit=limit)


@router.get("/activities", response_model=list[Activity])
async def activities(limit: int | None = Query(default=None, ge=1, le=100)):
    return community.recent_activities(limit=limit)


@router.get("/stats", response_model=PlatformStats)
async def stats():
    return community.platform_stats()


@router.get("/leaderboard")
async def leaderboard(limit: int = Query(default=10, ge=1, le=100)):
    return community.leaderboard(limit)
