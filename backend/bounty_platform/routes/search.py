from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from bounty_platform.clients import get_bounty_service
from bounty_platform.schemas.search import AnalyticsReport, SearchAnalyticsEvent, SearchResponse
from bounty_platform.services.analytics import SearchAnalyticsStore, get_analytics_store
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.search import DEFAULT_LIMIT, BountyFilters, run_search
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["search"])

SEARCH_CACHE = "public, s-maxage=300, stale-while-revalidate=600"


def _csv(value: str | None) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


@router.get("/search", response_model=SearchResponse)
async def search(
    response: Response,
    query: str | None = Query(default=None),
    categories: str | None = Query(default=None),
    types: str | None = Query(default=None),
    status: str | None = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    min_reward: float | None = Query(default=None, alias="minReward"),
    max_reward: float | None = Query(default=None, alias="maxReward"),
    svc: BountyService = Depends(get_bounty_service),
):
    q = (query or "").strip()
    if not q:
        raise HTTPException(status_code=400, detail="Query parameter is required")
    search_types = _csv(types) or ["bounty", "category"]

    bounties, _ = await svc.list_bounties()
    cats = await svc.categories(bounties) if "category" in search_types else []

    page, has_more = run_search(
        q,
        bounties=bounties,
        categories=cats,
        types=search_types,
        filters=BountyFilters(
            categories=_csv(categories),
            statuses=_csv(status),
            min_reward=min_reward,
            max_reward=max_reward,
            include_inactive=include_inactive,
        ),
        limit=limit,
    )
    log.info("search.query", query=q.lower(), results=len(page), has_more=has_more)
    response.headers["Cache-Control"] = SEARCH_CACHE
    return SearchResponse(query=q, results=page, total=len(page), has_more=has_more)


@router.post("/analytics/search")
async def record_search(event: SearchAnalyticsEvent, store: SearchAnalyticsStore = Depends(get_analytics_store)):
    store.record(event)
    return {"success": True}


@router.get("/analytics/search")
async def search_report(
    type: AnalyticsReport = Query(default="summary"),
    days: int = Query(default=7, ge=1, le=365),
    limit: int = Query(default=10, ge=1, le=100),
    store: SearchAnalyticsStore = Depends(get_analytics_store),
):
    events = store.recent(days)
    if type == "popular-queries":
        return {"popularQueries": store.popular_queries(events, limit)}
    if type == "click-through-rate":
        return store.click_through(events)
    if type == "trends":
        return {"trends": store.trends(events)}
    return {"summary": store.summary(events, days)}
