from __future__ import annotations
import threading
import time
from collections import Counter
from datetime import datetime, timezone as dt_tz
from bounty_platform.schemas.search import SearchAnalyticsEvent

MAX_EVENTS = 10_000
DAY_MS = 24 * 60 * 60 * 1000


class SearchAnalyticsStore:
    """
    Process-local ring of search events. Resets on restart and is not shared
    between instances; reports are best-effort.
    """

    def __init__(self, max_events: int = MAX_EVENTS):
        self.max_events = max_events
        self._events: list[SearchAnalyticsEvent] = []
        self._lock = threading.Lock()

    def record(self, event: SearchAnalyticsEvent) -> None:
        with self._lock:
            self._events.append(event)
            if len(self._events) > self.max_events:
                self._events = self._events[-self.max_events:]

    def clear(self) -> None:
        with self._lock:
            self._events = []

    def __len__(self) -> int:
        return len(self._events)

    def recent(self, days: int, now_ms: float | None = None) -> list[SearchAnalyticsEvent]:
        now_ms = now_ms if now_ms is not None else time.time() * 1000
        cutoff = now_ms - days * DAY_MS
        with self._lock:
            return [e for e in self._events if e.timestamp >= cutoff]

    @staticmethod
    def popular_queries(events: list[SearchAnalyticsEvent], limit: int = 10) -> list[dict]:
        counts = Counter(e.query for e in events)
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [{"query": q, "count": c} for q, c in ranked[:limit]]

    @staticmethod
    def click_through(events: list[SearchAnalyticsEvent]) -> dict:
        total = len(events)
        clicks = sum(1 for e in events if e.selected_result)
        rate = (clicks / total) * 100 if total else 0
        return {"clickThroughRate": round(rate, 2), "totalSearches": total, "searchesWithClicks": clicks}

    @staticmethod
    def trends(events: list[SearchAnalyticsEvent]) -> list[dict]:
        per_day = Counter(
            datetime.fromtimestamp(e.timestamp / 1000, tz=dt_tz.utc).date().isoformat() for e in events
        )
        return [{"date": d, "searches": n} for d, n in sorted(per_day.items())]

    def summary(self, events: list[SearchAnalyticsEvent], days: int) -> dict:
        ctr = self.click_through(events)
        total = ctr["totalSearches"]
        avg = sum(e.results_count for e in events) / total if total else 0
        return {
            "totalSearches": total,
            "searchesWithClicks": ctr["searchesWithClicks"],
            "clickThroughRate": ctr["clickThroughRate"],
            "averageResults": round(avg, 2),
            "uniqueQueries": len({e.query for e in events}),
            "uniqueSessions": len({e.session_id for e in events}),
            "period": f"{days} days",
        }


analytics_store = SearchAnalyticsStore()


def get_analytics_store() -> SearchAnalyticsStore:
    return analytics_store
