from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from bounty_platform.schemas.bounty import Activity, PlatformStats, Winner
from bounty_platform.services.mock_data import MOCK_ACTIVITIES, MOCK_STATS, MOCK_WINNERS


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'s' if n != 1 else ''} ago"


def time_ago(when: datetime, now: datetime | None = None) -> str:
    """Relative label ("3 hours ago"); dates older than 30 days print as MM/DD/YYYY."""
    now = now or datetime.now(dt_tz.utc)
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return _plural(max(seconds, 0), "second")
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 30:
        return _plural(days, "day")
    return when.strftime("%m/%d/%Y")


def recent_winners(now: datetime | None = None, limit: int | None = None) -> list[Winner]:
    now = now or datetime.now(dt_tz.utc)
    rows = sorted(MOCK_WINNERS, key=lambda w: w[2])
    winners = [
        Winner(id=wid, name=name, time_ago=time_ago(now - age, now), bounty_title=title, category=cat, reward=reward)
        for (wid, name, age, title, cat, reward) in rows
    ]
    return winners[:limit] if limit else winners


def recent_activities(now: datetime | None = None, limit: int | None = None) -> list[Activity]:
    now = now or datetime.now(dt_tz.utc)
    rows = sorted(MOCK_ACTIVITIES, key=lambda a: a[5])
    out = [
        Activity(
            id=aid, type=kind, user_name=user, bounty_title=title, amount=amount,
            time_ago=time_ago(now - age, now),
        )
        for (aid, kind, user, title, amount, age) in rows
    ]
    return out[:limit] if limit else out


def leaderboard(limit: int = 10) -> list[dict]:
    """Winners aggregated by name, highest total reward first."""
    totals: dict[str, dict] = {}
    for (_, name, _, _, _, reward) in MOCK_WINNERS:
        row = totals.setdefault(name, {"name": name, "totalEarned": 0, "bountiesWon": 0})
        row["totalEarned"] += reward
        row["bountiesWon"] += 1
    ranked = sorted(totals.values(), key=lambda r: (-r["totalEarned"], r["name"]))
    return [dict(row, rank=i + 1) for i, row in enumerate(ranked[:limit])]


def platform_stats() -> PlatformStats:
    return MOCK_STATS.model_copy()
