from __future__ import annotations
from bounty_platform.schemas.bounty import Bounty
from bounty_platform.services.normalize import utc_now_iso

COMPARED_FIELDS = ("title", "description", "requirements", "reward", "deadline", "category", "status")


def bounties_changed(previous: list[Bounty], current: list[Bounty]) -> bool:
    """True on first sync, a different count, an unseen id, or any compared field differing."""
    if not previous or len(previous) != len(current):
        return True
    old = {b.id: b for b in previous}
    for b in current:
        before = old.get(b.id)
        if before is None:
            return True
        if any(getattr(b, f) != getattr(before, f) for f in COMPARED_FIELDS):
            return True
    return False


class SyncTracker:
    """Last bounty snapshot seen by this process, for change detection on /api/sync."""

    def __init__(self):
        self.last_bounties: list[Bounty] = []
        self.last_synced_at: str | None = None

    def observe(self, bounties: list[Bounty]) -> tuple[bool, str]:
        changed = bounties_changed(self.last_bounties, bounties)
        self.last_bounties = list(bounties)
        self.last_synced_at = utc_now_iso()
        return changed, self.last_synced_at

    def reset(self) -> None:
        self.last_bounties = []
        self.last_synced_at = None


sync_tracker = SyncTracker()


def get_sync_tracker() -> SyncTracker:
    return sync_tracker
