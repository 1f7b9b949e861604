import httpx
import pytest
from bounty_platform.schemas.bounty import Bounty
from bounty_platform.services.sync import SyncTracker, bounties_changed
from conftest import AIRTABLE, airtable_record

BOUNTIES_PATH = "/v0/appTEST/tblBounties"


def b(id, **kw):
    return Bounty(id=id, title=kw.pop("title", "T"), deadline="2025-01-01", **kw)


def test_bounties_changed():
    assert bounties_changed([], [b("1")])
    assert not bounties_changed([b("1")], [b("1")])
    assert bounties_changed([b("1")], [b("1"), b("2")])
    assert bounties_changed([b("1")], [b("2")])
    assert bounties_changed([b("1", reward=1)], [b("1", reward=2)])
    # skills/tags are not compared
    assert not bounties_changed([b("1")], [b("1", tags=["x"])])


def test_tracker_remembers_last_snapshot():
    t = SyncTracker()
    changed, ts = t.observe([b("1")])
    assert changed and ts == t.last_synced_at
    changed, _ = t.observe([b("1")])
    assert not changed


@pytest.mark.asyncio
async def test_sync_endpoint_detects_changes(api, upstream):
    titles = iter(["First", "First", "Renamed"])
    upstream.on("GET", AIRTABLE, BOUNTIES_PATH, lambda request: httpx.Response(
        200, json={"records": [airtable_record("rec1", Title=next(titles), Deadline="2025-01-01")]}
    ))
    first = (await api.post("/api/sync")).json()
    assert first["hasChanges"] is True
    assert first["message"] == "Changes detected and synced"
    assert first["count"] == 1
    second = (await api.post("/api/sync")).json()
    assert second["hasChanges"] is False
    assert second["message"] == "No changes detected"
    third = (await api.post("/api/sync")).json()
    assert third["hasChanges"] is True


@pytest.mark.asyncio
async def test_sync_requires_admin_key(api, app_settings):
    app_settings.admin_api_key = "admin"
    r = await api.post("/api/sync")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_webhook_checks_secret(api, app_settings, upstream):
    app_settings.webhook_secret = "hook"
    upstream.on("GET", AIRTABLE, BOUNTIES_PATH, {"records": [airtable_record("rec1", Title="A", Deadline="2025-01-01")]})
    r = await api.post("/api/webhook/airtable", json={"base": {"id": "appTEST"}})
    assert r.status_code == 401
    r = await api.post("/api/webhook/airtable", json={"base": {"id": "appTEST"}}, headers={"Authorization": "Bearer hook"})
    assert r.status_code == 200
    assert r.json()["success"] is True
