import httpx
import pytest
from httpx import AsyncClient
from bounty_platform.clients import get_http_client
from bounty_platform.config import get_settings, settings as base_settings
from bounty_platform.main import app
from bounty_platform.services.analytics import analytics_store
from bounty_platform.services.sync import sync_tracker

AIRTABLE = "api.airtable.com"
CLOUDINARY = "api.cloudinary.com"
PRIVY = "auth.privy.io"


def make_settings(**overrides):
    values = dict(
        airtable_api_url="https://api.airtable.com/v0",
        airtable_personal_access_token="patTEST.0123456789",
        airtable_base_id="appTEST",
        airtable_bounties_table_id="tblBounties",
        airtable_submissions_table_id="Submissions",
        airtable_view="Grid view",
        cloudinary_api_url="https://api.cloudinary.com/v1_1",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key123",
        cloudinary_api_secret="secret456",
        privy_api_url="https://auth.privy.io/api/v1",
        privy_app_id="privy-app-id-123",
        privy_app_secret="privy-secret",
        admin_api_key="",
        webhook_secret="",
        mock_fallback_enabled=True,
    )
    values.update(overrides)
    return base_settings.model_copy(update=values)


def airtable_record(record_id, **fields):
    return {"id": record_id, "createdTime": "2024-01-01T00:00:00.000Z", "fields": fields}


class Upstream:
    """
    Stand-in for every third-party API. Tests register responses per
    (method, host, path); anything unregistered gets an Airtable-style 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, host, path, reply):
        self.routes[(method, host, path)] = reply

    def calls(self, method=None, host=None):
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (host is None or r.url.host == host)
        ]

    def __call__(self, request):
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.host, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"error": {"type": "NOT_FOUND", "message": "Could not find what you are looking for"}})
        if callable(reply):
            return reply(request)
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


@pytest.fixture(autouse=True)
def _reset_state():
    analytics_store.clear()
    sync_tracker.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def app_settings():
    return make_settings()


@pytest.fixture
def api_app(upstream, app_settings):
    async def _http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
            yield client

    app.dependency_overrides[get_http_client] = _http_client
    app.dependency_overrides[get_settings] = lambda: app_settings
    return app


@pytest.fixture
async def api(api_app):
    async with AsyncClient(transport=httpx.ASGITransport(app=api_app), base_url="http://test") as ac:
        yield ac
