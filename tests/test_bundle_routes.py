"""Tests for the /bundle and /analyser routes."""

from datetime import datetime, timedelta

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from bundle_analyser.config import settings
from bundle_analyser.database import AsyncSessionLocal, Base, engine
from bundle_analyser.main import app
from bundle_analyser.routes.bundle import get_http_client, get_snapshot_store
from bundle_analyser.services.aggregation import SnapshotRecord
from bundle_analyser.services.errors import StoreError
from bundle_analyser.services.snapshot_store import SnapshotStore

MANIFEST_URL = "http://manifest.test/importmap.json"


@pytest.fixture
async def test_db():
    """Create test database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def staging_dir(tmp_path, monkeypatch):
    path = tmp_path / "bundle"
    monkeypatch.setattr(settings, "staging_dir", str(path))
    monkeypatch.setattr(settings, "import_map_url", MANIFEST_URL)
    return path


@pytest.fixture
def cdn_routes():
    """Responses served to the pipeline's HTTP client, keyed by URL."""
    routes: dict[str, httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(str(request.url), httpx.Response(404))

    async def override_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    app.dependency_overrides[get_http_client] = override_client
    yield routes
    app.dependency_overrides.pop(get_http_client, None)


def api_client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestBundleRoute:
    """Tests for triggering a measurement run."""

    async def test_bundle_returns_snapshot(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(
            200, json={"imports": {"a": "http://x/foo-app/a.js", "b": "http://x/bar.js"}}
        )
        cdn_routes["http://x/foo-app/a.js"] = httpx.Response(200, content=b"a" * 1024)

        async with api_client() as client:
            response = await client.get("/bundle")

        assert response.status_code == 200
        data = response.json()
        assert data["sizes"] == {"foo-app": "1.00 KB"}
        assert data["partial"] is True
        assert [f["url"] for f in data["failed"]] == ["http://x/bar.js"]
        assert data["failed"][0]["app_name"] == "unknown-app"
        assert data["date"].endswith("Z")
        assert not staging_dir.exists()

    async def test_full_success_is_not_partial(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(200, json={"imports": {"a": "http://x/a-app/a.js"}})
        cdn_routes["http://x/a-app/a.js"] = httpx.Response(200, content=b"a" * 2048)

        async with api_client() as client:
            response = await client.get("/bundle")

        assert response.status_code == 200
        assert response.json()["sizes"] == {"a-app": "2.00 KB"}
        assert response.json()["partial"] is False
        assert response.json()["failed"] == []

    async def test_manifest_failure_returns_500(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(502)

        async with api_client() as client:
            response = await client.get("/bundle")

        assert response.status_code == 500
        assert "Error generating bundle" in response.json()["detail"]
        assert "502" in response.json()["detail"]

    async def test_malformed_manifest_returns_500(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(200, text="not json")

        async with api_client() as client:
            response = await client.get("/bundle")

        assert response.status_code == 500
        assert "not valid JSON" in response.json()["detail"]

    async def test_insert_failure_returns_500(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(200, json={"imports": {}})

        class BrokenStore(SnapshotStore):
            async def insert(self, snapshot):
                raise StoreError("Error saving bundle sizes: database is locked")

        app.dependency_overrides[get_snapshot_store] = lambda: BrokenStore(AsyncSessionLocal)
        try:
            async with api_client() as client:
                response = await client.get("/bundle")
        finally:
            app.dependency_overrides.pop(get_snapshot_store, None)

        assert response.status_code == 500
        assert "database is locked" in response.json()["detail"]
        assert not staging_dir.exists()

    async def test_bundle_then_analyser(self, test_db, staging_dir, cdn_routes):
        cdn_routes[MANIFEST_URL] = httpx.Response(200, json={"imports": {"a": "http://x/a-app/a.js"}})
        cdn_routes["http://x/a-app/a.js"] = httpx.Response(200, content=b"a" * 1536)

        async with api_client() as client:
            bundle = await client.get("/bundle")
            history = await client.get("/analyser")

        assert bundle.status_code == 200
        assert history.status_code == 200
        assert history.json() == [{"date": bundle.json()["date"], "sizes": {"a-app": "1.50 KB"}}]


class TestAnalyserRoute:
    """Tests for reading the snapshot history."""

    async def test_empty_history(self, test_db):
        async with api_client() as client:
            response = await client.get("/analyser")
        assert response.status_code == 200
        assert response.json() == []

    async def test_history_sorted_descending(self, test_db):
        store = SnapshotStore(AsyncSessionLocal)
        base = datetime(2026, 10, 1, 8, 30, 0)
        for offset in (1, 3, 2):
            await store.insert(
                SnapshotRecord(date=base + timedelta(days=offset), sizes={"a-app": f"{offset}.00 KB"})
            )

        async with api_client() as client:
            response = await client.get("/analyser")

        assert response.status_code == 200
        assert [entry["sizes"]["a-app"] for entry in response.json()] == ["3.00 KB", "2.00 KB", "1.00 KB"]
        assert response.json()[0]["date"] == "2026-10-04T08:30:00Z"

    async def test_store_failure_returns_500(self):
        class BrokenStore(SnapshotStore):
            async def query_all(self):
                raise StoreError("Error reading bundle sizes: unable to open database file")

        app.dependency_overrides[get_snapshot_store] = lambda: BrokenStore(AsyncSessionLocal)
        try:
            async with api_client() as client:
                response = await client.get("/analyser")
        finally:
            app.dependency_overrides.pop(get_snapshot_store, None)

        assert response.status_code == 500
        assert "unable to open database file" in response.json()["detail"]


async def test_health_check(test_db):
    async with api_client() as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
