"""Tests for the HTTP API surface."""

import httpx
import pytest
import pytest_asyncio

from comicsource.dependencies import get_aggregator, get_prober, get_registry
from comicsource.main import app
from comicsource.scrapers.base import ChapterImage
from comicsource.scrapers.registry import AdapterRegistry
from comicsource.services.health_service import HealthCache, HealthProber
from comicsource.services.search_service import SearchAggregator

from conftest import FakeAdapter, search_result


@pytest.fixture
def api_registry(registry) -> AdapterRegistry:
    """Fixture registry plus a source that can list chapter images."""
    registry.register(
        FakeAdapter(
            "reader",
            "Reader",
            ("reader.test",),
            images=[
                ChapterImage(url="https://cdn.reader.test/1.jpg", page=1),
                ChapterImage(url="https://cdn.reader.test/2.jpg", page=2),
            ],
        )
    )
    return registry


@pytest_asyncio.fixture
async def client(api_registry):
    """API client wired to in-memory sources."""
    prober = HealthProber(api_registry, cache=HealthCache(ttl_seconds=300))
    aggregator = SearchAggregator(api_registry)
    app.dependency_overrides[get_registry] = lambda: api_registry
    app.dependency_overrides[get_prober] = lambda: prober
    app.dependency_overrides[get_aggregator] = lambda: aggregator

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


class TestRoot:
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/api/health"


class TestSourcesEndpoint:
    async def test_lists_sources_in_order(self, client):
        response = await client.get("/api/sources")

        assert response.status_code == 200
        sources = response.json()["sources"]
        assert [s["sourceId"] for s in sources] == ["alpha", "beta", "gamma", "reader"]
        assert sources[0] == {
            "name": "Alpha",
            "sourceId": "alpha",
            "baseUrl": "https://alpha.test",
            "type": "aggregator",
        }


class TestHealthEndpoint:
    """GET serves the cache, POST forces a refresh."""

    async def test_first_read_probes(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["cached"] is False
        assert "cacheAge" not in data
        assert data["sources"]["alpha"]["status"] == "healthy"
        assert data["sources"]["alpha"]["message"] == "Source is accessible"
        assert "responseTime" in data["sources"]["alpha"]
        assert "lastChecked" in data["sources"]["alpha"]

    async def test_second_read_is_cached(self, client):
        await client.get("/api/health")
        response = await client.get("/api/health")

        data = response.json()
        assert data["cached"] is True
        assert data["cacheAge"] >= 0

    async def test_post_forces_refresh(self, client, api_registry):
        await client.get("/api/health")
        response = await client.post("/api/health")

        assert response.status_code == 200
        assert response.json()["cached"] is False
        assert api_registry.get("alpha").probe_calls == 2


class TestSearchEndpoint:
    """Single-source and fan-out search."""

    async def test_single_source(self, client):
        response = await client.post("/api/search", json={"query": "solo", "source": "alpha"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "Alpha"
        result = data["results"][0]
        assert result["title"] == "Solo Leveling"
        assert result["latestChapter"] == 10
        assert "coverImage" not in result

    async def test_fan_out(self, client):
        response = await client.post("/api/search", json={"query": "solo", "source": "all"})

        assert response.status_code == 200
        blocks = response.json()["sources"]
        assert [b["source"] for b in blocks] == ["Alpha", "Beta", "Gamma", "Reader"]
        assert blocks[1]["results"] == []
        assert "HTTP 503" in blocks[1]["error"]
        assert "error" not in blocks[0]

    async def test_fan_out_drops_malformed_results(self, client, api_registry):
        """A source returning an unserializable field does not break the others."""
        malformed = search_result("Tower of God", "loose")
        malformed.rating = "N/A"
        api_registry.register(
            FakeAdapter(
                "loose",
                "Loose",
                ("loose.test",),
                search_outcome=[search_result("Lookism", "loose"), malformed],
            )
        )

        response = await client.post("/api/search", json={"query": "solo"})

        assert response.status_code == 200
        blocks = {b["source"]: b for b in response.json()["sources"]}
        assert [r["title"] for r in blocks["Loose"]["results"]] == ["Lookism"]
        assert "error" not in blocks["Loose"]
        assert blocks["Alpha"]["results"][0]["title"] == "Solo Leveling"
        assert blocks["Gamma"]["results"][0]["title"] == "Omniscient Reader"

    async def test_single_source_drops_malformed_results(self, client, api_registry):
        malformed = search_result("Tower of God", "loose")
        malformed.id = {"slug": "tower-of-god"}
        api_registry.register(
            FakeAdapter("loose", "Loose", ("loose.test",), search_outcome=[malformed])
        )

        response = await client.post("/api/search", json={"query": "tower", "source": "loose"})

        assert response.status_code == 200
        assert response.json()["results"] == []

    async def test_missing_source_fans_out(self, client):
        response = await client.post("/api/search", json={"query": "solo"})

        assert response.status_code == 200
        assert len(response.json()["sources"]) == 4

    async def test_missing_query(self, client):
        response = await client.post("/api/search", json={"source": "alpha"})

        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "error": {"code": "invalid_request", "message": "Query is required"},
        }

    async def test_unknown_source(self, client):
        response = await client.post("/api/search", json={"query": "solo", "source": "delta"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "unknown_source"
        assert error["available"] == ["alpha", "beta", "gamma", "reader"]

    async def test_single_source_failure_is_error_response(self, client):
        response = await client.post("/api/search", json={"query": "solo", "source": "beta"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "source_error"


class TestPagesEndpoint:
    """Chapter page image listing."""

    async def test_resolved_by_url(self, client):
        response = await client.post("/api/pages", json={"url": "https://reader.test/ch/1"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "Reader"
        assert data["totalPages"] == 2
        assert data["images"][1] == {"url": "https://cdn.reader.test/2.jpg", "page": 2}

    async def test_resolved_by_name(self, client):
        response = await client.post(
            "/api/pages", json={"url": "https://elsewhere.test/ch/1", "source": "READER"}
        )

        assert response.status_code == 200
        assert response.json()["totalPages"] == 2

    async def test_missing_url(self, client):
        response = await client.post("/api/pages", json={"source": "reader"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "URL is required"

    async def test_unresolvable_url(self, client):
        response = await client.post("/api/pages", json={"url": "https://unknown.test/ch/1"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No source found for this URL"

    async def test_source_without_images(self, client):
        response = await client.post("/api/pages", json={"url": "https://alpha.test/ch/1"})

        assert response.status_code == 400
        assert "does not support" in response.json()["error"]["message"]

    async def test_unknown_name_falls_back_to_url(self, client):
        response = await client.post(
            "/api/pages", json={"url": "https://reader.test/ch/1", "source": "nosuch"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "Reader"
        assert data["totalPages"] == 2

    async def test_unknown_name_and_unresolvable_url(self, client):
        response = await client.post(
            "/api/pages", json={"url": "https://unknown.test/ch/1", "source": "nosuch"}
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "unknown_source"
        assert error["available"] == ["alpha", "beta", "gamma", "reader"]
