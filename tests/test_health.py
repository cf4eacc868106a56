"""Tests for the status, health and operational endpoints."""

from unittest.mock import patch

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:
    pytest.skip("fastapi is not installed", allow_module_level=True)

from clipping.intelligence.cache import TTLCache
from clipping.web.dependencies import get_aggregator, get_cache


class FakeAggregator:
    def __init__(self):
        self.runs = 0

    async def run(self):
        self.runs += 1


@pytest.fixture
def cache():
    return TTLCache(ttl=60, max_size=5)


@pytest.fixture
def aggregator():
    return FakeAggregator()


@pytest.fixture
def client(cache, aggregator):
    """Create a test client with the scheduler disabled and stub dependencies."""
    from clipping.web.main import app

    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    with patch("clipping.web.lifespan._start_scheduler", return_value=None):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


class TestStatusEndpoint:
    def test_status(self, client, cache):
        cache.set("a", 1)
        data = client.get("/").json()
        assert data["status"] == "online"
        assert data["cache"] == 1
        assert isinstance(data["uptime"], int)


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_json(self, client):
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert "uptime_seconds" in data
        assert data["cache"] == {"entries": 0, "max_size": 5}

    def test_health_scheduler_not_running(self, client):
        data = client.get("/health").json()
        assert data["scheduler"] == {"running": False, "jobs": []}


class TestRunEndpoint:
    @pytest.mark.parametrize("method", ["get", "post"])
    def test_run_acknowledges_and_runs_in_background(self, client, aggregator, method):
        response = getattr(client, method)("/run")
        assert response.status_code == 200
        assert response.json() == {"message": "Gerando relatório em background"}
        assert aggregator.runs == 1


class TestCacheClear:
    def test_clear_reports_count(self, client, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        response = client.post("/cache/clear")
        assert response.json() == {"cleared": 2}
        assert cache.size == 0
