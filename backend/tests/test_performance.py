"""
Tests for rate limiting, response caching and performance monitoring.

Tests cover:
- Fixed-window counting and reset (fake clock)
- 429 envelope and X-RateLimit-* headers
- Response cache HIT/MISS and invalidation on writes
- X-Response-Time header
"""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cvbuilder.middleware.performance import (
    PerformanceCache,
    PerformanceMonitorMiddleware,
    RateLimitMiddleware,
    ResponseCacheMiddleware,
)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return PerformanceCache(timer=clock)


class TestRateLimitCounter:
    """Test the fixed-window counter directly."""

    def test_allows_up_to_limit(self, store):
        results = [store.check_rate_limit("ip", limit=3, window=60) for _ in range(3)]
        assert all(r.allowed for r in results)
        assert [r.remaining for r in results] == [2, 1, 0]

    def test_rejects_after_limit(self, store):
        for _ in range(3):
            store.check_rate_limit("ip", limit=3, window=60)

        result = store.check_rate_limit("ip", limit=3, window=60)

        assert not result.allowed
        assert result.retry_after == 60
        assert store.stats["rateLimitHits"] == 1

    def test_window_reset(self, store, clock):
        for _ in range(4):
            store.check_rate_limit("ip", limit=3, window=60)

        clock.advance(61)
        result = store.check_rate_limit("ip", limit=3, window=60)

        assert result.allowed
        assert result.remaining == 2

    def test_window_does_not_slide(self, store, clock):
        """Requests inside the window do not extend it."""
        store.check_rate_limit("ip", limit=2, window=60)
        clock.advance(50)
        store.check_rate_limit("ip", limit=2, window=60)
        assert not store.check_rate_limit("ip", limit=2, window=60).allowed

        clock.advance(11)
        assert store.check_rate_limit("ip", limit=2, window=60).allowed

    def test_keys_are_independent(self, store):
        store.check_rate_limit("a", limit=1, window=60)
        assert not store.check_rate_limit("a", limit=1, window=60).allowed
        assert store.check_rate_limit("b", limit=1, window=60).allowed


class TestResponseStore:
    def test_cache_key_ignores_query_order(self):
        key1 = PerformanceCache.cache_key("GET", "/api/themes", {"a": "1", "b": "2"})
        key2 = PerformanceCache.cache_key("GET", "/api/themes", {"b": "2", "a": "1"})
        assert key1 == key2
        assert len(key1) == 32

    def test_metrics(self, store):
        store.check_rate_limit("ip", limit=5, window=60)
        store.get_response("missing", ttl=60)

        metrics = store.get_metrics()

        assert metrics["requests"] == 1
        assert metrics["cacheMisses"] == 1
        assert metrics["rateLimitCacheSize"] == 1
        assert metrics["responseCacheSize"] == 0


def build_app(store: PerformanceCache, limit: int = 2) -> FastAPI:
    app = FastAPI()
    calls = {"themes": 0}

    @app.get("/api/themes")
    async def list_themes():
        calls["themes"] += 1
        return {"success": True, "data": [calls["themes"]]}

    @app.post("/api/themes")
    async def create_theme():
        return {"success": True}

    @app.get("/api/ping")
    async def ping():
        return {"pong": True}

    @app.get("/outside")
    async def outside():
        return {"ok": True}

    app.add_middleware(ResponseCacheMiddleware, prefix="/api/themes", ttl=60, cache=store)
    app.add_middleware(RateLimitMiddleware, prefix="/api", limit=limit, window=60, cache=store)
    app.add_middleware(PerformanceMonitorMiddleware)
    return app


@pytest_asyncio.fixture
async def small_client(store):
    app = build_app(store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestRateLimitMiddleware:
    @pytest.mark.asyncio
    async def test_headers_on_allowed_request(self, small_client):
        response = await small_client.get("/api/ping")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "1"
        assert "X-RateLimit-Reset" in response.headers

    @pytest.mark.asyncio
    async def test_third_request_rejected(self, small_client):
        await small_client.get("/api/ping")
        await small_client.get("/api/ping")
        response = await small_client.get("/api/ping")

        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert body["retryAfter"] == 60
        assert response.headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_paths_outside_prefix_not_limited(self, small_client):
        for _ in range(5):
            response = await small_client.get("/outside")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers


class TestResponseCacheMiddleware:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self, store):
        app = build_app(store, limit=100)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            first = await ac.get("/api/themes")
            second = await ac.get("/api/themes")

        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert second.json() == first.json() == {"success": True, "data": [1]}

    @pytest.mark.asyncio
    async def test_write_invalidates(self, store):
        app = build_app(store, limit=100)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            await ac.get("/api/themes")
            await ac.post("/api/themes")
            after = await ac.get("/api/themes")

        assert after.headers["X-Cache"] == "MISS"
        assert after.json()["data"] == [2]

    @pytest.mark.asyncio
    async def test_entries_expire(self, store, clock):
        app = build_app(store, limit=100)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            await ac.get("/api/themes")
            clock.advance(61)
            after = await ac.get("/api/themes")

        assert after.headers["X-Cache"] == "MISS"


class TestPerformanceMonitor:
    @pytest.mark.asyncio
    async def test_response_time_header(self, small_client):
        response = await small_client.get("/outside")
        assert response.headers["X-Response-Time"].endswith("ms")
