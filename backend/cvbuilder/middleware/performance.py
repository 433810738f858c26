"""
Rate Limiting, Response Caching and Performance Monitoring

All three middlewares share one process-wide PerformanceCache, built on
cachetools.TTLCache:

- Rate limiting: fixed window per client. The window opens on the first
  request; once ``limit`` requests have passed, further requests get 429
  until the window expires and the count starts again from zero.
- Response caching: successful JSON GET responses under a path prefix,
  keyed by MD5 of {method, path, query, body}. Writes under the prefix
  drop the cached entries for it.
- Monitoring: X-Response-Time header and a WARNING for slow requests.

Usage:
    app.add_middleware(ResponseCacheMiddleware, prefix="/api/themes", ttl=3600)
    app.add_middleware(RateLimitMiddleware, prefix="/api", limit=100, window=60)
"""

import hashlib
import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cachetools import TTLCache
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from cvbuilder.middleware.metrics import (
    record_cache_hit,
    record_cache_miss,
    record_rate_limit_rejection,
)

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 5.0
WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


class _Window:
    """Mutable counter stored in the TTL cache; mutating it keeps the original expiry."""

    __slots__ = ("count", "reset_at")

    def __init__(self, reset_at: float):
        self.count = 0
        self.reset_at = reset_at


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int


@dataclass
class CachedResponse:
    path: str
    status_code: int
    body: bytes
    media_type: str


class PerformanceCache:
    """
    In-memory store behind the rate limiter and response cache.

    Attributes:
        timer: Monotonic clock used for TTLs (injectable for tests)
        stats: requests, cacheHits, cacheMisses, rateLimitHits counters
    """

    def __init__(
        self,
        timer: Callable[[], float] = time.monotonic,
        response_maxsize: int = 1000,
        rate_limit_maxsize: int = 10000,
    ):
        self.timer = timer
        self.response_maxsize = response_maxsize
        self.rate_limit_maxsize = rate_limit_maxsize
        # One TTLCache per distinct TTL, since TTLCache has a single ttl
        self._rate_limits: dict[float, TTLCache] = {}
        self._responses: dict[float, TTLCache] = {}
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict[str, int]:
        return {"requests": 0, "cacheHits": 0, "cacheMisses": 0, "rateLimitHits": 0}

    def _cache_for(self, caches: dict[float, TTLCache], ttl: float, maxsize: int) -> TTLCache:
        if ttl not in caches:
            caches[ttl] = TTLCache(maxsize=maxsize, ttl=ttl, timer=self.timer)
        return caches[ttl]

    # ==================== Rate Limiting ====================

    def check_rate_limit(self, identifier: str, limit: int, window: float) -> RateLimitResult:
        """Count one request for ``identifier`` and say whether it may pass."""
        cache = self._cache_for(self._rate_limits, window, self.rate_limit_maxsize)
        now = self.timer()

        entry = cache.get(identifier)
        if entry is None:
            entry = _Window(reset_at=now + window)
            cache[identifier] = entry

        retry_after = max(0, math.ceil(entry.reset_at - now))

        if entry.count >= limit:
            self.stats["rateLimitHits"] += 1
            return RateLimitResult(False, limit, 0, entry.reset_at, retry_after)

        entry.count += 1
        self.stats["requests"] += 1
        return RateLimitResult(True, limit, limit - entry.count, entry.reset_at, retry_after)

    # ==================== Response Cache ====================

    @staticmethod
    def cache_key(method: str, path: str, query: dict[str, Any], body: Any = None) -> str:
        key = json.dumps(
            {"method": method, "path": path, "query": query, "body": body or {}},
            sort_keys=True,
            default=str,
        )
        return hashlib.md5(key.encode()).hexdigest()

    def get_response(self, key: str, ttl: float) -> Optional[CachedResponse]:
        cached = self._cache_for(self._responses, ttl, self.response_maxsize).get(key)
        if cached is not None:
            self.stats["cacheHits"] += 1
            return cached
        self.stats["cacheMisses"] += 1
        return None

    def set_response(self, key: str, ttl: float, response: CachedResponse) -> None:
        self._cache_for(self._responses, ttl, self.response_maxsize)[key] = response

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop cached responses whose path starts with ``prefix``."""
        removed = 0
        for cache in self._responses.values():
            stale = [key for key, entry in list(cache.items()) if entry.path.startswith(prefix)]
            for key in stale:
                cache.pop(key, None)
                removed += 1
        return removed

    # ==================== Stats ====================

    def get_metrics(self) -> dict[str, Any]:
        requests = self.stats["requests"]
        hit_rate = round(self.stats["cacheHits"] / requests * 100, 2) if requests else 0
        return {
            **self.stats,
            "cacheHitRate": hit_rate,
            "responseCacheSize": sum(len(c) for c in self._responses.values()),
            "rateLimitCacheSize": sum(len(c) for c in self._rate_limits.values()),
        }

    def clear(self) -> None:
        self._rate_limits.clear()
        self._responses.clear()
        self.stats = self._empty_stats()


performance_cache = PerformanceCache()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiter for every request under ``prefix``.

    Each mount counts separately (``scope`` is part of the key), so a
    request under /api/ai counts once against the AI limit and once
    against the general /api limit.
    """

    def __init__(
        self,
        app: FastAPI,
        prefix: str = "/api",
        limit: int = 100,
        window: float = 60,
        scope: str = "api",
        message: str = "Too many requests, please try again later.",
        key_func: Callable[[Request], str] = client_ip,
        cache: Optional[PerformanceCache] = None,
    ):
        super().__init__(app)
        self.prefix = prefix
        self.limit = limit
        self.window = window
        self.scope = scope
        self.message = message
        self.key_func = key_func
        self.cache = cache

    def _headers(self, result: RateLimitResult) -> dict[str, str]:
        reset_epoch = time.time() + (result.reset_at - self.store.timer())
        return {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(int(reset_epoch)),
        }

    @property
    def store(self) -> PerformanceCache:
        return self.cache or performance_cache

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        identifier = f"{self.scope}:{self.key_func(request)}"
        result = self.store.check_rate_limit(identifier, self.limit, self.window)
        headers = self._headers(result)

        if not result.allowed:
            record_rate_limit_rejection(self.scope)
            logger.warning(f"Rate limit exceeded for {identifier} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": self.message, "retryAfter": result.retry_after},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Cache successful JSON GET responses under ``prefix`` for ``ttl`` seconds."""

    def __init__(
        self,
        app: FastAPI,
        prefix: str,
        ttl: float = 300,
        cache: Optional[PerformanceCache] = None,
    ):
        super().__init__(app)
        self.prefix = prefix
        self.ttl = ttl
        self.cache = cache

    @property
    def store(self) -> PerformanceCache:
        return self.cache or performance_cache

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not path.startswith(self.prefix):
            return await call_next(request)

        if request.method in WRITE_METHODS:
            response = await call_next(request)
            if response.status_code < 400:
                removed = self.store.invalidate_prefix(self.prefix)
                logger.debug(f"Invalidated {removed} cached responses under {self.prefix}")
            return response

        if request.method != "GET":
            return await call_next(request)

        key = self.store.cache_key(request.method, path, dict(request.query_params))
        cached = self.store.get_response(key, self.ttl)
        if cached is not None:
            record_cache_hit("response")
            return Response(
                content=cached.body,
                status_code=cached.status_code,
                media_type=cached.media_type,
                headers={"X-Cache": "HIT"},
            )

        record_cache_miss("response")
        response = await call_next(request)

        media_type = response.headers.get("content-type", "")
        if response.status_code != 200 or not media_type.startswith("application/json"):
            response.headers["X-Cache"] = "MISS"
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        self.store.set_response(key, self.ttl, CachedResponse(path, 200, body, media_type))

        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
        headers["X-Cache"] = "MISS"
        return Response(content=body, status_code=200, headers=headers, media_type=media_type)


class PerformanceMonitorMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI, slow_threshold: float = SLOW_REQUEST_SECONDS):
        super().__init__(app)
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        response.headers["X-Response-Time"] = f"{round(duration * 1000)}ms"
        if duration > self.slow_threshold:
            logger.warning(
                f"Slow API request: {request.method} {request.url.path} "
                f"-> {response.status_code} in {duration:.2f}s"
            )
        return response
