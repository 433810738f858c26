"""
Redis cache for AI extraction results.

Extraction is the most repeated model call (the same CV text gets
re-uploaded, the same job posting pasted twice), so results are stored
under a hash of the input text:

    cvbuilder:cv:{hash}    structured CV from extract-cv
    cvbuilder:job:{hash}   structured job offer from extract-job-offer

Entries expire after ``extraction_cache_ttl`` seconds (24h by default).
Redis being unreachable is not an error for callers: lookups become misses,
writes become no-ops, and a warning is logged.
"""

import hashlib
import json
import logging
from collections import Counter
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from cvbuilder.config import get_settings
from cvbuilder.middleware.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "cvbuilder"

T = TypeVar("T")


class CacheLayer(str, Enum):
    CV_EXTRACTION = "cv"
    JOB_OFFER = "job"

    @property
    def metric_label(self) -> str:
        return self.name.lower()


def hash_content(text: str) -> str:
    """16 hex chars of SHA-256 over the text, ignoring surrounding whitespace."""
    return hashlib.sha256(text.strip().encode("utf-8")).hexdigest()[:16]


class ExtractionCache:
    """
    Redis-backed store for extraction results.

    Attributes:
        redis_url: Connection URL, used on first access unless a client is injected
        ttl: Expiry in seconds for every entry
        hits/misses: Lookup counters per layer
    """

    def __init__(self, redis_url: str, ttl: Optional[int] = None, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.ttl = ttl or get_settings().extraction_cache_ttl
        self._client = client
        self.hits: Counter = Counter()
        self.misses: Counter = Counter()

    @staticmethod
    def key(layer: CacheLayer, content_hash: str) -> str:
        return f"{KEY_NAMESPACE}:{layer.value}:{content_hash}"

    def _connect(self) -> Optional[redis.Redis]:
        if self._client is None:
            try:
                self._client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
            except ValueError as e:
                logger.warning(f"Invalid Redis URL {self.redis_url!r}: {e}")
                return None
        return self._client

    async def _run(self, action: str, operation: Callable[[redis.Redis], Awaitable[T]], default: T) -> T:
        client = self._connect()
        if client is None:
            return default
        try:
            return await operation(client)
        except (RedisError, OSError, ValueError) as e:
            logger.warning(f"Redis {action} failed, continuing without cache: {e}")
            return default

    def _count(self, layer: CacheLayer, hit: bool) -> None:
        if hit:
            self.hits[layer] += 1
            record_cache_hit(layer.metric_label)
        else:
            self.misses[layer] += 1
            record_cache_miss(layer.metric_label)

    async def get_extraction(self, layer: CacheLayer, content_hash: str) -> Optional[dict[str, Any]]:
        async def load(client: redis.Redis) -> Optional[dict[str, Any]]:
            raw = await client.get(self.key(layer, content_hash))
            return json.loads(raw) if raw else None

        value = await self._run("get", load, None)
        self._count(layer, value is not None)
        return value

    async def set_extraction(self, layer: CacheLayer, content_hash: str, data: dict[str, Any]) -> bool:
        async def store(client: redis.Redis) -> bool:
            await client.set(self.key(layer, content_hash), json.dumps(data), ex=self.ttl)
            return True

        return await self._run("set", store, False)

    async def invalidate(self, layer: CacheLayer, content_hash: str) -> bool:
        async def remove(client: redis.Redis) -> bool:
            return await client.delete(self.key(layer, content_hash)) > 0

        return await self._run("delete", remove, False)

    async def health_check(self) -> bool:
        async def ping(client: redis.Redis) -> bool:
            return bool(await client.ping())

        return await self._run("ping", ping, False)

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Per-layer lookup counts, as reported by /health."""
        stats = {}
        for layer in CacheLayer:
            hits, misses = self.hits[layer], self.misses[layer]
            total = hits + misses
            stats[layer.value] = {
                "hits": hits,
                "misses": misses,
                "hitRate": round(hits / total, 4) if total else 0.0,
            }
        return stats

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_cache: Optional[ExtractionCache] = None


async def get_cache() -> ExtractionCache:
    """Process-wide ExtractionCache, created from settings on first use."""
    global _cache
    if _cache is None:
        _cache = ExtractionCache(redis_url=get_settings().redis_url)
    return _cache


async def close_cache() -> None:
    global _cache
    if _cache is not None:
        await _cache.close()
        _cache = None
