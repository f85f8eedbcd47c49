"""
Result Cache
============

Key/value store for generative fallback payloads (canonical JSON strings).

Backends:
- memory: process-local dict with expiry (dev, tests)
- redis: shared across workers, TTL set per key

Keys are built by the caller (see fallback.CacheKey); this module never
inspects payloads.
"""

import time
import logging
from typing import Dict, Optional, Tuple

from redis.asyncio import Redis

from .config import get_settings, Settings
from .schemas import CacheBackend

logger = logging.getLogger(__name__)


class InMemoryResultCache:
    """Dict-backed cache; expiry checked on read"""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = ttl_seconds
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        expires_at = time.monotonic() + ttl if ttl else None
        self._store[key] = (value, expires_at)

    def __len__(self) -> int:
        return len(self._store)

    def clear(self) -> None:
        self._store.clear()


class RedisResultCache:
    """Redis-backed cache (redis.asyncio)"""

    def __init__(self, redis_url: str, ttl_seconds: Optional[int] = None, client: Optional[Redis] = None):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._client = client

    def _get_client(self) -> Redis:
        if self._client is None:
            self._client = Redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    async def get(self, key: str) -> Optional[str]:
        value = await self._get_client().get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        await self._get_client().set(key, value, ex=ttl or None)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def get_result_cache(settings: Optional[Settings] = None):
    """Build the configured cache backend"""
    settings = settings or get_settings()
    if settings.cache_backend == CacheBackend.REDIS:
        logger.info("Result cache: redis")
        return RedisResultCache(settings.redis_url, ttl_seconds=settings.cache_ttl_seconds)
    return InMemoryResultCache(ttl_seconds=settings.cache_ttl_seconds)
