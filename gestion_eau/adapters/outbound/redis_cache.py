"""Redis cache adapter implementing CachePort.

Falls back to no-op when Redis is unavailable.
"""

from __future__ import annotations

import json
import logging

import redis
from redis.exceptions import RedisError

from domain.ports import CachePort

logger = logging.getLogger(__name__)


class RedisCacheAdapter(CachePort):
    """CachePort implementation backed by Redis with JSON serialization.

    When *redis_client* is ``None`` every operation is a silent no-op,
    which makes it safe to use in environments where Redis is not available.
    A Redis failure is logged and treated as a cache miss.
    """

    PREFIX = "gestion_eau:"

    def __init__(self, redis_client=None):
        self._redis = redis_client

    def _key(self, key: str) -> str:
        return f"{self.PREFIX}{key}"

    # ── CachePort interface ──────────────────────────────────────────────

    def get(self, key: str) -> object | None:
        if not self._redis:
            return None
        try:
            raw = self._redis.get(self._key(key))
        except RedisError as exc:
            logger.warning("Lecture cache %s impossible: %s", key, exc)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: object, ttl: int = 3600) -> None:
        if not self._redis:
            return
        try:
            self._redis.setex(self._key(key), ttl, json.dumps(value, default=str))
        except RedisError as exc:
            logger.warning("Écriture cache %s impossible: %s", key, exc)

    def invalidate(self, prefix: str) -> None:
        if not self._redis:
            return
        full_prefix = self._key(prefix)
        try:
            for k in self._redis.scan_iter(f"{full_prefix}*"):
                self._redis.delete(k)
        except RedisError as exc:
            logger.error("Invalidation cache %s impossible: %s", prefix, exc)


class InMemoryCacheAdapter(CachePort):
    """CachePort implementation using a simple in-memory dict.

    Intended for testing and single-process runs. TTL is accepted but
    ignored (values never expire).
    """

    def __init__(self):
        self._store: dict[str, object] = {}

    def get(self, key: str) -> object | None:
        return self._store.get(key)

    def set(self, key: str, value: object, ttl: int = 3600) -> None:
        self._store[key] = value

    def invalidate(self, prefix: str) -> None:
        keys_to_remove = [k for k in self._store if k.startswith(prefix)]
        for k in keys_to_remove:
            del self._store[k]


def build_cache(redis_url: str | None) -> CachePort:
    """Redis-backed cache when *redis_url* answers a ping, in-memory otherwise."""
    if not redis_url:
        return InMemoryCacheAdapter()
    try:
        client = redis.from_url(redis_url)
        client.ping()
    except RedisError as exc:
        logger.warning("Redis indisponible (%s), cache en mémoire utilisé", exc)
        return InMemoryCacheAdapter()
    return RedisCacheAdapter(redis_client=client)
