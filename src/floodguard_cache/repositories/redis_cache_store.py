"""Redis implementation of CacheStore.

Each named cache is a Redis hash whose fields are serialized cache keys and
whose values are JSON-encoded responses. A sorted set scored by creation
time records which named caches exist, so lookups across caches keep the
browser's oldest-first order.
"""

import base64
import json
import logging
import time
from typing import Any

import redis

from floodguard_cache.config import get_redis_client, settings
from floodguard_cache.entities import CachedResponse, CacheKey
from floodguard_cache.exceptions import CacheBackendError

logger = logging.getLogger(__name__)


def serialize_response(response: CachedResponse) -> bytes:
    """Encode a response as JSON; the body is base64 so bytes round-trip exactly."""
    payload = {
        "status": response.status,
        "status_text": response.status_text,
        "headers": [list(pair) for pair in response.headers],
        "body": base64.b64encode(response.body).decode("ascii"),
        "url": response.url,
        "stored_at": time.time(),
    }
    return json.dumps(payload).encode("utf-8")


def deserialize_response(raw: bytes | str) -> CachedResponse:
    data: dict[str, Any] = json.loads(raw)
    return CachedResponse(
        status=int(data["status"]),
        headers=tuple((name, value) for name, value in data.get("headers", [])),
        body=base64.b64decode(data.get("body", "")),
        status_text=data.get("status_text", ""),
        url=data.get("url", ""),
    )


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisCacheStore:
    """Redis implementation of named caches.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize the Redis cache store.

        Args:
            redis_client: Redis client instance. If None, creates default.
            namespace: Key prefix for all cache data. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._namespace = namespace or settings.redis_namespace

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> "RedisCacheStore":
        """Factory method to create RedisCacheStore with defaults.

        Args:
            redis_client: Redis client. If None, built from settings.
            namespace: Key prefix. If None, uses settings.

        Returns:
            Configured RedisCacheStore
        """
        return cls(redis_client=redis_client, namespace=namespace)

    @property
    def _names_key(self) -> str:
        return f"{self._namespace}:caches"

    def _cache_key(self, cache_name: str) -> str:
        return f"{self._namespace}:cache:{cache_name}"

    def match(self, cache_name: str, key: CacheKey) -> CachedResponse | None:
        """Look up an entry in one named cache."""
        try:
            raw = self._client.hget(self._cache_key(cache_name), key.as_string())
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to read cache {cache_name}: {e}") from e

        if raw is None:
            return None
        return deserialize_response(raw)  # type: ignore[arg-type]

    def match_any(self, key: CacheKey) -> CachedResponse | None:
        """Look up an entry across all named caches, oldest cache first."""
        for cache_name in self.cache_names():
            response = self.match(cache_name, key)
            if response is not None:
                return response
        return None

    def put(self, cache_name: str, key: CacheKey, response: CachedResponse) -> None:
        """Store or overwrite an entry, creating the named cache if needed."""
        try:
            pipe = self._client.pipeline()
            pipe.zadd(self._names_key, {cache_name: time.time()}, nx=True)
            pipe.hset(self._cache_key(cache_name), key.as_string(), serialize_response(response))
            pipe.execute()
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to write cache {cache_name}: {e}") from e

    def cache_names(self) -> list[str]:
        """List named caches in creation order."""
        try:
            names = self._client.zrange(self._names_key, 0, -1)
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to list caches: {e}") from e
        return [_decode(name) for name in names]  # type: ignore[union-attr]

    def delete_cache(self, cache_name: str) -> bool:
        """Delete a whole named cache."""
        try:
            pipe = self._client.pipeline()
            pipe.zrem(self._names_key, cache_name)
            pipe.delete(self._cache_key(cache_name))
            removed, _ = pipe.execute()
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to delete cache {cache_name}: {e}") from e
        return removed > 0

    def count(self, cache_name: str) -> int:
        """Count entries in one named cache."""
        try:
            return int(self._client.hlen(self._cache_key(cache_name)))  # type: ignore[arg-type]
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to count cache {cache_name}: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with stats
        """
        return {
            "backend": "redis",
            "namespace": self._namespace,
            "caches": {name: self.count(name) for name in self.cache_names()},
        }

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
