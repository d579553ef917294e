"""Redis implementation of SyncQueue.

Writes are stored as JSON in a hash keyed by submission id; a list holds the
ids in FIFO order.
"""

import json

import redis

from floodguard_cache.config import get_redis_client, settings
from floodguard_cache.entities import PendingWrite
from floodguard_cache.exceptions import CacheBackendError


class RedisSyncQueue:
    """Durable queue of writes waiting for background sync.

    Satisfies the SyncQueue protocol. Unlike the named caches, the queue is
    not versioned: pending writes survive a cache version bump.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            redis_client: Redis client instance. If None, creates default.
            namespace: Key prefix. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        namespace = namespace or settings.redis_namespace
        self._items_key = f"{namespace}:sync-queue:items"
        self._order_key = f"{namespace}:sync-queue:order"

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> "RedisSyncQueue":
        """Factory method to create RedisSyncQueue with defaults."""
        return cls(redis_client=redis_client, namespace=namespace)

    def enqueue(self, write: PendingWrite) -> str:
        try:
            pipe = self._client.pipeline()
            pipe.hset(self._items_key, write.id, json.dumps(write.to_dict()))
            pipe.rpush(self._order_key, write.id)
            pipe.execute()
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to enqueue write {write.id}: {e}") from e
        return write.id

    def all(self) -> list[PendingWrite]:
        try:
            ids = self._client.lrange(self._order_key, 0, -1)
            if not ids:
                return []
            values = self._client.hmget(self._items_key, ids)  # type: ignore[arg-type]
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to read sync queue: {e}") from e
        return [PendingWrite.from_dict(json.loads(raw)) for raw in values if raw is not None]  # type: ignore[union-attr]

    def pending(self) -> list[PendingWrite]:
        return [write for write in self.all() if write.is_pending]

    def get(self, write_id: str) -> PendingWrite | None:
        try:
            raw = self._client.hget(self._items_key, write_id)
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to read write {write_id}: {e}") from e
        if raw is None:
            return None
        return PendingWrite.from_dict(json.loads(raw))  # type: ignore[arg-type]

    def remove(self, write_id: str) -> bool:
        try:
            pipe = self._client.pipeline()
            pipe.hdel(self._items_key, write_id)
            pipe.lrem(self._order_key, 0, write_id)
            removed, _ = pipe.execute()
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to remove write {write_id}: {e}") from e
        return removed > 0

    def record_failure(self, write_id: str, error: str, permanent: bool = False) -> PendingWrite | None:
        write = self.get(write_id)
        if write is None:
            return None
        updated = write.with_failure(error, permanent)
        try:
            self._client.hset(self._items_key, write_id, json.dumps(updated.to_dict()))
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to update write {write_id}: {e}") from e
        return updated

    def count(self) -> int:
        try:
            return int(self._client.llen(self._order_key))  # type: ignore[arg-type]
        except redis.RedisError as e:
            raise CacheBackendError(f"Failed to count sync queue: {e}") from e
