"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the origin server)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → memory, httpx → a fake)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from floodguard_cache.protocols import CacheStore, Fetcher, NotificationCenter, SyncQueue

from .httpx_fetcher import HttpxFetcher
from .memory_cache_store import MemoryCacheStore
from .memory_notification_center import MemoryNotificationCenter
from .memory_sync_queue import MemorySyncQueue
from .redis_cache_store import RedisCacheStore, deserialize_response, serialize_response
from .redis_sync_queue import RedisSyncQueue

__all__ = [
    "CacheStore",
    "Fetcher",
    "NotificationCenter",
    "SyncQueue",
    "HttpxFetcher",
    "MemoryCacheStore",
    "MemoryNotificationCenter",
    "MemorySyncQueue",
    "RedisCacheStore",
    "RedisSyncQueue",
    "deserialize_response",
    "serialize_response",
]
