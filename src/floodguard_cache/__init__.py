"""FloodGuard Offline Cache - request caching so the app keeps working offline.

This package provides a layered architecture for the offline cache:

Layers:
    - protocols: Interface contracts (CacheStore, Fetcher, SyncQueue, NotificationCenter)
    - repositories: Redis, in-memory and httpx implementations
    - services: Caching strategies, routing, lifecycle, push and background sync
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from floodguard_cache.entities import FetchRequest
    from floodguard_cache.repositories import (
        HttpxFetcher, MemoryCacheStore, MemoryNotificationCenter, MemorySyncQueue,
    )
    from floodguard_cache.services import OfflineCacheWorker

    worker = OfflineCacheWorker.create(
        store=MemoryCacheStore(),
        fetcher=HttpxFetcher.create(),
        queue=MemorySyncQueue(),
        notifications=MemoryNotificationCenter(),
    )
    await worker.start()
    response = await worker.fetch(FetchRequest.get("http://localhost:5173/api/alerts"))
    ```

For HTTP API:
    ```python
    from floodguard_cache.api.app import app
    ```
"""

from floodguard_cache.config import get_redis_client, settings
from floodguard_cache.entities import CachedResponse, FetchRequest, Notification, PendingWrite
from floodguard_cache.exceptions import (
    CacheBackendError,
    InvalidRequestError,
    NetworkUnavailableError,
    OfflineCacheError,
)
from floodguard_cache.handlers import ProxyHandler, WorkerHandler
from floodguard_cache.protocols import CacheStore, Fetcher, NotificationCenter, SyncQueue
from floodguard_cache.repositories import HttpxFetcher, MemoryCacheStore, RedisCacheStore, RedisSyncQueue
from floodguard_cache.services import OfflineCacheWorker, RequestRouter

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "Fetcher",
    "NotificationCenter",
    "SyncQueue",
    # Services (caching logic)
    "OfflineCacheWorker",
    "RequestRouter",
    # Handlers (HTTP)
    "ProxyHandler",
    "WorkerHandler",
    # Repositories (data access)
    "HttpxFetcher",
    "MemoryCacheStore",
    "RedisCacheStore",
    "RedisSyncQueue",
    # Entities (domain models)
    "CachedResponse",
    "FetchRequest",
    "Notification",
    "PendingWrite",
    # Errors
    "OfflineCacheError",
    "NetworkUnavailableError",
    "CacheBackendError",
    "InvalidRequestError",
]
