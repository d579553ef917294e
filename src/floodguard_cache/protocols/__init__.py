"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → memory, httpx → a fake, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from floodguard_cache.protocols import CacheStore, Fetcher

    store: CacheStore = RedisCacheStore.create()  # works
    store: CacheStore = MemoryCacheStore()        # also works
    ```
"""

from .cache_store import CacheStore
from .fetcher import Fetcher
from .notification_center import NotificationCenter
from .sync_queue import SyncQueue

__all__ = [
    "CacheStore",
    "Fetcher",
    "NotificationCenter",
    "SyncQueue",
]
