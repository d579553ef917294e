"""Service layer for the offline caching logic.

This layer contains the caching strategies, request routing, lifecycle,
push notification and background sync logic. Services depend on protocols
(interfaces), not concrete implementations, making them testable and
flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Caching) -> (Redis / network)

Usage:
    ```python
    from floodguard_cache.services import OfflineCacheWorker

    worker = OfflineCacheWorker.create(store=store, fetcher=fetcher, queue=queue, notifications=center)
    await worker.start()
    ```
"""

from .background import BackgroundOutcome, TaskTracker
from .lifecycle import STATIC_ASSETS, ActivateResult, InstallResult, LifecycleManager, WorkerState
from .push import PushNotificationHandler
from .router import API_CACHE_PATTERNS, ClassificationRule, RequestRouter
from .strategies import ApiStrategy, CacheStrategy, DocumentStrategy, ImageStrategy, StaticStrategy
from .sync import SYNC_TAG, BackgroundSyncService, SyncResult
from .worker import OfflineCacheWorker

__all__ = [
    "API_CACHE_PATTERNS",
    "STATIC_ASSETS",
    "SYNC_TAG",
    "ActivateResult",
    "ApiStrategy",
    "BackgroundOutcome",
    "BackgroundSyncService",
    "CacheStrategy",
    "ClassificationRule",
    "DocumentStrategy",
    "ImageStrategy",
    "InstallResult",
    "LifecycleManager",
    "OfflineCacheWorker",
    "PushNotificationHandler",
    "RequestRouter",
    "StaticStrategy",
    "SyncResult",
    "TaskTracker",
    "WorkerState",
]
