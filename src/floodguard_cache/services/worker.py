"""Worker facade.

Composes the lifecycle manager, the request router and its strategies, push
notifications and background sync behind one object that receives the
platform's events: install, activate, fetch, push, notificationclick, sync.
"""

import asyncio
import logging

from floodguard_cache.config import settings, versioned_cache_name
from floodguard_cache.entities import CachedResponse, ClickOutcome, FetchRequest, Notification, PendingWrite
from floodguard_cache.exceptions import CacheBackendError
from floodguard_cache.protocols import CacheStore, Fetcher, NotificationCenter, SyncQueue

from .background import BackgroundOutcome, TaskTracker
from .lifecycle import ActivateResult, InstallResult, LifecycleManager
from .push import PushNotificationHandler
from .router import RequestRouter
from .strategies import ApiStrategy, DocumentStrategy, ImageStrategy, StaticStrategy
from .sync import BackgroundSyncService, SyncResult

logger = logging.getLogger(__name__)


class OfflineCacheWorker:
    """Offline caching layer between the FloodGuard front end and its origin.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: Redis or memory
    - Fetcher: httpx or a test fake
    - SyncQueue: Redis or memory
    - NotificationCenter: where notifications are shown

    Example:
        ```python
        worker = OfflineCacheWorker.create(
            store=RedisCacheStore.create(),
            fetcher=HttpxFetcher.create(),
            queue=RedisSyncQueue.create(),
            notifications=MemoryNotificationCenter(),
        )
        await worker.start()
        response = await worker.fetch(FetchRequest.get("http://localhost:5000/api/alerts"))
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        lifecycle: LifecycleManager,
        router: RequestRouter,
        push: PushNotificationHandler,
        sync: BackgroundSyncService,
        tasks: TaskTracker,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._lifecycle = lifecycle
        self._router = router
        self._push = push
        self._sync = sync
        self._tasks = tasks
        self._periodic_sync: asyncio.Task[BackgroundOutcome] | None = None

    @classmethod
    def create(
        cls,
        store: CacheStore,
        fetcher: Fetcher,
        queue: SyncQueue,
        notifications: NotificationCenter,
        cache_prefix: str | None = None,
        cache_version: str | None = None,
        origin_url: str | None = None,
        vary_headers: tuple[str, ...] | None = None,
        max_retries: int | None = None,
        notification_title: str | None = None,
    ) -> "OfflineCacheWorker":
        """Factory method wiring every component with settings as defaults.

        Args:
            store: Cache storage backend (required).
            fetcher: Outbound network (required).
            queue: Pending-write queue (required).
            notifications: Notification center (required).
            cache_prefix: Cache name prefix. If None, uses settings.
            cache_version: Cache version string. If None, uses settings.
            origin_url: Origin base URL. If None, uses settings.
            vary_headers: Header names in cache keys. If None, uses settings.
            max_retries: Replay attempts per write. If None, uses settings.
            notification_title: Push notification title. If None, uses settings.

        Returns:
            Configured OfflineCacheWorker
        """
        prefix = settings.cache_prefix if cache_prefix is None else cache_prefix
        version = cache_version or settings.cache_version
        static_cache = versioned_cache_name(prefix, "static", version)
        dynamic_cache = versioned_cache_name(prefix, "dynamic", version)

        tasks = TaskTracker()
        router = RequestRouter.create(
            document=DocumentStrategy(store, fetcher, dynamic_cache, vary_headers),
            api=ApiStrategy(store, fetcher, dynamic_cache, tasks, vary_headers),
            image=ImageStrategy(store, fetcher, dynamic_cache, vary_headers),
            static=StaticStrategy(store, fetcher, static_cache, vary_headers),
        )
        lifecycle = LifecycleManager(
            store,
            fetcher,
            static_cache_name=static_cache,
            dynamic_cache_name=dynamic_cache,
            origin_url=origin_url,
        )
        return cls(
            store=store,
            fetcher=fetcher,
            lifecycle=lifecycle,
            router=router,
            push=PushNotificationHandler(notifications, title=notification_title),
            sync=BackgroundSyncService(queue, fetcher, max_retries=max_retries),
            tasks=tasks,
        )

    # Lifecycle events

    async def install(self) -> InstallResult:
        return await self._lifecycle.install()

    async def activate(self) -> ActivateResult:
        return await self._lifecycle.activate()

    async def start(self) -> tuple[InstallResult, ActivateResult]:
        """Install, then activate right away (install always skips waiting)."""
        installed = await self.install()
        activated = await self.activate()
        return installed, activated

    async def shutdown(self) -> None:
        """Let in-flight background work finish, then release the network client."""
        if self._periodic_sync is not None:
            self._periodic_sync.cancel()
            self._periodic_sync = None
        await self._tasks.drain()
        close = getattr(self._fetcher, "close", None)
        if close is not None:
            await close()

    # Fetch event

    def classify(self, request: FetchRequest) -> str | None:
        return self._router.classify(request)

    async def fetch(self, request: FetchRequest) -> CachedResponse:
        """Produce the response for a request the page sent.

        Requests are passed straight to the network until the worker is
        activated, and always for non-GET methods.

        Raises:
            NetworkUnavailableError: When the network fails and nothing can
                stand in for the response
        """
        if self._lifecycle.controlling:
            try:
                response = await self._router.route(request)
            except CacheBackendError as e:
                logger.warning("Cache backend failed for %s, bypassing cache: %s", request.url, e)
                response = None
            if response is not None:
                return response
        return await self._fetcher.fetch(request)

    # Push events

    async def push(self, payload: bytes | None) -> Notification:
        return await self._push.on_push(payload)

    def notification_click(self, notification_id: str, action: str = "") -> ClickOutcome | None:
        return self._push.on_notification_click(notification_id, action)

    def notifications(self) -> list[Notification]:
        return self._push.list_active()

    # Background sync

    def enqueue(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
        idempotency_key: str | None = None,
    ) -> PendingWrite:
        return self._sync.enqueue(method, url, headers, body, idempotency_key)

    def queued(self) -> list[PendingWrite]:
        return self._sync.queued()

    def sync(self, tag: str) -> asyncio.Task[BackgroundOutcome]:
        """Fire the sync trigger without waiting for it."""
        return self._tasks.spawn(self._sync.on_sync(tag), name=f"sync {tag}")

    async def run_sync(self, tag: str) -> SyncResult | None:
        return await self._sync.on_sync(tag)

    def start_periodic_sync(self, interval: float) -> asyncio.Task[BackgroundOutcome]:
        """Start the loop that fires sync when connectivity returns; stopped by shutdown()."""
        if self._periodic_sync is None:
            self._periodic_sync = self._tasks.spawn(self._sync.run_periodic(interval), name="periodic sync")
        return self._periodic_sync

    # Introspection

    def cache_stats(self) -> dict:
        stats = self._store.get_stats()
        static_cache, dynamic_cache = self._lifecycle.current_caches
        stats["static_cache"] = static_cache
        stats["dynamic_cache"] = dynamic_cache
        stats["state"] = self._lifecycle.state.value
        return stats

    async def is_healthy(self) -> tuple[bool, bool]:
        """Return (cache backend healthy, origin reachable)."""
        return self._store.health_check(), await self._fetcher.is_available()

    @property
    def lifecycle(self) -> LifecycleManager:
        return self._lifecycle

    @property
    def router(self) -> RequestRouter:
        return self._router

    @property
    def tasks(self) -> TaskTracker:
        """Get the background task tracker (for testing)."""
        return self._tasks

    @property
    def store(self) -> CacheStore:
        """Get the underlying cache store (for testing)."""
        return self._store
