"""Install and activate: seeding and retiring cache generations."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urljoin

from floodguard_cache.config import settings
from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import NetworkUnavailableError
from floodguard_cache.protocols import CacheStore, Fetcher

logger = logging.getLogger(__name__)

STATIC_ASSETS: tuple[str, ...] = (
    "/",
    "/static/js/bundle.js",
    "/static/css/main.css",
    "/manifest.json",
    "/icons/icon-192x192.png",
    "/icons/icon-512x512.png",
)


class WorkerState(str, Enum):
    """Lifecycle states, in the order a worker goes through them."""

    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"


@dataclass(frozen=True)
class InstallResult:
    """Outcome of seeding the static cache.

    Attributes:
        cache_name: The static cache that was seeded
        cached: Manifest URLs stored
        failed: Manifest URLs that could not be fetched (or were not 200)
        skip_waiting: Whether the worker asked to activate immediately
    """

    cache_name: str
    cached: tuple[str, ...]
    failed: tuple[str, ...]
    skip_waiting: bool = True

    @property
    def complete(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class ActivateResult:
    """Outcome of retiring old cache generations.

    Attributes:
        deleted: Cache names that were removed
        retained: Cache names still present
        clients_claimed: Whether the worker now controls requests
    """

    deleted: tuple[str, ...]
    retained: tuple[str, ...]
    clients_claimed: bool = True


class LifecycleManager:
    """Initializes and retires cache generations.

    Example:
        ```python
        lifecycle = LifecycleManager(store, fetcher)
        await lifecycle.install()   # seeds floodguard-static-v1.0.0
        await lifecycle.activate()  # deletes every other cache
        assert lifecycle.controlling
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        static_cache_name: str | None = None,
        dynamic_cache_name: str | None = None,
        origin_url: str | None = None,
        static_assets: tuple[str, ...] = STATIC_ASSETS,
    ) -> None:
        """Initialize the lifecycle manager.

        Args:
            store: Cache storage backend
            fetcher: Outbound network
            static_cache_name: Current static cache. Defaults to settings.
            dynamic_cache_name: Current dynamic cache. Defaults to settings.
            origin_url: Base URL manifest paths are resolved against. Defaults to settings.
            static_assets: Manifest of asset paths to precache
        """
        self._store = store
        self._fetcher = fetcher
        self._static_cache = static_cache_name or settings.static_cache_name
        self._dynamic_cache = dynamic_cache_name or settings.dynamic_cache_name
        self._origin_url = origin_url or settings.origin_url
        self._assets = static_assets
        self._state = WorkerState.PARSED

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def controlling(self) -> bool:
        """True once clients are claimed and requests go through the router."""
        return self._state is WorkerState.ACTIVATED

    @property
    def current_caches(self) -> tuple[str, str]:
        return self._static_cache, self._dynamic_cache

    async def _precache(self, url: str) -> CachedResponse:
        request = FetchRequest.get(url)
        response = await self._fetcher.fetch(request)
        if response.status != 200:
            raise ValueError(f"unexpected status {response.status}")
        self._store.put(self._static_cache, request.cache_key(), response)
        return response

    async def _precache_all(self) -> tuple[list[str], list[str]]:
        """Precache every manifest URL.

        Raises:
            CacheBackendError: If the cache store fails
        """
        urls = [urljoin(self._origin_url, path) for path in self._assets]
        results = await asyncio.gather(*(self._precache(url) for url in urls), return_exceptions=True)

        cached: list[str] = []
        failed: list[str] = []
        for url, result in zip(urls, results):
            if isinstance(result, (NetworkUnavailableError, ValueError)):
                failed.append(url)
                logger.error("Error caching static asset %s: %s", url, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                cached.append(url)
        return cached, failed

    async def install(self) -> InstallResult:
        """Seed the static cache from the asset manifest.

        Best-effort: assets that fail are logged and skipped, and install
        still signals skip-waiting so activation is never blocked.

        If the cache store itself fails, the error propagates and the
        worker returns to the state it was in before.

        Returns:
            InstallResult listing cached and failed URLs
        """
        logger.info("Installing offline cache %s", self._static_cache)
        previous = self._state
        self._state = WorkerState.INSTALLING
        try:
            cached, failed = await self._precache_all()
        except Exception:
            self._state = previous
            raise

        if not failed:
            logger.info("Static assets cached (%d)", len(cached))

        self._state = WorkerState.INSTALLED
        return InstallResult(
            cache_name=self._static_cache,
            cached=tuple(cached),
            failed=tuple(failed),
        )

    async def activate(self) -> ActivateResult:
        """Delete caches of previous versions and claim clients.

        Returns:
            ActivateResult listing deleted and retained caches
        """
        logger.info("Activating offline cache")
        previous = self._state
        self._state = WorkerState.ACTIVATING

        keep = {self._static_cache, self._dynamic_cache}
        deleted: list[str] = []
        try:
            for cache_name in self._store.cache_names():
                if cache_name not in keep:
                    logger.info("Deleting old cache: %s", cache_name)
                    self._store.delete_cache(cache_name)
                    deleted.append(cache_name)
            retained = self._store.cache_names()
        except Exception:
            self._state = previous
            raise

        self._state = WorkerState.ACTIVATED
        logger.info("Offline cache activated")
        return ActivateResult(deleted=tuple(deleted), retained=tuple(retained))
