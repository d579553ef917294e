"""Caching strategies.

Each strategy fully owns producing the response for a request it was
assigned by the router:

- DocumentStrategy: network first, cached copy or cached root as fallback
- ApiStrategy: cache first with a background refresh (stale-while-revalidate)
- ImageStrategy: cache first, SVG placeholder when offline
- StaticStrategy: cache first against the static cache, 404 when offline

Only HTTP 200 responses are ever written to a cache.
"""

import logging

from floodguard_cache.config import settings
from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import NetworkUnavailableError
from floodguard_cache.protocols import CacheStore, Fetcher

from .background import TaskTracker
from .fallbacks import asset_unavailable_response, offline_api_response, placeholder_image_response

logger = logging.getLogger(__name__)


class CacheStrategy:
    """Base class for strategies bound to one named cache.

    Subclasses implement ``handle``. Strategies marked ``public`` serve
    assets that are the same for every user, so their keys ignore the vary
    headers.
    """

    name = "base"
    public = False

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        cache_name: str,
        vary_headers: tuple[str, ...] | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            store: Cache storage backend
            fetcher: Outbound network
            cache_name: Named cache this strategy reads and writes
            vary_headers: Header names that are part of the cache key. Defaults to settings.
        """
        self._store = store
        self._fetcher = fetcher
        self._cache_name = cache_name
        if self.public:
            self._vary: tuple[str, ...] = ()
        else:
            self._vary = settings.cache_vary_headers if vary_headers is None else vary_headers

    @property
    def cache_name(self) -> str:
        return self._cache_name

    async def handle(self, request: FetchRequest) -> CachedResponse:
        raise NotImplementedError

    def _lookup(self, request: FetchRequest) -> CachedResponse | None:
        return self._store.match(self._cache_name, request.cache_key(self._vary))

    async def _fetch_and_store(self, request: FetchRequest) -> CachedResponse:
        """Fetch from the network; store the response if it is a 200.

        Raises:
            NetworkUnavailableError: If the origin cannot be reached
        """
        response = await self._fetcher.fetch(request)
        if response.status == 200:
            self._store.put(self._cache_name, request.cache_key(self._vary), response)
        return response

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cache_name={self._cache_name!r})"


class DocumentStrategy(CacheStrategy):
    """Network first; on failure the cached page, then the cached root document."""

    name = "document"

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        cache_name: str,
        vary_headers: tuple[str, ...] | None = None,
        root_path: str = "/",
    ) -> None:
        super().__init__(store, fetcher, cache_name, vary_headers)
        self._root_path = root_path

    async def handle(self, request: FetchRequest) -> CachedResponse:
        try:
            return await self._fetch_and_store(request)
        except NetworkUnavailableError:
            logger.info("Network failed for document %s, serving from cache", request.url)

        cached = self._store.match_any(request.cache_key(self._vary))
        if cached is not None:
            return cached

        # The precached app shell is stored without credentials
        root = request.resolve(self._root_path)
        cached = self._store.match_any(root.cache_key())
        if cached is not None:
            return cached

        raise NetworkUnavailableError(request.url, "no cached document or root page")


class ApiStrategy(CacheStrategy):
    """Cache first, refreshing the cached entry in the background."""

    name = "api"

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        cache_name: str,
        tasks: TaskTracker,
        vary_headers: tuple[str, ...] | None = None,
    ) -> None:
        super().__init__(store, fetcher, cache_name, vary_headers)
        self._tasks = tasks

    async def handle(self, request: FetchRequest) -> CachedResponse:
        cached = self._lookup(request)
        if cached is not None:
            self._tasks.spawn(self._fetch_and_store(request), name=f"refresh {request.url}")
            return cached

        try:
            return await self._fetch_and_store(request)
        except NetworkUnavailableError:
            logger.info("API request failed: %s", request.url)
            return offline_api_response(request.url)


class ImageStrategy(CacheStrategy):
    """Cache first; an SVG placeholder instead of a broken image when offline."""

    name = "image"

    async def handle(self, request: FetchRequest) -> CachedResponse:
        cached = self._lookup(request)
        if cached is not None:
            return cached

        try:
            return await self._fetch_and_store(request)
        except NetworkUnavailableError:
            logger.debug("Image unavailable offline: %s", request.url)
            return placeholder_image_response(request.url)


class StaticStrategy(CacheStrategy):
    """Cache first against the static cache; a hard 404 when offline."""

    name = "static"
    public = True

    async def handle(self, request: FetchRequest) -> CachedResponse:
        cached = self._lookup(request)
        if cached is not None:
            return cached

        try:
            return await self._fetch_and_store(request)
        except NetworkUnavailableError:
            logger.info("Static asset failed: %s", request.url)
            return asset_unavailable_response(request.url)
