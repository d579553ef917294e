"""
Shared fixtures: an in-memory cache, a scripted network and a worker wired to both.
"""

import asyncio

import pytest

from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import InvalidRequestError, NetworkUnavailableError
from floodguard_cache.repositories import MemoryCacheStore, MemoryNotificationCenter, MemorySyncQueue
from floodguard_cache.services import OfflineCacheWorker

ORIGIN = "http://origin.test"
STATIC_CACHE = "static-v1"
DYNAMIC_CACHE = "dynamic-v1"


class FakeFetcher:
    """Scripted stand-in for the network.

    Unknown URLs answer 404. ``offline`` makes every fetch fail, ``failing``
    makes only the listed URLs fail, ``invalid`` lists URLs that can never be
    sent, and ``gate`` holds fetches until set.
    """

    def __init__(self) -> None:
        self.responses: dict[str, list[CachedResponse]] = {}
        self.calls: list[FetchRequest] = []
        self.offline = False
        self.failing: set[str] = set()
        self.invalid: set[str] = set()
        self.gate: asyncio.Event | None = None

    def respond(self, url: str, body: bytes | str, status: int = 200, headers: dict[str, str] | None = None) -> None:
        self.responses[url] = [CachedResponse.build(body, status=status, headers=headers, url=url)]

    def respond_sequence(self, url: str, *statuses: int) -> None:
        """Answer ``url`` with each status in turn, repeating the last one."""
        self.responses[url] = [CachedResponse.build("", status=s, url=url) for s in statuses]

    @property
    def urls(self) -> list[str]:
        return [call.url for call in self.calls]

    async def fetch(self, request: FetchRequest) -> CachedResponse:
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.offline or request.url in self.failing:
            raise NetworkUnavailableError(request.url, "offline")
        if request.url in self.invalid:
            raise InvalidRequestError(request.url, "invalid URL")

        scripted = self.responses.get(request.url)
        if not scripted:
            return CachedResponse.build("Not Found", status=404, url=request.url)
        return scripted.pop(0) if len(scripted) > 1 else scripted[0]

    async def is_available(self) -> bool:
        return not self.offline


@pytest.fixture
def store():
    """Create an empty in-memory cache store."""
    return MemoryCacheStore()


@pytest.fixture
def fetcher():
    """Create a scripted fetcher that is online and knows no URLs."""
    return FakeFetcher()


@pytest.fixture
def queue():
    return MemorySyncQueue()


@pytest.fixture
def notifications():
    return MemoryNotificationCenter()


@pytest.fixture
def worker(store, fetcher, queue, notifications):
    """Create a worker with an empty cache prefix, version v1, and entries keyed by credentials."""
    return OfflineCacheWorker.create(
        store=store,
        fetcher=fetcher,
        queue=queue,
        notifications=notifications,
        cache_prefix="",
        cache_version="v1",
        origin_url=ORIGIN,
        vary_headers=("authorization", "cookie"),
        max_retries=3,
        notification_title="FloodGuard Alert",
    )
