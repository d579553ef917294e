"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from floodguard_cache.config import get_redis_client, settings
from floodguard_cache.exceptions import OfflineCacheError
from floodguard_cache.handlers import ProxyHandler, WorkerHandler
from floodguard_cache.repositories import (
    HttpxFetcher,
    MemoryCacheStore,
    MemoryNotificationCenter,
    MemorySyncQueue,
    RedisCacheStore,
    RedisSyncQueue,
)
from floodguard_cache.services import OfflineCacheWorker

logger = logging.getLogger(__name__)


def build_worker() -> OfflineCacheWorker:
    """Wire the worker with the backends selected in settings.

    ``CACHE_BACKEND=redis`` keeps caches and the sync queue in Redis;
    ``CACHE_BACKEND=memory`` keeps both in process memory.
    """
    if settings.cache_backend == "redis":
        client = get_redis_client()
        store = RedisCacheStore.create(redis_client=client)
        queue = RedisSyncQueue.create(redis_client=client)
    else:
        store = MemoryCacheStore()
        queue = MemorySyncQueue()

    return OfflineCacheWorker.create(
        store=store,
        fetcher=HttpxFetcher.create(),
        queue=queue,
        notifications=MemoryNotificationCenter(),
    )


def get_worker_handler(request: Request) -> WorkerHandler:
    """Dependency injection for WorkerHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "worker_handler", None)
    if handler is None:
        raise RuntimeError("WorkerHandler not initialized. Check lifespan setup.")
    return handler


def get_proxy_handler(request: Request) -> ProxyHandler:
    """Dependency injection for ProxyHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state, then runs the
    install and activate events so the cache layer controls requests from
    the first one. If the cache backend is down at startup the worker stays
    inactive and every request goes straight to the origin.

    Cleanup:
        Waits for background work, closes the HTTP client and removes
        everything from app.state on shutdown
    """
    worker = build_worker()
    app.state.worker = worker
    app.state.worker_handler = WorkerHandler(worker=worker)
    app.state.proxy_handler = ProxyHandler(worker=worker)

    logger.info("Origin: %s", settings.origin_url)
    logger.info("Cache backend: %s", settings.cache_backend)

    try:
        installed, activated = await worker.start()
        logger.info(
            "Offline cache ready: %d assets cached, %d old caches deleted",
            len(installed.cached),
            len(activated.deleted),
        )
    except OfflineCacheError as e:
        logger.error("Offline cache failed to start, passing requests through: %s", e)

    if settings.sync_interval > 0:
        worker.start_periodic_sync(settings.sync_interval)

    yield

    await worker.shutdown()
    del app.state.proxy_handler
    del app.state.worker_handler
    del app.state.worker
    logger.info("Offline cache shut down")


# Type aliases for cleaner dependency injection
WorkerHandlerDep = Annotated[WorkerHandler, Depends(get_worker_handler)]
ProxyHandlerDep = Annotated[ProxyHandler, Depends(get_proxy_handler)]
