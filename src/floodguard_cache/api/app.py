import logging
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from floodguard_cache.api.dependencies import ProxyHandlerDep, WorkerHandlerDep, lifespan
from floodguard_cache.config import settings
from floodguard_cache.dto import (
    ActivateResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    InstallResponse,
    NotificationClickRequest,
    NotificationClickResponse,
    NotificationResponse,
    PendingWriteResponse,
    QueueStatusResponse,
    QueueWriteRequest,
    SyncRequest,
    SyncResultResponse,
    SyncScheduledResponse,
)

WORKER_PREFIX = "/__worker__"
PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

app = FastAPI(
    title="FloodGuard Offline Cache",
    description="Offline caching proxy for the FloodGuard front end",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

worker_router = APIRouter(prefix=WORKER_PREFIX, tags=["worker"])


@worker_router.get("")
async def root() -> dict[str, Any]:
    """Worker endpoint index."""
    return {
        "name": "FloodGuard Offline Cache",
        "version": "0.1.0",
        "static_cache": settings.static_cache_name,
        "dynamic_cache": settings.dynamic_cache_name,
        "endpoints": {
            "install": f"{WORKER_PREFIX}/install",
            "activate": f"{WORKER_PREFIX}/activate",
            "push": f"{WORKER_PREFIX}/push",
            "notifications": f"{WORKER_PREFIX}/notifications",
            "sync": f"{WORKER_PREFIX}/sync",
            "queue": f"{WORKER_PREFIX}/queue",
            "caches": f"{WORKER_PREFIX}/caches",
            "health": f"{WORKER_PREFIX}/health",
        },
    }


@worker_router.post("/install", response_model=InstallResponse)
async def install(handler: WorkerHandlerDep) -> InstallResponse:
    """Seed the static cache from the asset manifest."""
    return await handler.install()


@worker_router.post("/activate", response_model=ActivateResponse)
async def activate(handler: WorkerHandlerDep) -> ActivateResponse:
    """Delete caches of previous versions and take control of requests."""
    return await handler.activate()


@worker_router.post("/push", response_model=NotificationResponse)
async def push(request: Request, handler: WorkerHandlerDep) -> NotificationResponse:
    """Receive a push message; the raw request body is the payload."""
    return await handler.push(await request.body())


@worker_router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(handler: WorkerHandlerDep) -> list[NotificationResponse]:
    """List active notifications, newest first."""
    return await handler.list_notifications()


@worker_router.post("/notifications/{notification_id}/click", response_model=NotificationClickResponse)
async def notification_click(
    notification_id: str,
    request: NotificationClickRequest,
    handler: WorkerHandlerDep,
) -> NotificationClickResponse:
    """Report a click on a notification or one of its actions."""
    return await handler.notification_click(notification_id, request)


@worker_router.post("/sync")
async def sync(
    response: Response,
    handler: WorkerHandlerDep,
    request: SyncRequest | None = None,
    wait: bool = False,
) -> SyncScheduledResponse | SyncResultResponse:
    """Fire a background sync trigger.

    Without ``wait`` the sync runs in the background and 202 is returned.
    """
    if not wait:
        response.status_code = status.HTTP_202_ACCEPTED
    return await handler.sync(request or SyncRequest(), wait=wait)


@worker_router.post("/queue", response_model=PendingWriteResponse, status_code=status.HTTP_201_CREATED)
async def queue_write(request: QueueWriteRequest, handler: WorkerHandlerDep) -> PendingWriteResponse:
    """Queue a write that failed offline for background sync."""
    return await handler.queue_write(request)


@worker_router.get("/queue", response_model=QueueStatusResponse)
async def queue_status(handler: WorkerHandlerDep) -> QueueStatusResponse:
    """List queued writes."""
    return await handler.queue_status()


@worker_router.get("/caches", response_model=CacheStatsResponse)
async def cache_stats(handler: WorkerHandlerDep) -> CacheStatsResponse:
    """Named caches and their entry counts."""
    return await handler.cache_stats()


@worker_router.get("/health", response_model=HealthCheckResponse)
async def health(handler: WorkerHandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


app.include_router(worker_router)


# Registered last so the worker routes take precedence
@app.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(request: Request, handler: ProxyHandlerDep) -> Response:
    """Serve any other request through the offline cache."""
    return await handler.handle(request)


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "floodguard_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
