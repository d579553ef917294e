"""HTTP handlers for worker events.

Handlers convert between DTOs (API contracts) and worker calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
from urllib.parse import urljoin

from fastapi import HTTPException, status

from floodguard_cache.config import settings
from floodguard_cache.dto import (
    ActivateResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    InstallResponse,
    NotificationActionItem,
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
from floodguard_cache.entities import Notification, PendingWrite
from floodguard_cache.services import SYNC_TAG, OfflineCacheWorker

logger = logging.getLogger(__name__)


def to_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        title=notification.title,
        body=notification.body,
        icon=notification.icon,
        badge=notification.badge,
        vibrate=list(notification.vibrate),
        actions=[
            NotificationActionItem(action=a.action, title=a.title, icon=a.icon) for a in notification.actions
        ],
        data=dict(notification.data),
        created_at=notification.created_at,
    )


def to_pending_write_response(write: PendingWrite) -> PendingWriteResponse:
    return PendingWriteResponse(
        id=write.id,
        method=write.method,
        url=write.url,
        idempotency_key=write.idempotency_key,
        status=write.status,
        retries=write.retries,
        max_retries=write.max_retries,
        created_at=write.created_at,
        last_error=write.last_error,
    )


class WorkerHandler:
    """HTTP handlers for lifecycle, push, sync and introspection endpoints.

    This handler delegates logic to OfflineCacheWorker and handles
    HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses
    """

    def __init__(self, worker: OfflineCacheWorker, origin_url: str | None = None) -> None:
        """Initialize the worker handler.

        Args:
            worker: The offline cache worker (required).
            origin_url: Base URL relative queue URLs are resolved against. Defaults to settings.
        """
        self._worker = worker
        self._origin_url = origin_url or settings.origin_url

    async def install(self) -> InstallResponse:
        """Handle POST /__worker__/install requests."""
        try:
            result = await self._worker.install()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to install: {e}",
            ) from e

        return InstallResponse(
            cache_name=result.cache_name,
            cached=list(result.cached),
            failed=list(result.failed),
            skip_waiting=result.skip_waiting,
        )

    async def activate(self) -> ActivateResponse:
        """Handle POST /__worker__/activate requests."""
        try:
            result = await self._worker.activate()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to activate: {e}",
            ) from e

        return ActivateResponse(
            deleted=list(result.deleted),
            retained=list(result.retained),
            clients_claimed=result.clients_claimed,
        )

    async def push(self, payload: bytes) -> NotificationResponse:
        """Handle POST /__worker__/push requests.

        Args:
            payload: Raw push body (may be empty)
        """
        notification = await self._worker.push(payload or None)
        return to_notification_response(notification)

    async def list_notifications(self) -> list[NotificationResponse]:
        """Handle GET /__worker__/notifications requests."""
        return [to_notification_response(n) for n in self._worker.notifications()]

    async def notification_click(
        self,
        notification_id: str,
        request: NotificationClickRequest,
    ) -> NotificationClickResponse:
        """Handle POST /__worker__/notifications/{id}/click requests.

        Raises:
            HTTPException: 404 if the notification is unknown or already closed
        """
        outcome = self._worker.notification_click(notification_id, request.action)
        if outcome is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Notification not found: {notification_id}",
            )

        return NotificationClickResponse(
            notification_id=outcome.notification_id,
            action=outcome.action,
            open_url=outcome.open_url,
        )

    async def sync(
        self,
        request: SyncRequest,
        wait: bool = False,
    ) -> SyncScheduledResponse | SyncResultResponse:
        """Handle POST /__worker__/sync requests.

        Args:
            request: The sync request DTO
            wait: Await the run and return its result instead of scheduling it

        Raises:
            HTTPException: 404 for an unknown sync tag, 500 if the run fails
        """
        if request.tag != SYNC_TAG:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown sync tag: {request.tag}",
            )

        if not wait:
            self._worker.sync(request.tag)
            return SyncScheduledResponse(tag=request.tag, scheduled=True)

        try:
            result = await self._worker.run_sync(request.tag)
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Sync failed: {e}",
            ) from e

        if result is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown sync tag: {request.tag}",
            )

        return SyncResultResponse(
            tag=result.tag,
            processed=result.processed,
            succeeded=result.succeeded,
            failed=result.failed,
            remaining=result.remaining,
            interrupted=result.interrupted,
            errors=result.errors,
            duration_seconds=result.duration_seconds,
        )

    async def queue_write(self, request: QueueWriteRequest) -> PendingWriteResponse:
        """Handle POST /__worker__/queue requests.

        Raises:
            HTTPException: 422 if the URL could never be replayed
        """
        try:
            write = self._worker.enqueue(
                method=request.method,
                url=urljoin(self._origin_url, request.url),
                headers=request.headers,
                body=request.body,
                idempotency_key=request.idempotency_key,
            )
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(e),
            ) from e
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to queue write: {e}",
            ) from e

        return to_pending_write_response(write)

    async def queue_status(self) -> QueueStatusResponse:
        """Handle GET /__worker__/queue requests."""
        try:
            writes = self._worker.queued()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to read queue: {e}",
            ) from e

        return QueueStatusResponse(
            total=len(writes),
            pending=sum(1 for w in writes if w.is_pending),
            writes=[to_pending_write_response(w) for w in writes],
        )

    async def cache_stats(self) -> CacheStatsResponse:
        """Handle GET /__worker__/caches requests."""
        try:
            stats = self._worker.cache_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return CacheStatsResponse(
            backend=stats.get("backend", ""),
            state=stats.get("state", ""),
            static_cache=stats.get("static_cache", ""),
            dynamic_cache=stats.get("dynamic_cache", ""),
            caches=stats.get("caches", {}),
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /__worker__/health requests."""
        cache_healthy, origin_reachable = await self._worker.is_healthy()

        return HealthCheckResponse(
            status="healthy" if cache_healthy and origin_reachable else "degraded",
            cache_healthy=cache_healthy,
            origin_reachable=origin_reachable,
        )
