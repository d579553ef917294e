"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the worker
endpoints. Internal logic uses entities from the entities package.
"""

from .requests import NotificationClickRequest, QueueWriteRequest, SyncRequest
from .responses import (
    ActivateResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    InstallResponse,
    NotificationActionItem,
    NotificationClickResponse,
    NotificationResponse,
    PendingWriteResponse,
    QueueStatusResponse,
    SyncResultResponse,
    SyncScheduledResponse,
)

__all__ = [
    "NotificationClickRequest",
    "QueueWriteRequest",
    "SyncRequest",
    "ActivateResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
    "InstallResponse",
    "NotificationActionItem",
    "NotificationClickResponse",
    "NotificationResponse",
    "PendingWriteResponse",
    "QueueStatusResponse",
    "SyncResultResponse",
    "SyncScheduledResponse",
]
