"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class InstallResponse(BaseModel):
    """Response DTO for the install event."""

    cache_name: str = Field(..., description="Static cache that was seeded")
    cached: list[str] = Field(default_factory=list, description="Manifest URLs stored")
    failed: list[str] = Field(default_factory=list, description="Manifest URLs that could not be cached")
    skip_waiting: bool = Field(..., description="Whether the worker activates immediately")


class ActivateResponse(BaseModel):
    """Response DTO for the activate event."""

    deleted: list[str] = Field(default_factory=list, description="Caches from previous versions removed")
    retained: list[str] = Field(default_factory=list, description="Caches still present")
    clients_claimed: bool = Field(..., description="Whether requests now go through the cache layer")


class NotificationActionItem(BaseModel):
    """Single action button of a notification."""

    action: str
    title: str
    icon: str = ""


class NotificationResponse(BaseModel):
    """Response DTO for a shown notification."""

    id: str = Field(..., description="Notification identifier")
    title: str
    body: str
    icon: str = ""
    badge: str = ""
    vibrate: list[int] = Field(default_factory=list, description="Vibration pattern in milliseconds")
    actions: list[NotificationActionItem] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict, description="Carries the deep-link 'url'")
    created_at: float = Field(..., description="Unix timestamp of creation")


class NotificationClickResponse(BaseModel):
    """Response DTO for a notification click."""

    notification_id: str
    action: str
    open_url: str | None = Field(None, description="URL the client should open or focus, if any")


class SyncScheduledResponse(BaseModel):
    """Response DTO for a sync trigger fired in the background."""

    tag: str
    scheduled: bool


class SyncResultResponse(BaseModel):
    """Response DTO for a sync run that was awaited."""

    tag: str
    processed: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    remaining: int = Field(..., ge=0, description="Writes still pending after the run")
    interrupted: bool = Field(..., description="True if the run stopped because the network was down")
    errors: list[str] = Field(default_factory=list)
    duration_seconds: float = Field(..., ge=0.0)


class PendingWriteResponse(BaseModel):
    """Response DTO for a queued write."""

    id: str
    method: str
    url: str
    idempotency_key: str
    status: str = Field(..., description="'pending' or 'failed'")
    retries: int = Field(..., ge=0)
    max_retries: int = Field(..., ge=1)
    created_at: float
    last_error: str | None = None


class QueueStatusResponse(BaseModel):
    """Response DTO for the sync queue contents."""

    total: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    writes: list[PendingWriteResponse] = Field(default_factory=list)


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    backend: str = Field(..., description="Cache backend ('redis' or 'memory')")
    state: str = Field(..., description="Worker lifecycle state")
    static_cache: str
    dynamic_cache: str
    caches: dict[str, int] = Field(default_factory=dict, description="Entry count per named cache")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    origin_reachable: bool = Field(..., description="Whether the origin server answers")
