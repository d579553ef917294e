"""Request DTOs for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from floodguard_cache.services import SYNC_TAG


class NotificationClickRequest(BaseModel):
    """Request DTO for a click on a notification."""

    action: str = Field(
        "",
        description="Action identifier ('view', 'close'); empty for a click on the notification body",
    )


class SyncRequest(BaseModel):
    """Request DTO for firing a background sync trigger."""

    tag: str = Field(SYNC_TAG, description="Sync tag to fire", min_length=1)


class QueueWriteRequest(BaseModel):
    """Request DTO for queueing a write that failed offline."""

    method: Literal["POST", "PUT", "PATCH", "DELETE"] = Field(..., description="HTTP method of the write")
    url: str = Field(..., description="Absolute URL, or a path on the origin", min_length=1)
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers to replay")
    body: str | None = Field(None, description="Request body to replay")
    idempotency_key: str | None = Field(
        None,
        description="Key sent as Idempotency-Key on every replay (generated if omitted)",
        min_length=1,
    )
