"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cached_response import CachedResponse
from .notification import ClickOutcome, Notification, NotificationAction
from .pending_write import FAILED, PENDING, PendingWrite
from .request import CacheKey, FetchRequest, Headers, normalize_headers

__all__ = [
    "CacheKey",
    "CachedResponse",
    "ClickOutcome",
    "FAILED",
    "FetchRequest",
    "Headers",
    "Notification",
    "NotificationAction",
    "PENDING",
    "PendingWrite",
    "normalize_headers",
]
