"""Notification center protocol.

Where shown notifications live until the user acts on them.
"""

from typing import Protocol, runtime_checkable

from floodguard_cache.entities import Notification


@runtime_checkable
class NotificationCenter(Protocol):
    """Protocol for displaying and tracking notifications."""

    async def show(self, notification: Notification) -> None:
        """Display a notification."""
        ...

    def get(self, notification_id: str) -> Notification | None:
        ...

    def close(self, notification_id: str) -> bool:
        """Dismiss a notification.

        Returns:
            True if it was active, False otherwise
        """
        ...

    def list_active(self) -> list[Notification]:
        """Active notifications, newest first."""
        ...
