"""In-memory notification center."""

import logging
from collections import OrderedDict

from floodguard_cache.entities import Notification

logger = logging.getLogger(__name__)


class MemoryNotificationCenter:
    """Keeps shown notifications in process memory.

    Satisfies the NotificationCenter protocol. Only the most recent
    ``max_notifications`` are kept; older ones are dropped as new ones arrive.
    """

    def __init__(self, max_notifications: int = 50) -> None:
        self._max = max_notifications
        self._active: OrderedDict[str, Notification] = OrderedDict()

    async def show(self, notification: Notification) -> None:
        self._active[notification.id] = notification
        while len(self._active) > self._max:
            dropped, _ = self._active.popitem(last=False)
            logger.debug("Dropped notification %s (history full)", dropped)
        logger.info("Showing notification %s: %s", notification.id, notification.body)

    def get(self, notification_id: str) -> Notification | None:
        return self._active.get(notification_id)

    def close(self, notification_id: str) -> bool:
        return self._active.pop(notification_id, None) is not None

    def list_active(self) -> list[Notification]:
        return list(reversed(self._active.values()))
