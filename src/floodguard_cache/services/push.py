"""Push messages to user-visible notifications."""

import logging

from floodguard_cache.config import settings
from floodguard_cache.entities import ClickOutcome, Notification, NotificationAction
from floodguard_cache.protocols import NotificationCenter

logger = logging.getLogger(__name__)

DEFAULT_BODY = "New flood alert received"
ALERTS_URL = "/alerts"
VIBRATE_PATTERN = (200, 100, 200, 100, 200, 100, 200)

VIEW_ACTION = NotificationAction(action="view", title="View Alert", icon="/icons/view-icon.png")
CLOSE_ACTION = NotificationAction(action="close", title="Close", icon="/icons/close-icon.png")


def decode_payload(payload: bytes | None) -> str | None:
    """Return the payload text, or None if it is empty or not valid UTF-8."""
    if not payload:
        return None
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Ignoring malformed push payload (%d bytes)", len(payload))
        return None
    return text or None


class PushNotificationHandler:
    """Materializes push messages as notifications and handles clicks."""

    def __init__(self, center: NotificationCenter, title: str | None = None) -> None:
        """Initialize the handler.

        Args:
            center: Where notifications are shown
            title: Notification title. Defaults to settings.
        """
        self._center = center
        self._title = title or settings.notification_title

    def build_notification(self, payload: bytes | None) -> Notification:
        return Notification(
            title=self._title,
            body=decode_payload(payload) or DEFAULT_BODY,
            icon="/icons/icon-192x192.png",
            badge="/icons/icon-72x72.png",
            vibrate=VIBRATE_PATTERN,
            actions=(VIEW_ACTION, CLOSE_ACTION),
            data={"url": ALERTS_URL},
        )

    async def on_push(self, payload: bytes | None) -> Notification:
        """Handle a push message.

        The notification is shown before this returns, so callers that await
        it keep the push alive until the user can see it.

        Args:
            payload: Raw push body, possibly empty

        Returns:
            The notification that was shown
        """
        logger.info("Push notification received")
        notification = self.build_notification(payload)
        await self._center.show(notification)
        return notification

    def on_notification_click(self, notification_id: str, action: str = "") -> ClickOutcome | None:
        """Handle a click on a notification or one of its actions.

        The notification is always closed. "view" or a click on the body
        ("") opens the deep link; anything else only dismisses.

        Returns:
            ClickOutcome, or None if the notification is unknown
        """
        notification = self._center.get(notification_id)
        if notification is None:
            return None

        logger.info("Notification %s clicked (action=%r)", notification_id, action)
        self._center.close(notification_id)

        if action in ("", VIEW_ACTION.action):
            return ClickOutcome(
                notification_id=notification_id,
                action=action,
                open_url=notification.url or "/",
            )
        return ClickOutcome(notification_id=notification_id, action=action)

    def list_active(self) -> list[Notification]:
        return self._center.list_active()
