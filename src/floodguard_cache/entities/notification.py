"""Notification domain entities."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NotificationAction:
    """A button shown on a notification.

    Attributes:
        action: Identifier reported back on click (e.g. "view")
        title: Button label
        icon: Button icon URL
    """

    action: str
    title: str
    icon: str = ""


@dataclass(frozen=True)
class Notification:
    """Domain entity for a user-visible notification.

    Attributes:
        title: Notification title
        body: Notification text
        icon: Icon URL
        badge: Badge URL
        vibrate: Vibration pattern in milliseconds
        actions: Action buttons
        data: Arbitrary data; ``url`` is the deep link opened on click
        id: Unique notification identifier
        created_at: Unix timestamp of creation
    """

    title: str
    body: str
    icon: str = ""
    badge: str = ""
    vibrate: tuple[int, ...] = ()
    actions: tuple[NotificationAction, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)

    @property
    def url(self) -> str | None:
        return self.data.get("url")


@dataclass(frozen=True)
class ClickOutcome:
    """Result of a user interacting with a notification.

    Attributes:
        notification_id: The notification that was clicked
        action: The action identifier ("" for a click on the body)
        open_url: URL to open or focus, None when the click only dismisses
    """

    notification_id: str
    action: str
    open_url: str | None = None
