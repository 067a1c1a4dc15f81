from __future__ import annotations

import logging

from rhdocs.models.notification import Notification, NotificationVariant

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Transient success/error banners for one workspace."""

    def __init__(self) -> None:
        self.items: list[Notification] = []

    def success(self, title: str, description: str = "") -> Notification:
        logger.info("%s: %s", title, description)
        return self._push(Notification(title=title, description=description))

    def error(self, title: str, description: str = "") -> Notification:
        logger.warning("%s: %s", title, description)
        return self._push(
            Notification(title=title, description=description, variant=NotificationVariant.DESTRUCTIVE)
        )

    def drain(self) -> list[Notification]:
        items, self.items = self.items, []
        return items

    def _push(self, notification: Notification) -> Notification:
        self.items.append(notification)
        return notification
