"""Dry-run notifier that only writes notifications to the log."""

from __future__ import annotations

import logging

from adapters.notification_formatting import format_notification
from core.models import Notification

LOGGER = logging.getLogger(__name__)


class LogNotifier:
    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.sent.append(notification)
        LOGGER.info("[dry-run] %s\n%s", notification.category, format_notification(notification, mode="plain"))
