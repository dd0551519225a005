"""Dispatcher that only writes notifications to the log."""

from __future__ import annotations

import logging

from .base import NotificationDispatcher
from .models import Notification

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(NotificationDispatcher):
    async def deliver(self, notification: Notification) -> None:
        recipients = ", ".join(r.value for r in notification.recipients)
        logger.info(
            f"Notification [{recipients}] {notification.template}: {notification.message}"
        )
