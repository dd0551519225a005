"""Notification dispatcher factory and mapping."""

from __future__ import annotations

import os
from typing import Optional

from ..config import DraftflowConfig, load_config
from ..exceptions import ConfigurationError
from .base import NotificationDispatcher
from .inmemory import InMemoryNotificationDispatcher
from .log import LoggingNotificationDispatcher
from .mapping import NOTIFICATIONS, notification_for
from .models import Notification, NotificationSpec, Recipient


def get_dispatcher(
    backend: Optional[str] = None, config: Optional[DraftflowConfig] = None
) -> NotificationDispatcher:
    """Factory function to get the configured notification dispatcher."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("DRAFTFLOW_NOTIFIER")
        or config.notifications.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryNotificationDispatcher()
    elif backend == "log":
        return LoggingNotificationDispatcher()
    elif backend == "redis":
        from .redis import RedisNotificationDispatcher

        redis_conf = config.notifications.redis
        return RedisNotificationDispatcher(
            host=redis_conf.host,
            port=redis_conf.port,
            db=redis_conf.db,
            password=redis_conf.password,
            key_prefix=redis_conf.key_prefix,
        )
    else:
        raise ConfigurationError(f"Unsupported notification backend: {backend}")


__all__ = [
    "NOTIFICATIONS",
    "InMemoryNotificationDispatcher",
    "LoggingNotificationDispatcher",
    "Notification",
    "NotificationDispatcher",
    "NotificationSpec",
    "Recipient",
    "get_dispatcher",
    "notification_for",
]
