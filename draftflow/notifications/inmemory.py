"""In-memory notification dispatcher for testing."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, List

from .base import NotificationDispatcher
from .models import Notification, Recipient


class InMemoryNotificationDispatcher(NotificationDispatcher):
    """Keeps delivered notifications in per-recipient inboxes."""

    def __init__(self) -> None:
        self.sent: List[Notification] = []
        self._inboxes: Dict[Recipient, List[Notification]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def deliver(self, notification: Notification) -> None:
        async with self._lock:
            self.sent.append(notification)
            for recipient in notification.recipients:
                self._inboxes[recipient].append(notification)

    def inbox(self, recipient: Recipient) -> List[Notification]:
        return list(self._inboxes[recipient])
