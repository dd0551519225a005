"""Redis dispatcher: one list per recipient for downstream push services."""

from __future__ import annotations

from typing import Any, Optional

import redis.asyncio as redis

from .base import NotificationDispatcher
from .models import Notification


class RedisNotificationDispatcher(NotificationDispatcher):
    """Queue notifications on Redis lists keyed by recipient."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        key_prefix: str = "draftflow:notifications",
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.key_prefix = key_prefix
        self._redis: Optional[Any] = None

    def queue_name(self, recipient: str) -> str:
        return f"{self.key_prefix}:{recipient}"

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        await self._redis.ping()

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def deliver(self, notification: Notification) -> None:
        if not self._redis:
            await self.connect()

        payload = notification.to_json()
        for recipient in notification.recipients:
            await self._redis.lpush(self.queue_name(recipient.value), payload)
