"""Base interface for notification delivery."""

from __future__ import annotations

import abc

from ..contracts import Draft
from .models import Notification, NotificationSpec


class NotificationDispatcher(metaclass=abc.ABCMeta):
    """Abstract base for notification backends.

    Delivery is best effort: the engine logs failures and never lets them
    affect a committed transition.
    """

    async def connect(self) -> None:
        """Open connection to the backend (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to the backend (no-op by default)."""
        pass

    async def send(self, spec: NotificationSpec, draft: Draft, actor_id: str) -> Notification:
        """Render ``spec`` for ``draft`` and deliver it."""
        notification = spec.render(draft, actor_id)
        await self.deliver(notification)
        return notification

    @abc.abstractmethod
    async def deliver(self, notification: Notification) -> None:
        """Hand a rendered notification to the backend."""
        raise NotImplementedError
