"""Notification specs and the messages rendered from them."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field

from ..contracts import Draft, DraftStatus, utcnow

UNKNOWN_PROPERTY = "Unknown Property"


class Recipient(str, Enum):
    """Coarse audiences; the dispatcher resolves them to people."""

    MARKETING_TEAM = "marketing_team"
    BROKER = "broker"


class Notification(BaseModel):
    """A rendered notification ready for delivery."""

    notification_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    recipients: list[Recipient]
    template: str
    message: str
    draft_id: str
    draft_status: DraftStatus
    transition: str
    actor_id: str
    created_at: datetime = Field(default_factory=utcnow)

    def to_json(self) -> str:
        return self.model_dump_json()


@dataclass(frozen=True)
class NotificationSpec:
    """Who to tell, and what, when a transition commits."""

    transition: str
    recipients: Tuple[Recipient, ...]
    template: str
    message: str

    def render(self, draft: Draft, actor_id: str) -> Notification:
        return Notification(
            recipients=list(self.recipients),
            template=self.template,
            message=self.message.format(
                property_name=draft.property_name or UNKNOWN_PROPERTY
            ),
            draft_id=draft.id,
            draft_status=draft.status,
            transition=self.transition,
            actor_id=actor_id,
        )
