"""Which transitions notify whom."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .models import NotificationSpec, Recipient

_SPECS = (
    NotificationSpec(
        "complete_generation",
        (Recipient.MARKETING_TEAM,),
        "draft_ready",
        "Marketing draft ready for review: {property_name}",
    ),
    NotificationSpec(
        "submit_for_approval",
        (Recipient.BROKER,),
        "approval_requested",
        "Marketing material ready for your review: {property_name}",
    ),
    NotificationSpec(
        "request_revisions",
        (Recipient.MARKETING_TEAM,),
        "revisions_requested",
        "Broker requested revisions on {property_name}",
    ),
    NotificationSpec(
        "approve",
        (Recipient.MARKETING_TEAM, Recipient.BROKER),
        "draft_approved",
        "{property_name} flyer approved - distributing",
    ),
    NotificationSpec(
        "distribute",
        (Recipient.BROKER,),
        "distributed",
        "Your listing is live: {property_name}",
    ),
)

NOTIFICATIONS: Mapping[str, NotificationSpec] = MappingProxyType(
    {spec.transition: spec for spec in _SPECS}
)


def notification_for(transition: str) -> Optional[NotificationSpec]:
    return NOTIFICATIONS.get(transition)
