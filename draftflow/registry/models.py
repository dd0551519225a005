"""Value objects describing registered transitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet

from ..contracts import (
    ActorRole,
    Draft,
    DraftStatus,
    GuardResult,
    ListingContext,
    TransitionParams,
)

Guard = Callable[[Draft, ListingContext, TransitionParams], GuardResult]
Effect = Callable[[Draft, TransitionParams, str, datetime], Dict[str, Any]]


@dataclass(frozen=True)
class TransitionDefinition:
    """A named edge between two draft states.

    ``guard`` inspects the draft and never mutates it. ``effect`` computes
    the transition-specific fields to persist; the engine adds ``status``
    and ``updated_at`` itself.
    """

    name: str
    source: DraftStatus
    target: DraftStatus
    guard: Guard
    roles: FrozenSet[ActorRole]
    label: str
    effect: Effect

    def allows(self, role: ActorRole) -> bool:
        return role in self.roles
