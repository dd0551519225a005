"""Registry of the transitions a draft may take."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from ..contracts import ActorRole, AvailableTransition, DraftStatus
from . import effects, guards
from .models import Effect, Guard, TransitionDefinition

S = DraftStatus
R = ActorRole


def _define(
    name: str,
    source: DraftStatus,
    target: DraftStatus,
    roles: Iterable[ActorRole],
    label: str,
    guard: Guard = guards.always,
    effect: Effect = effects.no_changes,
) -> TransitionDefinition:
    return TransitionDefinition(
        name=name,
        source=source,
        target=target,
        guard=guard,
        roles=frozenset(roles),
        label=label,
        effect=effect,
    )


_DEFINITIONS = (
    _define(
        "validate", S.PENDING, S.READY,
        (R.SYSTEM, R.MARKETING, R.ADMIN), "Validate Data",
        guard=guards.listing_is_complete,
    ),
    _define(
        "generate", S.READY, S.GENERATING,
        (R.SYSTEM, R.MARKETING, R.ADMIN), "Generate Draft",
    ),
    _define(
        "complete_generation", S.GENERATING, S.REVIEW,
        (R.SYSTEM,), "Mark Complete",
        guard=guards.generation_output_present,
        effect=effects.record_generation,
    ),
    _define(
        "fail_generation", S.GENERATING, S.FAILED,
        (R.SYSTEM,), "Mark Failed",
        effect=effects.record_failure,
    ),
    _define(
        "retry", S.FAILED, S.GENERATING,
        (R.MARKETING, R.ADMIN), "Retry Generation",
        guard=guards.retries_remaining,
        effect=effects.reset_for_retry,
    ),
    _define(
        "open_resonance", S.REVIEW, S.REVISION,
        (R.MARKETING, R.ADMIN), "Edit in Resonance",
    ),
    _define(
        "save_revision", S.REVISION, S.REVIEW,
        (R.MARKETING, R.ADMIN), "Save Changes",
    ),
    _define(
        "submit_for_approval", S.REVIEW, S.APPROVAL,
        (R.MARKETING, R.ADMIN), "Send for Approval",
        guard=guards.quality_meets_minimum,
        effect=effects.record_review,
    ),
    _define(
        "approve", S.APPROVAL, S.APPROVED,
        (R.BROKER, R.ADMIN), "Approve",
        effect=effects.record_approval,
    ),
    _define(
        "request_revisions", S.APPROVAL, S.REVIEW,
        (R.BROKER, R.ADMIN), "Request Revisions",
        guard=guards.revision_comments_given,
        effect=effects.record_revision_request,
    ),
    _define(
        "distribute", S.APPROVED, S.DISTRIBUTED,
        (R.SYSTEM, R.MARKETING, R.ADMIN), "Distribute",
        guard=guards.pdf_available,
        effect=effects.record_distribution,
    ),
)

TRANSITIONS: Mapping[str, TransitionDefinition] = MappingProxyType(
    {definition.name: definition for definition in _DEFINITIONS}
)


def get_transition(name: str) -> Optional[TransitionDefinition]:
    """Return the registered transition called ``name`` if any."""
    return TRANSITIONS.get(name)


def available_transitions(
    status: DraftStatus | str, role: ActorRole | str
) -> List[AvailableTransition]:
    """List the transitions ``role`` may attempt from ``status``.

    This is advisory only: :meth:`WorkflowEngine.execute` re-checks state,
    role and guard when the transition is actually requested.
    """

    actor_role = ActorRole.parse(role)
    try:
        current = DraftStatus(status)
    except ValueError:
        return []
    if actor_role is None:
        return []
    return [
        AvailableTransition(name=t.name, to=t.target, label=t.label)
        for t in TRANSITIONS.values()
        if t.source is current and t.allows(actor_role)
    ]


__all__ = [
    "TRANSITIONS",
    "TransitionDefinition",
    "available_transitions",
    "get_transition",
]
