"""Transition registry tests."""

from types import MappingProxyType

import pytest

from draftflow.contracts import ActorRole, DraftStatus
from draftflow.registry import TRANSITIONS, available_transitions, get_transition

S = DraftStatus
R = ActorRole

EXPECTED = {
    "validate": (S.PENDING, S.READY, {R.SYSTEM, R.MARKETING, R.ADMIN}),
    "generate": (S.READY, S.GENERATING, {R.SYSTEM, R.MARKETING, R.ADMIN}),
    "complete_generation": (S.GENERATING, S.REVIEW, {R.SYSTEM}),
    "fail_generation": (S.GENERATING, S.FAILED, {R.SYSTEM}),
    "retry": (S.FAILED, S.GENERATING, {R.MARKETING, R.ADMIN}),
    "open_resonance": (S.REVIEW, S.REVISION, {R.MARKETING, R.ADMIN}),
    "save_revision": (S.REVISION, S.REVIEW, {R.MARKETING, R.ADMIN}),
    "submit_for_approval": (S.REVIEW, S.APPROVAL, {R.MARKETING, R.ADMIN}),
    "approve": (S.APPROVAL, S.APPROVED, {R.BROKER, R.ADMIN}),
    "request_revisions": (S.APPROVAL, S.REVIEW, {R.BROKER, R.ADMIN}),
    "distribute": (S.APPROVED, S.DISTRIBUTED, {R.SYSTEM, R.MARKETING, R.ADMIN}),
}


def test_registry_matches_transition_table():
    assert set(TRANSITIONS) == set(EXPECTED)
    for name, (source, target, roles) in EXPECTED.items():
        transition = TRANSITIONS[name]
        assert transition.source is source
        assert transition.target is target
        assert transition.roles == roles


def test_registry_is_read_only():
    assert isinstance(TRANSITIONS, MappingProxyType)
    with pytest.raises(TypeError):
        TRANSITIONS["skip"] = TRANSITIONS["approve"]


def test_get_transition_unknown_returns_none():
    assert get_transition("publish") is None
    assert get_transition("approve").label == "Approve"


def test_distributed_is_terminal():
    assert all(t.source is not S.DISTRIBUTED for t in TRANSITIONS.values())


def test_available_transitions_for_marketing_in_review():
    options = available_transitions("review", "marketing")

    assert [(o.name, o.to, o.label) for o in options] == [
        ("open_resonance", S.REVISION, "Edit in Resonance"),
        ("submit_for_approval", S.APPROVAL, "Send for Approval"),
    ]


def test_available_transitions_respects_roles():
    assert [o.name for o in available_transitions(S.GENERATING, R.SYSTEM)] == [
        "complete_generation",
        "fail_generation",
    ]
    assert available_transitions(S.GENERATING, R.ADMIN) == []
    assert available_transitions(S.APPROVAL, R.MARKETING) == []


def test_available_transitions_unknown_inputs():
    assert available_transitions("archived", "admin") == []
    assert available_transitions("review", "intern") == []
