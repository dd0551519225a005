"""Exceptions raised by draftflow.

Domain failures (unauthorized role, wrong state, guard violations) are not
exceptions; they come back as :class:`~draftflow.contracts.TransitionResult`.
Only infrastructure and setup problems are raised.
"""

from __future__ import annotations


class DraftflowError(Exception):
    """Base class for all draftflow exceptions."""


class InfrastructureError(DraftflowError):
    """Raised when a store or collaborator fails underneath the engine."""

    def __init__(self, operation: str, draft_id: str | None = None) -> None:
        self.operation = operation
        self.draft_id = draft_id
        target = f" for draft {draft_id}" if draft_id else ""
        super().__init__(f"{operation} failed{target}")


class ConfigurationError(DraftflowError):
    """Raised for unsupported or inconsistent configuration."""


class DuplicateDraftError(DraftflowError):
    """Raised when creating a draft whose id already exists."""

    def __init__(self, draft_id: str) -> None:
        self.draft_id = draft_id
        super().__init__(f"Draft already exists: {draft_id}")
