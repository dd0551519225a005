"""Draftflow: guarded approval workflow for marketing collateral."""

from .contracts import (
    ActorRole,
    AvailableTransition,
    Draft,
    DraftStatus,
    ErrorKind,
    HistoryEntry,
    ListingContext,
    TransitionResult,
)
from .engine import ListingContextProvider, WorkflowEngine
from .exceptions import InfrastructureError
from .notifications import get_dispatcher
from .persistence import get_repository
from .registry import TRANSITIONS, available_transitions

__version__ = "0.1.0"
__all__ = [
    "ActorRole",
    "AvailableTransition",
    "Draft",
    "DraftStatus",
    "ErrorKind",
    "HistoryEntry",
    "InfrastructureError",
    "ListingContext",
    "ListingContextProvider",
    "TRANSITIONS",
    "TransitionResult",
    "WorkflowEngine",
    "available_transitions",
    "get_dispatcher",
    "get_repository",
]
