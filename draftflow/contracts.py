"""Core contracts for the draftflow approval workflow."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DraftStatus(str, Enum):
    """Every state a draft can be in."""

    PENDING = "pending"
    READY = "ready"
    GENERATING = "generating"
    REVIEW = "review"
    REVISION = "revision"
    APPROVAL = "approval"
    APPROVED = "approved"
    DISTRIBUTED = "distributed"
    FAILED = "failed"


class ActorRole(str, Enum):
    """Coarse permission classes allowed to drive transitions."""

    SYSTEM = "system"
    MARKETING = "marketing"
    BROKER = "broker"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: "ActorRole | str") -> Optional["ActorRole"]:
        """Return the matching role, or ``None`` for unrecognized values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class ErrorKind(str, Enum):
    """Domain error kinds returned by the engine."""

    UNKNOWN_TRANSITION = "unknown_transition"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    GUARD_FAILED = "guard_failed"
    INVALID_INPUT = "invalid_input"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.UNKNOWN_TRANSITION: 422,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.GUARD_FAILED: 422,
    ErrorKind.INVALID_INPUT: 400,
}


class Draft(BaseModel):
    """A piece of marketing collateral moving through the approval pipeline."""

    id: str
    status: DraftStatus = DraftStatus.PENDING
    property_name: Optional[str] = None
    revision_count: int = 0

    # Generation output
    quality_score: Optional[float] = Field(None, ge=0, le=100)
    quality_report: Optional[Dict[str, Any]] = None
    ai_content: Optional[Dict[str, Any]] = None
    photo_classifications: Optional[Any] = None
    ai_model: Optional[str] = None
    ai_tokens_in: Optional[int] = None
    ai_tokens_out: Optional[int] = None
    pdf_url: Optional[str] = None
    pdf_size_bytes: Optional[int] = Field(None, ge=0)

    # Review and distribution
    broker_comments: Optional[str] = None
    reviewed_by: Optional[str] = None
    approved_by: Optional[str] = None
    distribution_channels: List[str] = Field(default_factory=list)
    failure_reason: Optional[str] = None

    generated_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    distributed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class HistoryEntry(BaseModel):
    """Immutable audit record of one committed transition or comment."""

    id: Optional[int] = None
    draft_id: str
    from_status: DraftStatus
    to_status: DraftStatus
    actor_id: str
    actor_role: ActorRole
    comments: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)


class ListingContext(BaseModel):
    """Source listing data consulted by the ``validate`` guard."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    address: Optional[str] = None
    listing_type: Optional[str] = None
    broker: Optional[str] = None
    photo_count: int = 0


class TransitionParams(BaseModel):
    """Caller-supplied parameters for a transition.

    Unknown keys are kept so that they show up in the audit metadata.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    pdf_url: Optional[str] = None
    pdf_size_bytes: Optional[int] = Field(None, ge=0)
    quality_score: Optional[float] = Field(None, ge=0, le=100)
    quality_report: Optional[Dict[str, Any]] = None
    ai_content: Optional[Dict[str, Any]] = None
    photo_classifications: Optional[Any] = None
    ai_model: Optional[str] = None
    ai_tokens_in: Optional[int] = None
    ai_tokens_out: Optional[int] = None
    error: Optional[str] = None
    comments: Optional[str] = None
    channels: Optional[List[str]] = None
    listing: Optional[ListingContext] = None


class GuardResult(BaseModel):
    """Outcome of a guard check with every violation found."""

    valid: bool = True
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "GuardResult":
        return cls(valid=not errors, errors=list(errors))


class AvailableTransition(BaseModel):
    """A transition the given role may attempt from the given state."""

    name: str
    to: DraftStatus
    label: str


class TransitionResult(BaseModel):
    """Structured outcome of :meth:`WorkflowEngine.execute`."""

    success: bool
    draft: Optional[Draft] = None
    transition: Optional[str] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)
    http_status: int = 200

    @classmethod
    def succeeded(cls, draft: Draft, transition: Optional[str] = None) -> "TransitionResult":
        return cls(success=True, draft=draft, transition=transition)

    @classmethod
    def failed(
        cls,
        error: ErrorKind,
        message: str,
        reasons: Optional[List[str]] = None,
        transition: Optional[str] = None,
    ) -> "TransitionResult":
        return cls(
            success=False,
            error=error,
            message=message,
            reasons=reasons or [],
            transition=transition,
            http_status=error.http_status,
        )
