"""Field updates applied by each transition on success."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from ..contracts import Draft, TransitionParams

_GENERATION_FIELDS = (
    "pdf_url",
    "pdf_size_bytes",
    "quality_score",
    "quality_report",
    "ai_content",
    "photo_classifications",
    "ai_model",
    "ai_tokens_in",
    "ai_tokens_out",
)


def no_changes(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    return {}


def record_generation(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    """Copy the generator's output onto the draft."""
    patch: Dict[str, Any] = {"generated_at": now}
    for field in _GENERATION_FIELDS:
        value = getattr(params, field)
        if value is not None:
            patch[field] = value
    return patch


def record_failure(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    return {"failed_at": now, "failure_reason": params.error or "Unknown error"}


def record_review(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    return {"reviewed_at": now, "reviewed_by": actor_id}


def record_revision_request(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    return {
        "broker_comments": params.comments,
        "revision_count": (draft.revision_count or 0) + 1,
        "reviewed_by": actor_id,
    }


def record_approval(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    return {"approved_at": now, "approved_by": actor_id}


def record_distribution(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    patch: Dict[str, Any] = {"distributed_at": now}
    if params.channels is not None:
        patch["distribution_channels"] = list(dict.fromkeys(params.channels))
    return patch


def reset_for_retry(
    draft: Draft, params: TransitionParams, actor_id: str, now: datetime
) -> Dict[str, Any]:
    # retries share revision_count with broker revision requests
    return {
        "revision_count": (draft.revision_count or 0) + 1,
        "failed_at": None,
        "failure_reason": None,
    }
