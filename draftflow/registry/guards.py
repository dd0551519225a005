"""Guard predicates for draft transitions.

Each guard receives the draft, the listing context and the call parameters
and reports every violation it finds rather than stopping at the first.
"""

from __future__ import annotations

from ..contracts import Draft, GuardResult, ListingContext, TransitionParams

MAX_RETRIES = 3
MIN_APPROVAL_QUALITY = 50


def always(draft: Draft, context: ListingContext, params: TransitionParams) -> GuardResult:
    return GuardResult()


def listing_is_complete(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    errors = []
    if not context.address:
        errors.append("Missing address")
    if not context.listing_type:
        errors.append("Missing listing type")
    if not context.broker:
        errors.append("Missing broker contact")
    if not context.photo_count or context.photo_count < 1:
        errors.append("At least 1 photo required")
    return GuardResult.from_errors(errors)


def generation_output_present(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    errors = []
    if not params.pdf_url and not params.pdf_size_bytes:
        errors.append("No PDF generated")
    # a score of 0 is still a score
    if params.quality_score is None:
        errors.append("No quality score")
    return GuardResult.from_errors(errors)


def retries_remaining(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    if (draft.revision_count or 0) >= MAX_RETRIES:
        return GuardResult.from_errors([f"Max retry limit ({MAX_RETRIES}) reached"])
    return GuardResult()


def quality_meets_minimum(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    if draft.quality_score is None or draft.quality_score < MIN_APPROVAL_QUALITY:
        return GuardResult.from_errors(
            [f"Quality score too low for approval (min {MIN_APPROVAL_QUALITY})"]
        )
    return GuardResult()


def revision_comments_given(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    if not params.comments or not params.comments.strip():
        return GuardResult.from_errors(["Broker must provide revision comments"])
    return GuardResult()


def pdf_available(
    draft: Draft, context: ListingContext, params: TransitionParams
) -> GuardResult:
    if not draft.pdf_url:
        return GuardResult.from_errors(["No PDF available for distribution"])
    return GuardResult()
