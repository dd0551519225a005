"""Guard and effect function tests."""

from datetime import datetime, timezone

from draftflow.contracts import Draft, DraftStatus, ListingContext, TransitionParams
from draftflow.registry import effects, guards

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _draft(**fields) -> Draft:
    return Draft(id="d1", **fields)


def test_listing_guard_accepts_camel_case_context():
    context = ListingContext.model_validate(
        {"address": "1 Main St", "listingType": "office", "broker": "B1", "photoCount": 1}
    )

    result = guards.listing_is_complete(_draft(), context, TransitionParams())

    assert result.valid
    assert result.errors == []


def test_listing_guard_empty_context():
    result = guards.listing_is_complete(_draft(), ListingContext(), TransitionParams())

    assert not result.valid
    assert len(result.errors) == 4


def test_generation_guard_pdf_url_alone_still_needs_score():
    result = guards.generation_output_present(
        _draft(), ListingContext(), TransitionParams(pdf_url="/f.pdf")
    )

    assert result.errors == ["No quality score"]


def test_quality_guard_boundary():
    params = TransitionParams()
    assert guards.quality_meets_minimum(_draft(quality_score=50), ListingContext(), params).valid
    assert not guards.quality_meets_minimum(_draft(quality_score=None), ListingContext(), params).valid


def test_retry_guard_reads_revision_count():
    params = TransitionParams()
    assert guards.retries_remaining(_draft(revision_count=2), ListingContext(), params).valid
    assert not guards.retries_remaining(_draft(revision_count=3), ListingContext(), params).valid


def test_guards_do_not_mutate_draft():
    draft = _draft(status=DraftStatus.APPROVAL, revision_count=1)
    before = draft.model_copy(deep=True)

    guards.revision_comments_given(draft, ListingContext(), TransitionParams(comments="ok"))
    guards.pdf_available(draft, ListingContext(), TransitionParams())

    assert draft == before


def test_record_generation_copies_supplied_fields_only():
    params = TransitionParams(
        pdf_url="/f.pdf",
        quality_score=88,
        quality_report={"contrast": "ok"},
        ai_tokens_in=1200,
    )

    patch = effects.record_generation(_draft(), params, "gen", NOW)

    assert patch == {
        "generated_at": NOW,
        "pdf_url": "/f.pdf",
        "quality_score": 88,
        "quality_report": {"contrast": "ok"},
        "ai_tokens_in": 1200,
    }


def test_record_distribution_dedupes_channels():
    params = TransitionParams(channels=["mls", "website", "mls"])

    patch = effects.record_distribution(_draft(), params, "m1", NOW)

    assert patch == {"distributed_at": NOW, "distribution_channels": ["mls", "website"]}


def test_record_distribution_without_channels_keeps_existing():
    patch = effects.record_distribution(_draft(), TransitionParams(), "m1", NOW)

    assert "distribution_channels" not in patch


def test_reset_for_retry_clears_failure():
    draft = _draft(revision_count=1, failure_reason="boom", failed_at=NOW)

    patch = effects.reset_for_retry(draft, TransitionParams(), "m1", NOW)

    assert patch == {"revision_count": 2, "failed_at": None, "failure_reason": None}


def test_record_revision_request():
    patch = effects.record_revision_request(
        _draft(revision_count=0), TransitionParams(comments="Tighten copy"), "b1", NOW
    )

    assert patch == {"broker_comments": "Tighten copy", "revision_count": 1, "reviewed_by": "b1"}
