"""Submission state machine: transition table, guards and side effects."""

from unittest.mock import AsyncMock, patch

import pytest

from negosyo.core import async_tasks
from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import (
    AlreadyPaidError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from negosyo.services import submission_service
from negosyo.services.submission_service import (
    STATUSES,
    TRANSITIONS,
    canonical_status,
    next_status,
    stored_statuses,
)


def _as(creator) -> ActingAs:
    return ActingAs(creator_id=creator.id, role=creator.role)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

EXPECTED = {
    ("submit", "draft"): "submitted",
    ("mark_in_review", "submitted"): "in_review",
    ("approve", "submitted"): "approved",
    ("approve", "in_review"): "approved",
    ("reject", "submitted"): "rejected",
    ("reject", "in_review"): "rejected",
    ("reject", "approved"): "rejected",
    ("website_generated", "approved"): "website_generated",
    ("request_payout", "approved"): "pending_payment",
    ("request_payout", "website_generated"): "pending_payment",
    ("unpublish", "website_generated"): "approved",
    ("mark_paid", "approved"): "paid",
    ("mark_paid", "website_generated"): "paid",
    ("mark_paid", "pending_payment"): "paid",
}


class TestTransitionTable:
    @pytest.mark.parametrize("event, current", sorted(EXPECTED))
    def test_allowed(self, event, current):
        assert next_status(event, current) == EXPECTED[(event, current)]

    def test_every_target_is_a_known_status(self):
        for targets in TRANSITIONS.values():
            for source, target in targets.items():
                assert source in STATUSES
                assert target in STATUSES

    @pytest.mark.parametrize("current", ["rejected", "paid"])
    def test_terminal_states_cannot_be_rejected(self, current):
        with pytest.raises(ValidationError):
            next_status("reject", current)

    def test_cannot_approve_a_draft(self):
        with pytest.raises(ValidationError):
            next_status("approve", "draft")

    def test_mark_paid_twice_is_a_conflict(self):
        with pytest.raises(ConflictError):
            next_status("mark_paid", "paid")

    def test_legacy_completed_reads_as_paid(self):
        assert canonical_status("completed") == "paid"
        with pytest.raises(ConflictError):
            next_status("mark_paid", "completed")

    def test_unknown_event(self):
        with pytest.raises(ValidationError):
            next_status("teleport", "draft")

    def test_stored_statuses_include_legacy_values(self):
        assert stored_statuses("paid") == ("paid", "completed")
        assert stored_statuses("completed") == ("paid", "completed")
        assert stored_statuses("approved") == ("approved",)


# ---------------------------------------------------------------------------
# Creator-side operations
# ---------------------------------------------------------------------------

class TestDrafting:
    async def test_create_submission_uses_defaults(self, db, make_creator):
        creator, _ = await make_creator()
        result = await submission_service.create_submission(
            db, _as(creator),
            business_name="Tindahan ni Aling Rosa",
            business_type="retail",
            owner_name="Rosa Lim",
            owner_phone="09170000000",
            address="5 Mabini St.",
            city="Cebu City",
            photos=["https://cdn.test/1.jpg", {"url": "https://cdn.test/2.jpg", "dominant_color": "#112233"}],
        )
        assert result["status"] == "draft"
        assert result["amount"] == 1000.0
        assert result["creator_payout"] == 500.0
        assert result["photos"][0] == {"url": "https://cdn.test/1.jpg", "dominant_color": None}

    async def test_create_requires_business_fields(self, db, make_creator):
        creator, _ = await make_creator()
        with pytest.raises(ValidationError, match="business_name"):
            await submission_service.create_submission(
                db, _as(creator), business_type="retail", owner_name="X", owner_phone="1",
                address="A", city="C",
            )

    async def test_suspended_creator_cannot_create(self, db, make_creator):
        creator, _ = await make_creator(status="suspended")
        with pytest.raises(PermissionDeniedError):
            await submission_service.create_submission(
                db, _as(creator), business_name="B", business_type="retail", owner_name="X",
                owner_phone="1", address="A", city="C",
            )

    async def test_update_only_while_draft(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id)
        updated = await submission_service.update_submission(
            db, _as(creator), draft.id, {"business_name": "Renamed"},
        )
        assert updated["business_name"] == "Renamed"

        submitted = await make_submission(creator.id, status="submitted")
        with pytest.raises(ValidationError):
            await submission_service.update_submission(db, _as(creator), submitted.id, {"city": "Davao"})

    async def test_creator_id_is_immutable(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id)
        with pytest.raises(ValidationError):
            await submission_service.update_submission(db, _as(creator), draft.id, {"creator_id": "someone"})

    async def test_other_creator_cannot_read(self, db, make_creator, make_submission):
        owner, _ = await make_creator()
        stranger, _ = await make_creator(first_name="Pedro")
        submission = await make_submission(owner.id)
        with pytest.raises(PermissionDeniedError):
            await submission_service.get_submission(db, _as(stranger), submission.id)

    async def test_unknown_submission(self, db, make_creator):
        creator, _ = await make_creator()
        with pytest.raises(NotFoundError):
            await submission_service.get_submission(db, _as(creator), "missing")


class TestSubmitGuards:
    async def test_submit(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id)
        result = await submission_service.submit_submission(db, _as(creator), draft.id)
        assert result["status"] == "submitted"
        assert result["submitted_at"] is not None

    async def test_requires_minimum_photos(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id, photos='[{"url": "https://cdn.test/1.jpg"}]')
        with pytest.raises(ValidationError, match="photos"):
            await submission_service.submit_submission(db, _as(creator), draft.id)

    async def test_requires_interview(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id, audio_url=None, video_url=None)
        with pytest.raises(ValidationError, match="interview"):
            await submission_service.submit_submission(db, _as(creator), draft.id)

    async def test_requires_terms(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id, terms_agreed=False)
        with pytest.raises(ValidationError, match="terms"):
            await submission_service.submit_submission(db, _as(creator), draft.id)

    async def test_cannot_submit_twice(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        submitted = await make_submission(creator.id, status="submitted")
        with pytest.raises(ValidationError):
            await submission_service.submit_submission(db, _as(creator), submitted.id)

    async def test_agree_to_terms_then_submit(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        draft = await make_submission(creator.id, terms_agreed=False)
        agreed = await submission_service.agree_to_terms(db, _as(creator), draft.id)
        assert agreed["terms_agreed"] is True
        result = await submission_service.submit_submission(db, _as(creator), draft.id)
        assert result["status"] == "submitted"

    async def test_suspended_creator_cannot_submit(self, db, make_creator, make_submission):
        creator, _ = await make_creator(status="suspended")
        draft = await make_submission(creator.id)
        with pytest.raises(PermissionDeniedError):
            await submission_service.submit_submission(db, _as(creator), draft.id)


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------

class TestReview:
    async def test_paid_queue_includes_legacy_completed(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        legacy = await make_submission(creator.id, status="completed")
        current = await make_submission(creator.id, status="paid", business_name="Kape ni Juan")
        await make_submission(creator.id, status="approved")
        legacy_id, current_id = legacy.id, current.id

        rows = await submission_service.list_submissions(db, admin_as, status="paid")
        assert {r["id"] for r in rows} == {legacy_id, current_id}
        assert {r["status"] for r in rows} == {"paid"}

    async def test_review_requires_admin(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        with pytest.raises(PermissionDeniedError):
            await submission_service.approve_submission(db, _as(creator), submission.id)

    async def test_in_review_then_reject(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        result = await submission_service.mark_in_review(db, admin_as, submission.id)
        assert result["status"] == "in_review"
        result = await submission_service.reject_submission(db, admin_as, submission.id, "Blurry photos")
        assert result["status"] == "rejected"
        assert result["rejection_reason"] == "Blurry photos"

    async def test_approve_schedules_email_after_commit(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="in_review")
        with patch("negosyo.services.email_service.send", new=AsyncMock(return_value="<id@test>")) as send:
            result = await submission_service.approve_submission(db, admin_as, submission.id)
            await async_tasks.drain_background_tasks()

        assert result["status"] == "approved"
        assert result["approved_at"] is not None
        assert result["notification"] == "scheduled"
        send.assert_awaited_once()
        to, subject, html = send.await_args.args
        assert to == "nena@example.test"
        assert "Aling Nena" in html
        assert async_tasks.recent_outcomes[-1].ok is True

    async def test_email_failure_does_not_undo_approval(self, db, admin_as, make_creator, make_submission):
        from negosyo.core.exceptions import UpstreamError

        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        failing = AsyncMock(side_effect=UpstreamError("email", "SMTP down"))
        with patch("negosyo.services.email_service.send", new=failing):
            result = await submission_service.approve_submission(db, admin_as, submission.id)
            await async_tasks.drain_background_tasks()

        assert result["status"] == "approved"
        outcome = async_tasks.recent_outcomes[-1]
        assert outcome.ok is False
        assert "SMTP down" in outcome.error
        reloaded = await submission_service.get_submission(db, admin_as, submission.id)
        assert reloaded["status"] == "approved"

    async def test_approve_without_owner_email_skips_notification(
        self, db, admin_as, make_creator, make_submission,
    ):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted", owner_email=None)
        result = await submission_service.approve_submission(db, admin_as, submission.id)
        assert result["notification"] == "skipped"

    async def test_cannot_approve_rejected(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="rejected")
        with pytest.raises(ValidationError):
            await submission_service.approve_submission(db, admin_as, submission.id)

    async def test_stale_transition_conflicts(self, db, admin_as, make_creator, make_submission):
        from sqlalchemy import update

        from negosyo.models.submission import Submission

        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        # Another worker moves the row on after we read it.
        await db.execute(
            update(Submission).where(Submission.id == submission.id).values(status="rejected")
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        with pytest.raises(ConflictError):
            await submission_service.apply_transition(db, submission, "approve")


class TestPayoutRequest:
    async def test_request_payout_is_idempotent(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="approved")
        first = await submission_service.request_payout(db, _as(creator), submission.id)
        second = await submission_service.request_payout(db, _as(creator), submission.id)
        assert first["status"] == second["status"] == "pending_payment"
        assert first["payout_requested_at"] == second["payout_requested_at"]

    async def test_request_payout_on_paid(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="completed")
        with pytest.raises(AlreadyPaidError):
            await submission_service.request_payout(db, _as(creator), submission.id)

    async def test_request_payout_before_approval(self, db, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        with pytest.raises(ValidationError):
            await submission_service.request_payout(db, _as(creator), submission.id)


class TestInterviewProcessing:
    async def test_transcribe_stores_transcript(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        service = AsyncMock()
        service.transcribe.return_value = "We sell adobo and sinigang."
        result = await submission_service.transcribe_submission(db, admin_as, submission.id, service)
        service.transcribe.assert_awaited_once_with("https://cdn.test/audio/interview.mp3")
        assert result["transcript"] == "We sell adobo and sinigang."

    async def test_extract_requires_transcript(self, db, admin_as, make_creator, make_submission):
        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted")
        with pytest.raises(ValidationError, match="transcript"):
            await submission_service.extract_submission_content(db, admin_as, submission.id, AsyncMock())

    async def test_extract_stores_content(self, db, admin_as, make_creator, make_submission):
        from negosyo.schemas.content import BusinessContent

        creator, _ = await make_creator()
        submission = await make_submission(creator.id, status="submitted", transcript="We sell adobo.")
        service = AsyncMock()
        service.extract_content.return_value = BusinessContent(tagline="Lutong bahay", highlights=["Cheap"])
        result = await submission_service.extract_submission_content(db, admin_as, submission.id, service)
        assert result["extracted_content"]["tagline"] == "Lutong bahay"
