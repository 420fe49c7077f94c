"""Submission workflow: drafting, review transitions and their side effects.

Status graph::

    draft -> submitted -> in_review -> approved -> website_generated -> pending_payment -> paid
                 \\___________\\____________\\____________________\\_________________> rejected

Every transition is applied with a conditional UPDATE on the status the caller
observed, so two concurrent transitions on the same submission cannot both
succeed. ``completed`` is a legacy spelling of ``paid`` and is only accepted on
read paths.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.core.async_tasks import notify
from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import (
    AlreadyPaidError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from negosyo.models._base import dump_json, load_json
from negosyo.models.submission import Submission
from negosyo.repositories import CreatorRepository, SubmissionRepository, WebsiteRepository
from negosyo.schemas.content import PhotoRef
from negosyo.services import email_service

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

STATUSES = (
    "draft",
    "submitted",
    "in_review",
    "approved",
    "rejected",
    "website_generated",
    "pending_payment",
    "paid",
)
LEGACY_ALIASES = {"completed": "paid"}
TERMINAL_STATUSES = frozenset({"rejected", "paid"})
PAYABLE_STATUSES = frozenset({"approved", "website_generated", "pending_payment"})
GENERATABLE_STATUSES = frozenset({"submitted", "in_review", "approved", "website_generated", "pending_payment", "paid"})

TRANSITIONS: dict[str, dict[str, str]] = {
    "submit": {"draft": "submitted"},
    "mark_in_review": {"submitted": "in_review", "in_review": "in_review"},
    "approve": {"submitted": "approved", "in_review": "approved"},
    "reject": {s: "rejected" for s in STATUSES if s not in TERMINAL_STATUSES},
    "website_generated": {"approved": "website_generated"},
    "request_payout": {"approved": "pending_payment", "website_generated": "pending_payment"},
    "unpublish": {"website_generated": "approved"},
    "mark_paid": {s: "paid" for s in PAYABLE_STATUSES},
}

_EDITABLE_FIELDS = {
    "business_name",
    "business_type",
    "owner_name",
    "owner_phone",
    "owner_email",
    "address",
    "city",
    "video_url",
    "audio_url",
    "terms_agreed",
}


def canonical_status(status: str) -> str:
    return LEGACY_ALIASES.get(status, status)


def stored_statuses(status: str) -> tuple[str, ...]:
    """Every value the status column may hold for canonical ``status``."""
    canonical = canonical_status(status)
    return (canonical, *sorted(legacy for legacy, alias in LEGACY_ALIASES.items() if alias == canonical))


def next_status(event: str, current: str) -> str:
    """Target status for ``event`` from ``current``; ValidationError if not allowed."""
    current = canonical_status(current)
    if event == "mark_paid" and current == "paid":
        raise ConflictError("Submission is already paid")
    targets = TRANSITIONS.get(event)
    if targets is None:
        raise ValidationError(f"Unknown workflow event '{event}'")
    target = targets.get(current)
    if target is None:
        raise ValidationError(f"Cannot {event.replace('_', ' ')} a submission in status '{current}'")
    return target


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _submission_to_dict(submission: Submission) -> dict:
    def _ts(value: datetime | None) -> str | None:
        return value.isoformat() if value else None

    return {
        "id": submission.id,
        "creator_id": submission.creator_id,
        "business_name": submission.business_name,
        "business_type": submission.business_type,
        "owner_name": submission.owner_name,
        "owner_phone": submission.owner_phone,
        "owner_email": submission.owner_email,
        "address": submission.address,
        "city": submission.city,
        "photos": submission.photo_list,
        "video_url": submission.video_url,
        "audio_url": submission.audio_url,
        "transcript": submission.transcript,
        "extracted_content": load_json(submission.extracted_content),
        "terms_agreed": bool(submission.terms_agreed),
        "status": canonical_status(submission.status),
        "rejection_reason": submission.rejection_reason,
        "website_url": submission.website_url,
        "amount": float(submission.amount or 0),
        "creator_payout": float(submission.creator_payout or 0),
        "submitted_at": _ts(submission.submitted_at),
        "reviewed_at": _ts(submission.reviewed_at),
        "approved_at": _ts(submission.approved_at),
        "paid_at": _ts(submission.paid_at),
        "payout_requested_at": _ts(submission.payout_requested_at),
        "creator_paid_at": _ts(submission.creator_paid_at),
        "created_at": _ts(submission.created_at),
        "updated_at": _ts(submission.updated_at),
    }


async def load_submission(db: AsyncSession, submission_id: str) -> Submission:
    submission = await SubmissionRepository(db).get_by_id(submission_id)
    if submission is None:
        raise NotFoundError("Submission", submission_id)
    return submission


async def apply_transition(
    db: AsyncSession,
    submission: Submission,
    event: str,
    **values,
) -> Submission:
    """Move ``submission`` along ``event`` and flush; the caller commits.

    The UPDATE only matches while the row still has the status we read, so a
    concurrent transition makes this one fail with ConflictError.
    """
    submission_id, observed = submission.id, submission.status
    target = next_status(event, observed)
    await db.flush()
    now = _utcnow()
    result = await db.execute(
        update(Submission)
        .where(Submission.id == submission_id, Submission.status == observed)
        .values(status=target, updated_at=now, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise ConflictError(f"Submission {submission_id} changed concurrently; reload and retry")
    await db.refresh(submission)
    logger.info("Submission %s: %s -> %s (%s)", submission_id, observed, target, event)
    return submission


# ---------------------------------------------------------------------------
# Creator-side operations
# ---------------------------------------------------------------------------

def _normalize_photos(photos: list) -> str:
    refs = [PhotoRef.model_validate(p if isinstance(p, dict) else {"url": p}) for p in photos]
    return dump_json([r.model_dump() for r in refs])


async def create_submission(db: AsyncSession, acting_as: ActingAs, **fields) -> dict:
    """Open a new draft owned by the acting creator."""
    creator = await CreatorRepository(db).get_by_id(acting_as.creator_id)
    if creator is None:
        raise NotFoundError("Creator", acting_as.creator_id)
    if creator.status != "active":
        raise PermissionDeniedError(f"Creator account is {creator.status}")

    required = ("business_name", "business_type", "owner_name", "owner_phone", "address", "city")
    missing = [name for name in required if not (fields.get(name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    values = {k: v for k, v in fields.items() if k in _EDITABLE_FIELDS}
    submission = await SubmissionRepository(db).create(
        acting_as.creator_id,
        photos=_normalize_photos(fields.get("photos") or []),
        amount=Decimal(str(settings.default_submission_amount)),
        creator_payout=Decimal(str(settings.default_creator_payout)),
        status="draft",
        **values,
    )
    await db.commit()
    await db.refresh(submission)
    logger.info("Submission %s created by creator %s", submission.id, acting_as.creator_id)
    return _submission_to_dict(submission)


async def get_submission(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    return _submission_to_dict(submission)


async def list_submissions(
    db: AsyncSession,
    acting_as: ActingAs,
    *,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    repo = SubmissionRepository(db)
    if status is not None:
        acting_as.require_admin()
        rows = await repo.list_by_status(stored_statuses(status), limit=limit, offset=offset)
    else:
        rows = await repo.list_for_creator(acting_as.creator_id, limit=limit, offset=offset)
    return [_submission_to_dict(s) for s in rows]


async def update_submission(db: AsyncSession, acting_as: ActingAs, submission_id: str, updates: dict) -> dict:
    """Edit business fields or media while the submission is still a draft."""
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    if submission.status != "draft":
        raise ValidationError("Only draft submissions can be edited")

    for key, value in updates.items():
        if key == "photos":
            submission.photos = _normalize_photos(value or [])
        elif key == "creator_id":
            raise ValidationError("The owning creator cannot be changed")
        elif key in _EDITABLE_FIELDS:
            setattr(submission, key, value)
    await db.commit()
    await db.refresh(submission)
    return _submission_to_dict(submission)


async def agree_to_terms(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    if submission.status != "draft":
        raise ValidationError("Terms can only be agreed on a draft")
    if not submission.terms_agreed:
        submission.terms_agreed = True
        await db.commit()
        await db.refresh(submission)
    return _submission_to_dict(submission)


async def submit_submission(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    """draft -> submitted, once photos, interview media and terms are in place."""
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    creator = await CreatorRepository(db).get_by_id(submission.creator_id)
    if creator is not None and creator.status == "suspended":
        raise PermissionDeniedError("Suspended creators cannot submit")

    photo_count = len(submission.photo_list)
    if photo_count < settings.submission_min_photos:
        raise ValidationError(
            f"At least {settings.submission_min_photos} photos are required (have {photo_count})"
        )
    if not submission.has_interview:
        raise ValidationError("A video or audio interview is required")
    if not submission.terms_agreed:
        raise ValidationError("The creator must agree to the terms before submitting")

    await apply_transition(db, submission, "submit", submitted_at=_utcnow())
    await db.commit()
    return _submission_to_dict(submission)


async def request_payout(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    """Creator asks to be paid for an approved submission. Repeating the request is a no-op."""
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    status = canonical_status(submission.status)
    if status == "paid":
        raise AlreadyPaidError(submission_id)
    if status == "pending_payment":
        return _submission_to_dict(submission)
    await apply_transition(db, submission, "request_payout", payout_requested_at=_utcnow())
    await db.commit()
    return _submission_to_dict(submission)


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------

async def mark_in_review(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    await apply_transition(db, submission, "mark_in_review", reviewed_at=_utcnow())
    await db.commit()
    return _submission_to_dict(submission)


async def _send_approval_email(
    to: str,
    owner_name: str,
    business_name: str,
    amount: Decimal,
    website_url: str | None,
) -> str:
    subject, html = email_service.approval_email(
        owner_name=owner_name,
        business_name=business_name,
        amount=amount,
        website_url=website_url,
    )
    return await email_service.send(to, subject, html)


async def approve_submission(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    """submitted/in_review -> approved, then notify the business owner.

    The approval is committed before the email is scheduled; the email's
    outcome is recorded by the notifier and never affects this result.
    """
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    now = _utcnow()
    await apply_transition(
        db,
        submission,
        "approve",
        approved_at=now,
        reviewed_at=submission.reviewed_at or now,
    )
    await db.commit()

    result = _submission_to_dict(submission)
    if submission.owner_email:
        website = await WebsiteRepository(db).get_by_submission(submission_id)
        preview_url = f"{settings.public_base_url}/api/v1/websites/{submission_id}/preview" if website else None
        notify(
            _send_approval_email(
                submission.owner_email,
                submission.owner_name,
                submission.business_name,
                submission.amount,
                submission.website_url or preview_url,
            ),
            name=f"approval_email:{submission_id}",
        )
        result["notification"] = "scheduled"
    else:
        logger.warning("Submission %s approved without an owner email; no notification sent", submission_id)
        result["notification"] = "skipped"
    return result


async def reject_submission(
    db: AsyncSession,
    acting_as: ActingAs,
    submission_id: str,
    reason: str | None = None,
) -> dict:
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    await apply_transition(db, submission, "reject", rejection_reason=reason, reviewed_at=_utcnow())
    await db.commit()
    return _submission_to_dict(submission)


# ---------------------------------------------------------------------------
# Interview processing
# ---------------------------------------------------------------------------

async def transcribe_submission(db: AsyncSession, acting_as: ActingAs, submission_id: str, service) -> dict:
    """Transcribe the interview media and store the transcript."""
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    media_url = submission.audio_url or submission.video_url
    if not media_url:
        raise ValidationError("Submission has no interview media to transcribe")
    transcript = await service.transcribe(media_url)
    submission.transcript = transcript
    await db.commit()
    await db.refresh(submission)
    logger.info("Transcribed submission %s (%d chars)", submission_id, len(transcript))
    return _submission_to_dict(submission)


async def extract_submission_content(db: AsyncSession, acting_as: ActingAs, submission_id: str, service) -> dict:
    """Run content extraction on the stored transcript and keep the result on the submission."""
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    if not submission.transcript:
        raise ValidationError("Submission has no transcript; transcribe it first")
    content = await service.extract_content(
        submission.transcript,
        business_name=submission.business_name,
        business_type=submission.business_type,
        city=submission.city,
    )
    submission.extracted_content = json.dumps(content.model_dump())
    await db.commit()
    await db.refresh(submission)
    return _submission_to_dict(submission)
