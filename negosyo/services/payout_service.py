"""Payout ledger: credits a creator once per paid submission.

Key design decisions:
- **Claim first**: the submission is flipped to ``paid`` with a conditional
  UPDATE (``status IN payable``). Only the caller whose UPDATE matched goes on
  to credit, so a second ``mark_paid`` can never double-credit.
- **Optimistic increment**: balance and lifetime earnings are bumped with
  ``SET balance = balance + :payout`` in SQL, never read-then-write in Python.
- **Audit row**: every credit writes a ``PayoutLedgerEntry`` whose unique
  ``idempotency_key`` is ``submission:<id>``; a duplicate aborts the transaction.
- **One transaction**: claim, credit and audit row commit together or not at all.
- **Bulk**: each id is its own transaction and gets its own result entry.
  Items run one at a time, which also serializes updates to the same creator.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import (
    AlreadyPaidError,
    ConflictError,
    ConsistencyError,
    NegosyoError,
    NotFoundError,
    ValidationError,
)
from negosyo.core.locks import creator_locks
from negosyo.models.creator import Creator
from negosyo.models.payout import PayoutLedgerEntry
from negosyo.models.submission import Submission
from negosyo.repositories import SubmissionRepository
from negosyo.services.submission_service import PAYABLE_STATUSES, canonical_status

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value.quantize(_CENT, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def idempotency_key_for(submission_id: str) -> str:
    return f"submission:{submission_id}"


async def _credit(db: AsyncSession, acting_as: ActingAs, submission: Submission) -> dict:
    submission_id, creator_id = submission.id, submission.creator_id
    payout = _to_decimal(submission.creator_payout or 0)
    if payout < 0:
        raise ConsistencyError(f"Submission {submission_id} has a negative creator payout")

    now = _utcnow()
    repo = SubmissionRepository(db)
    if not await repo.claim_paid(submission_id, now, tuple(sorted(PAYABLE_STATUSES))):
        await db.rollback()
        current = await repo.get_by_id(submission_id)
        if current is not None and canonical_status(current.status) == "paid":
            raise AlreadyPaidError(submission_id)
        raise ConflictError(f"Submission {submission_id} changed concurrently; reload and retry")

    await db.execute(
        update(Creator)
        .where(Creator.id == creator_id)
        .values(
            balance=Creator.balance + payout,
            total_earnings=Creator.total_earnings + payout,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    row = (
        await db.execute(
            select(Creator.balance, Creator.total_earnings).where(Creator.id == creator_id)
        )
    ).one_or_none()
    if row is None:
        await db.rollback()
        raise ConsistencyError(f"Creator {creator_id} for submission {submission_id} is missing")
    new_balance, new_total = _to_decimal(row.balance), _to_decimal(row.total_earnings)
    if new_balance < 0 or new_balance > new_total:
        await db.rollback()
        logger.error(
            "Ledger invariant violated for creator %s: balance=%s total_earnings=%s",
            creator_id, new_balance, new_total,
        )
        raise ConsistencyError("Creator balance would violate ledger invariants")

    db.add(PayoutLedgerEntry(
        creator_id=creator_id,
        submission_id=submission_id,
        entry_type="credit",
        amount=payout,
        balance_after=new_balance,
        total_earnings_after=new_total,
        actor_id=acting_as.creator_id,
        idempotency_key=idempotency_key_for(submission_id),
    ))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyPaidError(submission_id)

    logger.info(
        "Marked paid: submission=%s creator=%s credited=%s balance=%s total_earnings=%s",
        submission_id, creator_id, payout, new_balance, new_total,
    )
    return {
        "submission_id": submission_id,
        "creator_id": creator_id,
        "credited": float(payout),
        "new_balance": float(new_balance),
        "new_total_earnings": float(new_total),
    }


async def mark_paid(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    """Mark one submission paid and credit its creator exactly once.

    Raises AlreadyPaidError (409) if it is already paid, ValidationError if
    its status is not payable, NotFoundError if it does not exist.
    """
    acting_as.require_admin()
    submission = await SubmissionRepository(db).get_by_id(submission_id)
    if submission is None:
        raise NotFoundError("Submission", submission_id)
    status = canonical_status(submission.status)
    if status == "paid":
        raise AlreadyPaidError(submission_id)
    if status not in PAYABLE_STATUSES:
        raise ValidationError(f"Cannot mark paid a submission in status '{status}'")

    async with creator_locks.hold(submission.creator_id):
        try:
            return await _credit(db, acting_as, submission)
        except NegosyoError:
            raise
        except Exception:
            await db.rollback()
            raise


async def bulk_mark_paid(db: AsyncSession, acting_as: ActingAs, submission_ids: list[str]) -> dict:
    """Apply ``mark_paid`` to each id independently.

    Returns ``{"results": [...], "succeeded": n, "failed": m}`` where each result
    is ``{"submission_id", "ok": True, ...credit}`` or
    ``{"submission_id", "ok": False, "error": code, "detail": message}``.
    One failing id never affects another id's outcome.
    """
    acting_as.require_admin()
    if not submission_ids:
        raise ValidationError("No submission ids given")

    results = []
    for submission_id in submission_ids:
        try:
            credit = await mark_paid(db, acting_as, submission_id)
        except NegosyoError as e:
            results.append({
                "submission_id": submission_id,
                "ok": False,
                "error": e.code,
                "detail": e.detail,
            })
            continue
        results.append({"ok": True, **credit})

    succeeded = sum(1 for r in results if r["ok"])
    logger.info("Bulk mark-paid: %d succeeded, %d failed", succeeded, len(results) - succeeded)
    return {"results": results, "succeeded": succeeded, "failed": len(results) - succeeded}


async def get_ledger(db: AsyncSession, acting_as: ActingAs, creator_id: str, limit: int = 50) -> list[dict]:
    acting_as.require_owner(creator_id)
    result = await db.execute(
        select(PayoutLedgerEntry)
        .where(PayoutLedgerEntry.creator_id == creator_id)
        .order_by(PayoutLedgerEntry.created_at.desc())
        .limit(limit)
    )
    return [
        {
            "id": e.id,
            "submission_id": e.submission_id,
            "entry_type": e.entry_type,
            "amount": float(e.amount),
            "balance_after": float(e.balance_after),
            "total_earnings_after": float(e.total_earnings_after),
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
        for e in result.scalars().all()
    ]
