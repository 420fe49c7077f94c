"""Admin dashboard aggregation helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.core.auth import ActingAs
from negosyo.models.payout import PayoutLedgerEntry
from negosyo.models.website import GeneratedWebsite
from negosyo.repositories import CreatorRepository, SubmissionRepository
from negosyo.services.submission_service import PAYABLE_STATUSES, STATUSES, canonical_status


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_stats(db: AsyncSession, acting_as: ActingAs) -> dict:
    acting_as.require_admin()
    submissions = SubmissionRepository(db)

    by_status = {status: 0 for status in STATUSES}
    for status, count in (await submissions.count_by_status()).items():
        key = canonical_status(status)
        by_status[key] = by_status.get(key, 0) + count

    total_paid_out = (
        await db.execute(select(func.coalesce(func.sum(PayoutLedgerEntry.amount), 0)))
    ).scalar_one()
    pending_payout = await submissions.sum_payouts(tuple(sorted(PAYABLE_STATUSES)))
    published = int(
        (await db.execute(
            select(func.count(GeneratedWebsite.id)).where(GeneratedWebsite.status == "published")
        )).scalar() or 0
    )

    return {
        "environment": settings.environment,
        "submissions_total": sum(by_status.values()),
        "submissions_by_status": by_status,
        "websites_published": published,
        "total_paid_out": float(total_paid_out or 0),
        "pending_payout": float(pending_payout),
        "creators_by_status": await CreatorRepository(db).count_by_status(),
        "updated_at": _utcnow().isoformat(),
    }
