"""Submission persistence."""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.models.submission import Submission


class SubmissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, creator_id: str, **fields) -> Submission:
        submission = Submission(creator_id=creator_id, **fields)
        self.session.add(submission)
        await self.session.flush()
        return submission

    async def get_by_id(self, submission_id: str, *, for_update: bool = False) -> Submission | None:
        query = select(Submission).where(Submission.id == submission_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_creator(self, creator_id: str, *, limit: int = 50, offset: int = 0) -> list[Submission]:
        result = await self.session.execute(
            select(Submission)
            .where(Submission.creator_id == creator_id)
            .order_by(Submission.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def list_by_status(
        self, statuses: tuple[str, ...], *, limit: int = 50, offset: int = 0,
    ) -> list[Submission]:
        result = await self.session.execute(
            select(Submission)
            .where(Submission.status.in_(statuses))
            .order_by(Submission.created_at.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def claim_paid(self, submission_id: str, now, from_statuses: tuple[str, ...]) -> bool:
        """Flip a submission to ``paid`` if it is in one of ``from_statuses``.

        Conditional UPDATE so two concurrent callers cannot both win.
        """
        result = await self.session.execute(
            update(Submission)
            .where(Submission.id == submission_id, Submission.status.in_(from_statuses))
            .values(status="paid", paid_at=now, creator_paid_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(Submission.status, func.count()).group_by(Submission.status)
        )
        return {status: count for status, count in result.all()}

    async def sum_payouts(self, statuses: tuple[str, ...]) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(Submission.creator_payout), 0)).where(Submission.status.in_(statuses))
        )
        return Decimal(str(result.scalar_one()))
