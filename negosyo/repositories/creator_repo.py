"""Creator persistence."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.models.creator import Creator


class CreatorRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **fields) -> Creator:
        creator = Creator(**fields)
        self.session.add(creator)
        await self.session.flush()
        return creator

    async def get_by_id(self, creator_id: str) -> Creator | None:
        result = await self.session.execute(select(Creator).where(Creator.id == creator_id))
        return result.scalar_one_or_none()

    async def get_by_referral_code(self, code: str) -> Creator | None:
        result = await self.session.execute(select(Creator).where(Creator.referral_code == code.upper()))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Creator | None:
        result = await self.session.execute(select(Creator).where(Creator.email == email.lower()))
        return result.scalar_one_or_none()

    async def referral_code_exists(self, code: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(Creator).where(Creator.referral_code == code)
        )
        return result.scalar_one() > 0

    async def count_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(Creator.status, func.count()).group_by(Creator.status)
        )
        return {status: count for status, count in result.all()}
