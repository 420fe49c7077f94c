"""Generated website and website content persistence."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.models.website import GeneratedWebsite, WebsiteContent


class WebsiteRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_submission(self, submission_id: str, *, for_update: bool = False) -> GeneratedWebsite | None:
        query = select(GeneratedWebsite).where(GeneratedWebsite.submission_id == submission_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, submission_id: str, **fields) -> GeneratedWebsite:
        website = GeneratedWebsite(submission_id=submission_id, **fields)
        self.session.add(website)
        await self.session.flush()
        return website

    async def get_content(self, website_id: str) -> WebsiteContent | None:
        result = await self.session.execute(
            select(WebsiteContent).where(WebsiteContent.website_id == website_id)
        )
        return result.scalar_one_or_none()

    async def save_content(self, website_id: str, **fields) -> WebsiteContent:
        """Insert or update the content row for a website."""
        content = await self.get_content(website_id)
        if content is None:
            content = WebsiteContent(website_id=website_id, **fields)
            self.session.add(content)
        else:
            for key, value in fields.items():
                setattr(content, key, value)
        await self.session.flush()
        return content

    async def list_unmigrated(self) -> list[GeneratedWebsite]:
        result = await self.session.execute(
            select(GeneratedWebsite)
            .outerjoin(WebsiteContent, WebsiteContent.website_id == GeneratedWebsite.id)
            .where(GeneratedWebsite.content_blob.isnot(None), WebsiteContent.id.is_(None))
        )
        return list(result.scalars().all())
