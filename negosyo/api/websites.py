"""Generated website read and edit endpoints, plus the template catalog."""
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs, get_acting_as, require_admin
from negosyo.database import get_db
from negosyo.schemas.content import WebsiteContentPatch
from negosyo.services import website_service
from negosyo.sites import list_templates
from negosyo.sites.themes import COLOR_SCHEMES, FONT_PAIRINGS

router = APIRouter(tags=["websites"])


@router.get("/websites/{submission_id}")
async def get_website(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await website_service.get_website(db, acting_as, submission_id)


@router.put("/websites/{submission_id}/content")
async def save_website_content(
    submission_id: str,
    patch: WebsiteContentPatch,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    """Apply a partial content edit and re-render the site."""
    return await website_service.save_website_content(db, acting_as, submission_id, patch)


@router.get("/websites/{submission_id}/preview", response_class=HTMLResponse)
async def preview_website(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    html = await website_service.get_preview_html(db, acting_as, submission_id)
    return HTMLResponse(content=html)


@router.get("/templates")
async def get_templates():
    return {
        "templates": list_templates(),
        "color_schemes": ["auto", *COLOR_SCHEMES],
        "font_pairings": list(FONT_PAIRINGS),
    }
