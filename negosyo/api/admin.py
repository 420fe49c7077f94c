"""Admin review, website and payout endpoints.

Every route depends on ``require_admin``; services check ``acting_as`` again.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs, require_admin
from negosyo.database import get_db
from negosyo.schemas.content import Customizations, WebsiteContentPatch
from negosyo.services import (
    admin_service,
    payout_service,
    publish_service,
    submission_service,
    website_service,
)
from negosyo.services.extraction_service import get_extraction_service

router = APIRouter(prefix="/admin", tags=["admin"])


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)

class GenerateWebsiteRequest(BaseModel):
    template_name: Optional[str] = None
    customizations: Optional[Customizations] = None
    content: Optional[WebsiteContentPatch] = None

class BulkMarkPaidRequest(BaseModel):
    submission_ids: list[str] = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------

@router.get("/submissions")
async def list_submissions(
    status: str = "submitted",
    limit: int = 50,
    offset: int = 0,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    submissions = await submission_service.list_submissions(
        db, acting_as, status=status, limit=min(limit, 200), offset=max(offset, 0),
    )
    return {"submissions": submissions, "count": len(submissions)}

@router.post("/submissions/{submission_id}/in-review")
async def mark_in_review(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await submission_service.mark_in_review(db, acting_as, submission_id)

@router.post("/submissions/{submission_id}/approve")
async def approve_submission(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await submission_service.approve_submission(db, acting_as, submission_id)

@router.post("/submissions/{submission_id}/reject")
async def reject_submission(
    submission_id: str,
    req: Optional[RejectRequest] = None,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    reason = req.reason if req else None
    return await submission_service.reject_submission(db, acting_as, submission_id, reason)


# ---------------------------------------------------------------------------
# Interview processing and websites
# ---------------------------------------------------------------------------

@router.post("/submissions/{submission_id}/transcribe")
async def transcribe_submission(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await submission_service.transcribe_submission(
        db, acting_as, submission_id, get_extraction_service(),
    )

@router.post("/submissions/{submission_id}/extract-content")
async def extract_content(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await submission_service.extract_submission_content(
        db, acting_as, submission_id, get_extraction_service(),
    )

@router.post("/submissions/{submission_id}/generate-website")
async def generate_website(
    submission_id: str,
    req: Optional[GenerateWebsiteRequest] = None,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    """Generate or regenerate the website, with optional template and style overrides."""
    req = req or GenerateWebsiteRequest()
    return await website_service.generate_website(
        db, acting_as, submission_id,
        template_name=req.template_name,
        customizations=req.customizations,
        content=req.content,
    )

@router.post("/submissions/{submission_id}/publish")
async def publish_website(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await publish_service.publish(db, acting_as, submission_id)

@router.post("/submissions/{submission_id}/unpublish")
async def unpublish_website(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await publish_service.unpublish(db, acting_as, submission_id)

@router.post("/websites/migrate-legacy")
async def migrate_legacy_content(
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await website_service.migrate_all_legacy_content(db, acting_as)


# ---------------------------------------------------------------------------
# Payouts and stats
# ---------------------------------------------------------------------------

@router.post("/submissions/bulk-mark-paid")
async def bulk_mark_paid(
    req: BulkMarkPaidRequest,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    """Mark several submissions paid; each id succeeds or fails on its own."""
    return await payout_service.bulk_mark_paid(db, acting_as, req.submission_ids)

@router.post("/submissions/{submission_id}/mark-paid")
async def mark_paid(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await payout_service.mark_paid(db, acting_as, submission_id)

@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await admin_service.get_stats(db, acting_as)
