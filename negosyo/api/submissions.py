"""Creator-side submission endpoints: drafting, submitting and payout requests."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs, get_acting_as
from negosyo.database import get_db
from negosyo.schemas.content import PhotoRef
from negosyo.services import submission_service

router = APIRouter(prefix="/submissions", tags=["submissions"])


class SubmissionCreateRequest(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    business_type: str = Field(..., min_length=1, max_length=100)
    owner_name: str = Field(..., min_length=1, max_length=200)
    owner_phone: str = Field(..., min_length=1, max_length=30)
    owner_email: Optional[EmailStr] = None
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    photos: list[PhotoRef] = Field(default_factory=list)
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    terms_agreed: bool = False


class SubmissionUpdateRequest(BaseModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    business_type: Optional[str] = Field(None, min_length=1, max_length=100)
    owner_name: Optional[str] = Field(None, min_length=1, max_length=200)
    owner_phone: Optional[str] = Field(None, min_length=1, max_length=30)
    owner_email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    photos: Optional[list[PhotoRef]] = None
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    terms_agreed: Optional[bool] = None


@router.post("", status_code=201)
async def create_submission(
    req: SubmissionCreateRequest,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    fields = req.model_dump()
    fields["photos"] = [p.model_dump() for p in req.photos]
    return await submission_service.create_submission(db, acting_as, **fields)


@router.get("")
async def list_my_submissions(
    limit: int = 50,
    offset: int = 0,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    submissions = await submission_service.list_submissions(
        db, acting_as, limit=min(limit, 200), offset=max(offset, 0),
    )
    return {"submissions": submissions, "count": len(submissions)}


@router.get("/{submission_id}")
async def get_submission(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await submission_service.get_submission(db, acting_as, submission_id)


@router.patch("/{submission_id}")
async def update_submission(
    submission_id: str,
    req: SubmissionUpdateRequest,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    """Edit a draft. Only the fields sent are changed."""
    updates = req.model_dump(exclude_unset=True)
    if req.photos is not None:
        updates["photos"] = [p.model_dump() for p in req.photos]
    return await submission_service.update_submission(db, acting_as, submission_id, updates)


@router.post("/{submission_id}/submit")
async def submit_submission(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await submission_service.submit_submission(db, acting_as, submission_id)


@router.post("/{submission_id}/request-payout")
async def request_payout(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await submission_service.request_payout(db, acting_as, submission_id)


@router.post("/{submission_id}/agree-terms")
async def agree_to_terms(
    submission_id: str,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await submission_service.agree_to_terms(db, acting_as, submission_id)
