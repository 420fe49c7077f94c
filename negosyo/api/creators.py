"""Creator account API endpoints."""
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs, get_acting_as, require_admin
from negosyo.database import get_db
from negosyo.services import creator_service, payout_service

router = APIRouter(prefix="/creators", tags=["creators"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CreatorRegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    referred_by_code: Optional[str] = Field(None, max_length=20)
    payout_method: Optional[str] = None
    payout_details: Optional[dict] = None

class PayoutMethodRequest(BaseModel):
    payout_method: str = Field(..., min_length=1, max_length=30)
    payout_details: dict = Field(default_factory=dict)

class CreatorStatusRequest(BaseModel):
    status: Literal["pending", "active", "suspended"]


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------

@router.post("", status_code=201)
async def register_creator(
    req: CreatorRegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a creator and return the profile with a bearer token."""
    return await creator_service.register_creator(
        db, req.first_name, req.last_name,
        middle_name=req.middle_name,
        email=req.email,
        phone=req.phone,
        referred_by_code=req.referred_by_code,
        payout_method=req.payout_method,
        payout_details=req.payout_details,
    )


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------

@router.get("/me")
async def get_my_profile(
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await creator_service.get_creator(db, acting_as, acting_as.creator_id)

@router.put("/me/payout-method")
async def update_my_payout_method(
    req: PayoutMethodRequest,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    return await creator_service.update_payout_method(
        db, acting_as, acting_as.creator_id, req.payout_method, req.payout_details,
    )

@router.get("/me/ledger")
async def get_my_ledger(
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(get_acting_as),
):
    """Credits recorded against the current creator, newest first."""
    entries = await payout_service.get_ledger(db, acting_as, acting_as.creator_id, limit=min(limit, 200))
    return {"entries": entries, "count": len(entries)}

@router.patch("/{creator_id}/status")
async def set_creator_status(
    creator_id: str,
    req: CreatorStatusRequest,
    db: AsyncSession = Depends(get_db),
    acting_as: ActingAs = Depends(require_admin),
):
    return await creator_service.set_creator_status(db, acting_as, creator_id, req.status)
