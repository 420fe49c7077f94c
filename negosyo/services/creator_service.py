"""Creator accounts: registration, referral codes, profile and admin status changes."""
import json
import logging
import re
import secrets
import string

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.core.auth import ActingAs, create_access_token
from negosyo.core.exceptions import ConflictError, NotFoundError, ValidationError
from negosyo.models.creator import CREATOR_STATUSES, Creator
from negosyo.repositories import CreatorRepository

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase
_REFERRAL_ATTEMPTS = 5


def generate_referral_code(first_name: str, last_name: str) -> str:
    """Two letters of the first name, one of the last name, then six random base36 chars."""
    first = re.sub(r"[^A-Za-z]", "", first_name).upper()
    last = re.sub(r"[^A-Za-z]", "", last_name).upper()
    prefix = (first[:2] + last[:1]).ljust(3, "X")
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return prefix + suffix


def _creator_to_dict(creator: Creator) -> dict:
    return {
        "id": creator.id,
        "first_name": creator.first_name,
        "middle_name": creator.middle_name,
        "last_name": creator.last_name,
        "full_name": creator.full_name,
        "email": creator.email,
        "phone": creator.phone,
        "referral_code": creator.referral_code,
        "referred_by_id": creator.referred_by_id,
        "balance": float(creator.balance or 0),
        "total_earnings": float(creator.total_earnings or 0),
        "status": creator.status,
        "role": creator.role,
        "payout_method": creator.payout_method,
        "payout_details": json.loads(creator.payout_details) if creator.payout_details else {},
        "created_at": creator.created_at.isoformat() if creator.created_at else None,
    }


async def register_creator(
    db: AsyncSession,
    first_name: str,
    last_name: str,
    *,
    middle_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    referred_by_code: str | None = None,
    payout_method: str | None = None,
    payout_details: dict | None = None,
) -> dict:
    """Create an active creator with a unique referral code and return it with a token."""
    first_name, last_name = first_name.strip(), last_name.strip()
    if not first_name or not last_name:
        raise ValidationError("First and last name are required")

    email = email.lower().strip() if email else None
    repo = CreatorRepository(db)
    if email and await repo.get_by_email(email):
        raise ConflictError("Email already registered")

    referred_by_id = None
    if referred_by_code:
        referrer = await repo.get_by_referral_code(referred_by_code.strip())
        if referrer is None:
            raise ValidationError(f"Unknown referral code '{referred_by_code}'")
        referred_by_id = referrer.id

    for _ in range(_REFERRAL_ATTEMPTS):
        code = generate_referral_code(first_name, last_name)
        if not await repo.referral_code_exists(code):
            break
    else:
        raise ConflictError("Could not allocate a unique referral code")

    creator = await repo.create(
        first_name=first_name,
        middle_name=middle_name.strip() if middle_name else None,
        last_name=last_name,
        email=email,
        phone=phone,
        referral_code=code,
        referred_by_id=referred_by_id,
        status="active",
        role="creator",
        payout_method=payout_method,
        payout_details=json.dumps(payout_details or {}),
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Creator with this email or referral code already exists")
    await db.refresh(creator)

    logger.info("Creator registered: %s (%s)", creator.full_name, creator.referral_code)
    return {
        "creator": _creator_to_dict(creator),
        "token": create_access_token(creator.id),
    }


async def get_creator(db: AsyncSession, acting_as: ActingAs, creator_id: str) -> dict:
    acting_as.require_owner(creator_id)
    creator = await CreatorRepository(db).get_by_id(creator_id)
    if creator is None:
        raise NotFoundError("Creator", creator_id)
    return _creator_to_dict(creator)


async def update_payout_method(
    db: AsyncSession,
    acting_as: ActingAs,
    creator_id: str,
    payout_method: str,
    payout_details: dict,
) -> dict:
    acting_as.require_owner(creator_id)
    creator = await CreatorRepository(db).get_by_id(creator_id)
    if creator is None:
        raise NotFoundError("Creator", creator_id)
    creator.payout_method = payout_method
    creator.payout_details = json.dumps(payout_details)
    await db.commit()
    await db.refresh(creator)
    return _creator_to_dict(creator)


async def set_creator_status(db: AsyncSession, acting_as: ActingAs, creator_id: str, status: str) -> dict:
    """Admin-only status change. Creators are never deleted."""
    acting_as.require_admin()
    if status not in CREATOR_STATUSES:
        raise ValidationError(f"Invalid creator status '{status}'")
    creator = await CreatorRepository(db).get_by_id(creator_id)
    if creator is None:
        raise NotFoundError("Creator", creator_id)
    previous = creator.status
    creator.status = status
    await db.commit()
    await db.refresh(creator)
    logger.info("Creator %s status %s -> %s by %s", creator_id, previous, status, acting_as.creator_id)
    return _creator_to_dict(creator)
