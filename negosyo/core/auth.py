"""Bearer-token verification and the ``ActingAs`` capability.

Identity is established elsewhere; this module only verifies the signed token
at the HTTP boundary and turns it into an explicit capability object that core
operations receive as an argument.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.core.exceptions import PermissionDeniedError, UnauthorizedError
from negosyo.database import get_db


@dataclass(frozen=True)
class ActingAs:
    creator_id: str
    role: str = "creator"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def require_admin(self) -> None:
        if not self.is_admin:
            raise PermissionDeniedError("Admin access required")

    def require_owner(self, owner_id: str) -> None:
        if not self.is_admin and self.creator_id != owner_id:
            raise PermissionDeniedError("Not the owner of this resource")


def create_access_token(creator_id: str) -> str:
    """Create a creator JWT. ``type: creator`` distinguishes it from other tokens."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": creator_id,
        "type": "creator",
        "jti": str(uuid.uuid4()),
        "exp": now + timedelta(hours=settings.jwt_expire_hours),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def get_current_creator_id(authorization: str | None = None) -> str:
    """Extract creator_id from a Bearer token. Raises UnauthorizedError if invalid."""
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Authorization header must be: Bearer <token>")
    try:
        payload = jwt.decode(parts[1], settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise UnauthorizedError(f"Invalid token: {e}")
    if payload.get("type") != "creator":
        raise UnauthorizedError("Not a creator token")
    creator_id = payload.get("sub")
    if not creator_id:
        raise UnauthorizedError("Token missing subject")
    return creator_id


async def get_acting_as(
    authorization: str = Header(None),
    db: AsyncSession = Depends(get_db),
) -> ActingAs:
    """FastAPI dependency: verify the token once and resolve the caller's role."""
    from negosyo.repositories import CreatorRepository

    creator_id = get_current_creator_id(authorization)
    creator = await CreatorRepository(db).get_by_id(creator_id)
    if creator is None:
        raise UnauthorizedError("Unknown creator")
    if creator.status == "suspended":
        raise PermissionDeniedError("Creator account is suspended")
    role = "admin" if creator.role == "admin" or creator_id in settings.admin_ids else "creator"
    return ActingAs(creator_id=creator_id, role=role)


async def require_admin(acting_as: ActingAs = Depends(get_acting_as)) -> ActingAs:
    acting_as.require_admin()
    return acting_as
