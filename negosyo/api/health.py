import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_VERSION = "0.1.0"


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a database round trip."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check failed, database unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "version": _VERSION, "database": "unavailable"},
        )
    return {
        "status": "healthy",
        "version": _VERSION,
        "environment": settings.environment,
        "database": "connected",
    }
