"""Media uploads for submissions."""
from fastapi import APIRouter, Depends, File, UploadFile

from negosyo.core.auth import ActingAs, get_acting_as
from negosyo.services.storage_service import get_storage

router = APIRouter(tags=["uploads"])


@router.post("/uploads", status_code=201)
async def upload_media(
    file: UploadFile = File(...),
    acting_as: ActingAs = Depends(get_acting_as),
):
    """Store a photo or interview recording; photos come back with their dominant color."""
    data = await file.read()
    stored = await get_storage().upload(data, file.content_type or "application/octet-stream")
    return {
        "id": stored.id,
        "url": stored.url,
        "content_type": stored.content_type,
        "size": stored.size,
        "dominant_color": stored.dominant_color,
    }
