"""Object storage for submission media.

Objects are content-addressed: the object id is the SHA-256 of the bytes plus
an extension derived from the content type, so re-uploading the same photo is
a no-op. Image uploads also get a dominant color computed with Pillow, which
feeds the ``auto`` color scheme.
"""

from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from negosyo.config import settings
from negosyo.core.exceptions import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/wav": ".wav",
    "audio/webm": ".webm",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/quicktime": ".mov",
}
_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{64}\.[a-z0-9]{2,5}$")


@dataclass(frozen=True)
class StoredObject:
    id: str
    url: str
    content_type: str
    size: int
    dominant_color: str | None = None


def dominant_color(data: bytes) -> str | None:
    """Most common color of a downscaled, quantized copy of the image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            small = image.convert("RGB").resize((64, 64))
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Could not read image for palette: %s", e)
        return None
    quantized = small.quantize(colors=8).convert("RGB")
    colors = quantized.getcolors(64 * 64)
    if not colors:
        return None
    _, (r, g, b) = max(colors, key=lambda item: item[0])
    return "#{:02X}{:02X}{:02X}".format(r, g, b)


class LocalObjectStore:
    """Objects on the local filesystem, served under ``public_url``."""

    def __init__(self, root_dir: str, public_url: str):
        self.root = Path(root_dir)
        self.public_url = public_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, object_id: str) -> Path:
        return self.root / object_id[:2] / object_id

    def _write(self, object_id: str, data: bytes) -> None:
        path = self._path(object_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            path.write_bytes(data)

    async def upload(self, data: bytes, content_type: str) -> StoredObject:
        if not data:
            raise ValidationError("Empty upload")
        if len(data) > settings.storage_max_upload_bytes:
            raise ValidationError("Upload exceeds the maximum allowed size")
        extension = _EXTENSIONS.get(content_type)
        if extension is None:
            raise ValidationError(f"Unsupported content type '{content_type}'")

        object_id = hashlib.sha256(data).hexdigest() + extension
        try:
            await asyncio.to_thread(self._write, object_id, data)
        except OSError as e:
            raise UpstreamError("storage", str(e))

        color = None
        if content_type.startswith("image/"):
            color = await asyncio.to_thread(dominant_color, data)
        logger.info("Stored object %s (%d bytes)", object_id, len(data))
        return StoredObject(
            id=object_id,
            url=self.url_for(object_id),
            content_type=content_type,
            size=len(data),
            dominant_color=color,
        )

    def url_for(self, object_id: str) -> str:
        return f"{self.public_url}/{object_id[:2]}/{object_id}"

    def get_url(self, object_id: str) -> str | None:
        if not _OBJECT_ID_RE.match(object_id):
            return None
        if not self._path(object_id).is_file():
            return None
        return self.url_for(object_id)


# Singleton storage instance
_storage: LocalObjectStore | None = None


def get_storage() -> LocalObjectStore:
    """Get or create the global storage instance."""
    global _storage
    if _storage is None:
        _storage = LocalObjectStore(settings.storage_path, settings.storage_public_url)
    return _storage
