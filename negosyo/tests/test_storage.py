"""Object storage: validation, content addressing and dominant color."""

import io

import pytest
from PIL import Image

from negosyo.core.exceptions import ValidationError
from negosyo.services.storage_service import LocalObjectStore, dominant_color


def _png(color=(200, 30, 30), size=(32, 32)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(str(tmp_path), "https://cdn.test/uploads/")


class TestDominantColor:
    def test_solid_image(self):
        assert dominant_color(_png((200, 30, 30))) == "#C81E1E"

    def test_mostly_one_color(self):
        image = Image.new("RGB", (40, 40), (0, 0, 255))
        image.paste((255, 255, 255), (0, 0, 10, 10))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        color = dominant_color(buffer.getvalue())
        red, blue = int(color[1:3], 16), int(color[5:7], 16)
        assert blue > 200 and red < 60

    def test_not_an_image(self):
        assert dominant_color(b"definitely not a png") is None


class TestUpload:
    async def test_image_upload(self, store, tmp_path):
        data = _png()
        stored = await store.upload(data, "image/png")

        assert stored.id.endswith(".png")
        assert stored.url == f"https://cdn.test/uploads/{stored.id[:2]}/{stored.id}"
        assert stored.size == len(data)
        assert stored.dominant_color == "#C81E1E"
        assert (tmp_path / stored.id[:2] / stored.id).read_bytes() == data

    async def test_same_bytes_same_object(self, store):
        first = await store.upload(_png(), "image/png")
        second = await store.upload(_png(), "image/png")
        assert first.id == second.id

    async def test_audio_has_no_color(self, store):
        stored = await store.upload(b"ID3fake-audio", "audio/mpeg")
        assert stored.id.endswith(".mp3")
        assert stored.dominant_color is None

    async def test_rejects_unsupported_type(self, store):
        with pytest.raises(ValidationError):
            await store.upload(b"MZ", "application/x-msdownload")

    async def test_rejects_empty_and_oversized(self, store, monkeypatch):
        from negosyo.config import settings

        with pytest.raises(ValidationError):
            await store.upload(b"", "image/png")
        monkeypatch.setattr(settings, "storage_max_upload_bytes", 10)
        with pytest.raises(ValidationError):
            await store.upload(b"x" * 11, "audio/mpeg")

    async def test_get_url(self, store):
        stored = await store.upload(b"ID3fake-audio", "audio/mpeg")
        assert store.get_url(stored.id) == stored.url
        assert store.get_url("../../etc/passwd") is None
        assert store.get_url("0" * 64 + ".mp3") is None
