import io
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from app.config import IngestionConfig
from app.schemas import AssetState
from app.services import ingestion
from app.services.asset_store import (
    AssetBytesUnavailableError,
    AssetNotFoundError,
    AssetStore,
    GeminiFileStore,
    LocalAssetStore,
)
from app.services.ingestion import CapturedImage, ProcessingFailedError

POLL = IngestionConfig(poll_interval_s=0.01, max_poll_attempts=300)


@pytest.fixture
def jpeg_bytes():
    img = Image.new("RGB", (320, 240), color=(70, 130, 180))
    buf = io.BytesIO()
    img.save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def store(tmp_path):
    return LocalAssetStore(tmp_path / "assets")


# ── LocalAssetStore ──────────────────────────────────────────────────

async def test_local_upload_starts_pending(store, jpeg_bytes):
    ref = await store.upload(jpeg_bytes, "image/jpeg", "kitchen.jpg")
    assert ref.name.startswith("files/")
    assert ref.state == AssetState.PENDING
    assert ref.mime_type == "image/jpeg"


async def test_local_upload_becomes_ready(store, jpeg_bytes):
    ref = await ingestion.upload(CapturedImage(data=jpeg_bytes, mime_type="image/jpeg"), store, POLL)
    assert ref.state == AssetState.READY
    assert await store.read_bytes(ref.name) == jpeg_bytes


async def test_local_corrupt_image_fails_processing(store):
    garbage = CapturedImage(data=b"not really a jpeg", mime_type="image/jpeg")
    with pytest.raises(ProcessingFailedError):
        await ingestion.upload(garbage, store, POLL)


async def test_local_get_unknown_asset(store):
    with pytest.raises(AssetNotFoundError):
        await store.get("files/doesnotexist")


async def test_local_get_rejects_path_traversal(store):
    with pytest.raises(AssetNotFoundError):
        await store.get("files/../secrets")


async def test_local_files_from_earlier_run_are_ready(tmp_path, jpeg_bytes):
    base = tmp_path / "assets"
    base.mkdir()
    (base / "01baseline.jpg").write_bytes(jpeg_bytes)
    ref = await LocalAssetStore(base).get("files/01baseline")
    assert ref.state == AssetState.READY


# ── GeminiFileStore ──────────────────────────────────────────────────

def _gemini_file(state):
    return SimpleNamespace(
        name="files/abc123",
        uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
        mime_type="image/jpeg",
        state=SimpleNamespace(value=state),
    )


def test_gemini_store_requires_key():
    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        GeminiFileStore(api_key="")


async def test_gemini_store_maps_states(jpeg_bytes):
    client = MagicMock()
    client.aio.files.upload = AsyncMock(return_value=_gemini_file("PROCESSING"))
    client.aio.files.get = AsyncMock(return_value=_gemini_file("ACTIVE"))
    store = GeminiFileStore(client=client)

    ref = await store.upload(jpeg_bytes, "image/jpeg", "kitchen.jpg")
    assert ref.state == AssetState.PENDING
    assert ref.uri.endswith("abc123")

    ref = await store.get("files/abc123")
    assert ref.state == AssetState.READY


async def test_gemini_store_failed_state():
    client = MagicMock()
    client.aio.files.get = AsyncMock(return_value=_gemini_file("FAILED"))
    ref = await GeminiFileStore(client=client).get("files/abc123")
    assert ref.state == AssetState.FAILED


async def test_gemini_store_does_not_serve_bytes():
    with pytest.raises(AssetBytesUnavailableError, match="files/abc123"):
        await GeminiFileStore(client=MagicMock()).read_bytes("files/abc123")


def test_store_without_read_bytes_cannot_be_built():
    class UploadOnly(AssetStore):
        async def upload(self, data, mime_type, display_name=""):
            ...

        async def get(self, name):
            ...

    with pytest.raises(TypeError):
        UploadOnly()
