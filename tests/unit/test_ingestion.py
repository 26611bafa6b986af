"""Tests for the upload / processing-wait client."""

import asyncio

import pytest

from app.config import IngestionConfig
from app.schemas import AssetState, RemoteAssetReference, RoomSlot
from app.services import ingestion
from app.services.asset_store import AssetStore
from app.services.ingestion import (
    CapturedImage,
    ImageTooLargeError,
    InvalidImageError,
    ProcessingFailedError,
    ProcessingTimeoutError,
    RemoteStoreError,
)


FAST = IngestionConfig(poll_interval_s=0, max_poll_attempts=5, max_upload_bytes=1024)


class ScriptedStore(AssetStore):
    """Each upload's status checks walk through a scripted list of states."""

    def __init__(self, states=None, fail_upload_for=()):
        self.states = states or [AssetState.READY]
        self.fail_upload_for = set(fail_upload_for)
        self.uploads: list[str] = []
        self.gets = 0
        self._scripts: dict[str, list[AssetState]] = {}

    async def upload(self, data, mime_type, display_name=""):
        if display_name in self.fail_upload_for:
            raise ConnectionError("network unreachable")
        name = f"files/{len(self.uploads)}"
        self.uploads.append(display_name)
        self._scripts[name] = list(self.states)
        return RemoteAssetReference(name=name, uri=f"https://store/{name}", mime_type=mime_type)

    async def get(self, name):
        self.gets += 1
        script = self._scripts[name]
        state = script.pop(0) if len(script) > 1 else script[0]
        return RemoteAssetReference(name=name, uri=f"https://store/{name}", state=state)

    async def read_bytes(self, name):
        return b"\xff\xd8"


def _jpeg(name="photo.jpg", size=10):
    return CapturedImage(data=b"\xff" * size, mime_type="image/jpeg", filename=name)


# ── validate_image ───────────────────────────────────────────────────

def test_validate_rejects_gif():
    with pytest.raises(InvalidImageError, match="Only .jpg, .jpeg, and .png"):
        ingestion.validate_image(CapturedImage(data=b"GIF89a", mime_type="image/gif"), FAST)


def test_validate_rejects_empty():
    with pytest.raises(InvalidImageError):
        ingestion.validate_image(CapturedImage(data=b"", mime_type="image/png"), FAST)


def test_validate_rejects_oversized():
    with pytest.raises(ImageTooLargeError):
        ingestion.validate_image(_jpeg(size=2048), FAST)


def test_validate_accepts_png():
    ingestion.validate_image(CapturedImage(data=b"\x89PNG", mime_type="image/png"), FAST)


# ── upload ───────────────────────────────────────────────────────────

async def test_gif_never_reaches_store():
    store = ScriptedStore()
    with pytest.raises(InvalidImageError):
        await ingestion.upload(CapturedImage(data=b"GIF89a", mime_type="image/gif"), store, FAST)
    assert store.uploads == []


async def test_upload_polls_until_ready():
    store = ScriptedStore(states=[AssetState.PENDING, AssetState.PENDING, AssetState.READY])
    ref = await ingestion.upload(_jpeg(), store, FAST)
    assert ref.state == AssetState.READY
    assert store.gets == 3


async def test_upload_processing_failed():
    store = ScriptedStore(states=[AssetState.PENDING, AssetState.FAILED])
    with pytest.raises(ProcessingFailedError):
        await ingestion.upload(_jpeg(), store, FAST)


async def test_upload_times_out_after_max_attempts():
    store = ScriptedStore(states=[AssetState.PENDING])
    with pytest.raises(ProcessingTimeoutError):
        await ingestion.upload(_jpeg(), store, FAST)
    assert store.gets == FAST.max_poll_attempts


async def test_upload_network_error_is_remote_store_error():
    store = ScriptedStore(fail_upload_for={"photo.jpg"})
    with pytest.raises(RemoteStoreError, match="network unreachable"):
        await ingestion.upload(_jpeg(), store, FAST)


async def test_status_check_error_is_remote_store_error():
    class BrokenGet(ScriptedStore):
        async def get(self, name):
            raise ConnectionError("reset by peer")

    store = BrokenGet(states=[AssetState.PENDING])
    with pytest.raises(RemoteStoreError):
        await ingestion.upload(_jpeg(), store, FAST)


# ── upload_rooms ─────────────────────────────────────────────────────

async def test_upload_rooms_isolates_failures():
    store = ScriptedStore(fail_upload_for={"bathroom.jpg"})
    images = {room: _jpeg(f"{room.key}.jpg") for room in RoomSlot}
    results = await ingestion.upload_rooms(images, store, FAST)

    assert isinstance(results[RoomSlot.BATHROOM], RemoteStoreError)
    for room in (RoomSlot.KITCHEN, RoomSlot.LIVING_ROOM, RoomSlot.BEDROOM):
        assert results[room].state == AssetState.READY


async def test_upload_rooms_run_concurrently():
    in_flight = 0
    peak = 0

    class SlowStore(ScriptedStore):
        async def upload(self, data, mime_type, display_name=""):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await super().upload(data, mime_type, display_name)

    images = {room: _jpeg(f"{room.key}.jpg") for room in RoomSlot}
    await ingestion.upload_rooms(images, SlowStore(), FAST)
    assert peak == 4
