"""Ingestion client: validate a captured photo, upload it, wait until usable.

Uploads for different rooms run concurrently and never affect each other; a
failed room comes back as an ``UploadError`` value instead of an exception.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.config import IngestionConfig, get_settings
from app.schemas.asset import AssetState, RemoteAssetReference
from app.schemas.inspection import RoomSlot
from app.services.asset_store import AssetStore

logger = logging.getLogger(__name__)


@dataclass
class CapturedImage:
    data: bytes
    mime_type: str
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    filename: str = ""


class UploadError(Exception):
    """Base class for everything that can go wrong while ingesting one photo."""


class InvalidImageError(UploadError):
    """Rejected locally; nothing was sent to the store."""


class ImageTooLargeError(InvalidImageError):
    pass


class RemoteStoreError(UploadError):
    """The store call itself failed (network, auth, quota...)."""


class ProcessingFailedError(UploadError):
    pass


class ProcessingTimeoutError(UploadError):
    pass


def validate_image(image: CapturedImage, cfg: IngestionConfig | None = None) -> None:
    cfg = cfg or get_settings().ingestion
    if image.mime_type not in cfg.allowed_mime_types:
        raise InvalidImageError(
            f"Unsupported image type {image.mime_type!r}. Only .jpg, .jpeg, and .png files are allowed"
        )
    if not image.data:
        raise InvalidImageError("Image is empty")
    if len(image.data) > cfg.max_upload_bytes:
        raise ImageTooLargeError(
            f"Image is {len(image.data)} bytes; the limit is {cfg.max_upload_bytes} bytes"
        )


async def wait_until_processed(
    store: AssetStore,
    ref: RemoteAssetReference,
    cfg: IngestionConfig | None = None,
) -> RemoteAssetReference:
    """Poll the store until ``ref`` leaves the pending state."""
    cfg = cfg or get_settings().ingestion
    attempts = 0
    while not ref.is_terminal:
        if attempts >= cfg.max_poll_attempts:
            raise ProcessingTimeoutError(
                f"File {ref.name} still processing after {attempts} status checks"
            )
        logger.debug(f"Waiting for {ref.name} to be processed...")
        await asyncio.sleep(cfg.poll_interval_s)
        attempts += 1
        try:
            ref = await store.get(ref.name)
        except Exception as e:
            raise RemoteStoreError(f"Status check for {ref.name} failed: {e}") from e

    if ref.state == AssetState.FAILED:
        raise ProcessingFailedError(f"File processing failed for {ref.name}")
    return ref


async def upload(
    image: CapturedImage,
    store: AssetStore,
    cfg: IngestionConfig | None = None,
) -> RemoteAssetReference:
    """Validate, upload and wait. Returns a ready reference or raises ``UploadError``."""
    cfg = cfg or get_settings().ingestion
    validate_image(image, cfg)
    try:
        ref = await store.upload(image.data, image.mime_type, image.filename)
    except Exception as e:
        raise RemoteStoreError(f"Upload failed: {e}") from e
    ref = await wait_until_processed(store, ref, cfg)
    logger.info(f"File {ref.name} processed successfully")
    return ref


async def upload_rooms(
    images: dict[RoomSlot, CapturedImage],
    store: AssetStore,
    cfg: IngestionConfig | None = None,
) -> dict[RoomSlot, RemoteAssetReference | UploadError]:
    """Upload every room's photo concurrently.

    Each room maps to either its ready reference or the ``UploadError`` that
    ended its pipeline. Errors outside the ``UploadError`` family propagate.
    """
    cfg = cfg or get_settings().ingestion

    async def _one(room: RoomSlot, image: CapturedImage):
        try:
            return room, await upload(image, store, cfg)
        except UploadError as e:
            logger.error(f"Upload for {room.value} failed: {e}")
            return room, e

    results = await asyncio.gather(*(_one(room, img) for room, img in images.items()))
    return dict(results)
