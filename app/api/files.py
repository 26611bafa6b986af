from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.config import Settings
from app.dependencies import get_settings_dep, get_store
from app.schemas import UploadResponse
from app.services import ingestion
from app.services.asset_store import AssetStore
from app.services.ingestion import (
    CapturedImage,
    ImageTooLargeError,
    InvalidImageError,
    ProcessingTimeoutError,
    UploadError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


def upload_http_error(e: UploadError) -> HTTPException:
    """Map an ingestion failure to the HTTP status the client sees."""
    if isinstance(e, ImageTooLargeError):
        return HTTPException(413, str(e))
    if isinstance(e, InvalidImageError):
        return HTTPException(400, str(e))
    if isinstance(e, ProcessingTimeoutError):
        return HTTPException(504, str(e))
    return HTTPException(502, str(e))


async def read_upload(image: UploadFile | None) -> CapturedImage:
    if image is None:
        raise HTTPException(400, "No image file provided")
    data = await image.read()
    return CapturedImage(
        data=data,
        mime_type=image.content_type or "",
        filename=image.filename or "",
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: UploadFile | None = File(None),
    store: AssetStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
):
    captured = await read_upload(image)
    try:
        ref = await ingestion.upload(captured, store, settings.ingestion)
    except UploadError as e:
        logger.error(f"Upload of {captured.filename or 'image'} failed: {e}")
        raise upload_http_error(e)
    return UploadResponse(file_name=ref.name)
