from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.agents.llm_provider import LLMProvider
from app.api.files import read_upload, upload_http_error
from app.config import Settings
from app.dependencies import get_llm, get_sessions, get_settings_dep, get_store
from app.schemas import InspectionCreate, InspectionRead, InspectionResult, RoomSlot
from app.services.asset_store import AssetStore
from app.services.baselines import UnknownPropertyError, resolve_baselines
from app.services.ingestion import InvalidImageError, validate_image
from app.services.session_manager import (
    AnalysisAlreadyStartedError,
    InspectionSession,
    SessionManager,
    SessionNotFoundError,
    SessionNotReadyError,
)
from app.services.ws_manager import ws_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inspections", tags=["inspections"])


def _get_session(inspection_id: str, sessions: SessionManager) -> InspectionSession:
    try:
        return sessions.get(inspection_id)
    except SessionNotFoundError:
        raise HTTPException(404, "Inspection not found")


@router.post("", response_model=InspectionRead, status_code=201)
async def create_inspection(
    body: InspectionCreate,
    sessions: SessionManager = Depends(get_sessions),
    settings: Settings = Depends(get_settings_dep),
):
    try:
        baselines = resolve_baselines(body.property_id, settings)
    except UnknownPropertyError as e:
        raise HTTPException(404, str(e))
    session = sessions.create(body.property_id, baselines, notify=ws_manager.broadcast)
    return session.to_read()


@router.get("/{inspection_id}", response_model=InspectionRead)
async def get_inspection(
    inspection_id: str,
    sessions: SessionManager = Depends(get_sessions),
):
    return _get_session(inspection_id, sessions).to_read()


@router.put("/{inspection_id}/rooms/{room_key}", response_model=InspectionRead)
async def capture_room(
    inspection_id: str,
    room_key: str,
    image: UploadFile | None = File(None),
    sessions: SessionManager = Depends(get_sessions),
    store: AssetStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
):
    """Store (or retake) one room's photo and upload it.

    A failed upload is recorded on the room rather than returned as an error;
    only photos rejected before upload produce 4xx responses.
    """
    session = _get_session(inspection_id, sessions)
    try:
        room = RoomSlot.from_key(room_key)
    except ValueError:
        raise HTTPException(404, f"Unknown room: {room_key}")

    captured = await read_upload(image)
    try:
        validate_image(captured, settings.ingestion)
    except InvalidImageError as e:
        raise upload_http_error(e)

    try:
        await session.capture(room, captured)
    except AnalysisAlreadyStartedError as e:
        raise HTTPException(409, str(e))
    await session.upload_room(room, store, settings.ingestion)
    return session.to_read()


@router.post("/{inspection_id}/upload", response_model=InspectionRead)
async def retry_uploads(
    inspection_id: str,
    sessions: SessionManager = Depends(get_sessions),
    store: AssetStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
):
    """Re-upload every captured room whose upload failed or never ran."""
    session = _get_session(inspection_id, sessions)
    try:
        await session.upload_pending(store, settings.ingestion)
    except AnalysisAlreadyStartedError as e:
        raise HTTPException(409, str(e))
    return session.to_read()


@router.post("/{inspection_id}/analyze", response_model=InspectionResult)
async def analyze_inspection(
    inspection_id: str,
    sessions: SessionManager = Depends(get_sessions),
    store: AssetStore = Depends(get_store),
    llm: LLMProvider = Depends(get_llm),
    settings: Settings = Depends(get_settings_dep),
):
    session = _get_session(inspection_id, sessions)
    try:
        return await session.start_analysis(llm, store, settings.models)
    except (SessionNotReadyError, AnalysisAlreadyStartedError) as e:
        raise HTTPException(409, str(e))


@router.delete("/{inspection_id}", status_code=204)
async def delete_inspection(
    inspection_id: str,
    sessions: SessionManager = Depends(get_sessions),
):
    try:
        sessions.remove(inspection_id)
    except SessionNotFoundError:
        raise HTTPException(404, "Inspection not found")
