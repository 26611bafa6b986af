"""In-memory inspection sessions.

Each of the four rooms moves through empty → captured → uploading →
uploaded | failed. Analysis can start once every room is in a terminal
state; rooms whose upload failed are reported as degraded assessments.
Nothing is persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from ulid import ULID

from app.agents.inspection.graph import build_pairs, run_inspection
from app.agents.llm_provider import LLMProvider
from app.config import IngestionConfig, ModelConfig
from app.schemas.asset import RemoteAssetReference
from app.schemas.inspection import ROOM_SLOTS, InspectionResult, RoomAssessment, RoomSlot
from app.schemas.session import InspectionRead, RoomSlotRead, SlotStatus
from app.schemas.ws_messages import WSMessage
from app.services import ingestion
from app.services.asset_store import AssetStore
from app.services.ingestion import CapturedImage, UploadError

logger = logging.getLogger(__name__)

Notifier = Callable[[str, WSMessage], Awaitable[None]]

_TERMINAL = {SlotStatus.UPLOADED, SlotStatus.FAILED}


class SessionError(Exception):
    pass


class SessionNotFoundError(LookupError):
    pass


class SessionNotReadyError(SessionError):
    pass


class AnalysisAlreadyStartedError(SessionError):
    pass


@dataclass
class RoomSlotState:
    room: RoomSlot
    status: SlotStatus = SlotStatus.EMPTY
    image: CapturedImage | None = None
    asset: RemoteAssetReference | None = None
    error: str | None = None
    # bumped on every capture so a stale upload cannot overwrite a retake
    generation: int = 0


class InspectionSession:
    def __init__(
        self,
        property_id: str,
        baselines: dict[RoomSlot, str],
        notify: Notifier | None = None,
    ):
        self.id = str(ULID())
        self.property_id = property_id
        self.baselines = baselines
        self.created_at = datetime.now(timezone.utc)
        self.slots = {room: RoomSlotState(room) for room in ROOM_SLOTS}
        self.analysis_started = False
        self.result: InspectionResult | None = None
        self._notify = notify

    async def _emit(self, event: str, room: RoomSlot | None = None, data: dict | None = None):
        if self._notify is None:
            return
        try:
            await self._notify(self.id, WSMessage(event=event, room=room.value if room else "", data=data or {}))
        except Exception as e:
            logger.warning(f"Could not publish {event} for inspection {self.id}: {e}")

    # ── Capture / upload ──────────────────────────────────

    async def capture(self, room: RoomSlot, image: CapturedImage) -> RoomSlotState:
        """Store a photo for ``room``; a retake discards the previous upload."""
        if self.analysis_started:
            raise AnalysisAlreadyStartedError("Analysis already started; rooms can no longer be retaken")
        slot = self.slots[room]
        slot.image = image
        slot.asset = None
        slot.error = None
        slot.status = SlotStatus.CAPTURED
        slot.generation += 1
        await self._emit("room_captured", room)
        return slot

    async def _apply_upload(self, room: RoomSlot, generation: int, outcome: RemoteAssetReference | UploadError):
        slot = self.slots[room]
        if slot.generation != generation:
            logger.info(f"Discarding stale upload for {room.value}")
            return
        if isinstance(outcome, UploadError):
            slot.status = SlotStatus.FAILED
            slot.error = str(outcome)
            await self._emit("room_upload_failed", room, {"error": slot.error})
        else:
            slot.status = SlotStatus.UPLOADED
            slot.asset = outcome
            slot.error = None
            await self._emit("room_uploaded", room, {"fileName": outcome.name})

    async def upload_room(self, room: RoomSlot, store: AssetStore, cfg: IngestionConfig | None = None) -> RoomSlotState:
        slot = self.slots[room]
        if slot.image is None:
            raise SessionError(f"{room.value} has not been captured")
        generation = slot.generation
        slot.status = SlotStatus.UPLOADING
        try:
            outcome = await ingestion.upload(slot.image, store, cfg)
        except UploadError as e:
            logger.error(f"Upload for {room.value} failed: {e}")
            outcome = e
        await self._apply_upload(room, generation, outcome)
        return slot

    async def upload_pending(self, store: AssetStore, cfg: IngestionConfig | None = None) -> None:
        """Upload every captured room that is not uploaded yet, retrying failed ones, concurrently."""
        if self.analysis_started:
            raise AnalysisAlreadyStartedError("Analysis already started; uploads can no longer be retried")
        pending = {
            room: slot for room, slot in self.slots.items()
            if slot.status in (SlotStatus.CAPTURED, SlotStatus.FAILED) and slot.image is not None
        }
        if not pending:
            return
        generations = {room: slot.generation for room, slot in pending.items()}
        for slot in pending.values():
            slot.status = SlotStatus.UPLOADING
        outcomes = await ingestion.upload_rooms({room: slot.image for room, slot in pending.items()}, store, cfg)
        for room, outcome in outcomes.items():
            await self._apply_upload(room, generations[room], outcome)

    # ── Progress ──────────────────────────────────────────

    @property
    def is_complete(self) -> bool:
        return all(slot.status == SlotStatus.UPLOADED for slot in self.slots.values())

    @property
    def is_ready(self) -> bool:
        return all(slot.status in _TERMINAL for slot in self.slots.values())

    def missing_rooms(self) -> list[RoomSlot]:
        return [room for room, slot in self.slots.items() if slot.status not in _TERMINAL]

    # ── Analysis ──────────────────────────────────────────

    async def _room_assessed(self, assessment: RoomAssessment):
        await self._emit("room_assessed", assessment.room, assessment.model_dump(mode="json", by_alias=True))

    async def start_analysis(
        self, llm: LLMProvider, store: AssetStore, models: ModelConfig | None = None
    ) -> InspectionResult:
        if self.analysis_started:
            raise AnalysisAlreadyStartedError("Analysis already started for this inspection")
        if not self.is_ready:
            missing = ", ".join(room.value for room in self.missing_rooms())
            raise SessionNotReadyError(f"Rooms not captured and uploaded yet: {missing}")

        self.analysis_started = True
        currents = {room: slot.asset.name for room, slot in self.slots.items() if slot.asset is not None}
        errors = {room: slot.error for room, slot in self.slots.items() if slot.status == SlotStatus.FAILED}
        pairs = build_pairs(self.baselines, currents, errors)

        await self._emit("analysis_started")
        try:
            self.result = await run_inspection(
                pairs, llm, store,
                property_id=self.property_id,
                on_room_assessed=self._room_assessed,
                models=models,
            )
        except Exception:
            self.analysis_started = False
            raise
        await self._emit("analysis_complete", data=self.result.summary.model_dump(mode="json", by_alias=True))
        return self.result

    def to_read(self) -> InspectionRead:
        return InspectionRead(
            id=self.id,
            property_id=self.property_id,
            created_at=self.created_at,
            rooms=[
                RoomSlotRead(
                    room=room,
                    key=room.key,
                    status=slot.status,
                    asset_name=slot.asset.name if slot.asset else None,
                    error=slot.error,
                    captured_at=slot.image.captured_at if slot.image else None,
                )
                for room, slot in self.slots.items()
            ],
            complete=self.is_complete,
            ready=self.is_ready,
            analysis_started=self.analysis_started,
            result=self.result,
        )


class SessionManager:
    def __init__(self):
        self._sessions: dict[str, InspectionSession] = {}

    def create(
        self,
        property_id: str,
        baselines: dict[RoomSlot, str],
        notify: Notifier | None = None,
    ) -> InspectionSession:
        session = InspectionSession(property_id, baselines, notify)
        self._sessions[session.id] = session
        logger.info(f"Inspection {session.id} started for property {property_id}")
        return session

    def get(self, inspection_id: str) -> InspectionSession:
        session = self._sessions.get(inspection_id)
        if session is None:
            raise SessionNotFoundError(f"Inspection not found: {inspection_id}")
        return session

    def remove(self, inspection_id: str) -> None:
        if self._sessions.pop(inspection_id, None) is None:
            raise SessionNotFoundError(f"Inspection not found: {inspection_id}")


session_manager = SessionManager()
