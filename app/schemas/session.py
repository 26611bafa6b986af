from __future__ import annotations

from datetime import datetime
from enum import Enum

from app.schemas.inspection import CamelModel, InspectionResult, RoomSlot


class SlotStatus(str, Enum):
    EMPTY = "empty"
    CAPTURED = "captured"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    FAILED = "failed"


class InspectionCreate(CamelModel):
    property_id: str = "default"


class RoomSlotRead(CamelModel):
    room: RoomSlot
    key: str
    status: SlotStatus
    asset_name: str | None = None
    error: str | None = None
    captured_at: datetime | None = None


class InspectionRead(CamelModel):
    id: str
    property_id: str
    created_at: datetime
    rooms: list[RoomSlotRead]
    complete: bool
    ready: bool
    analysis_started: bool
    result: InspectionResult | None = None
