"""Pydantic request/response schemas."""

from app.schemas.asset import AssetState, RemoteAssetReference
from app.schemas.inspection import (
    ROOM_SLOTS,
    CompareRequest,
    Condition,
    DamageItem,
    FinalSummary,
    InspectionResult,
    ItemToCheck,
    OverallStatus,
    RoomAssessment,
    RoomSlot,
    Severity,
    UploadResponse,
)
from app.schemas.session import InspectionCreate, InspectionRead, RoomSlotRead, SlotStatus
from app.schemas.ws_messages import WSMessage

__all__ = [
    "AssetState", "RemoteAssetReference",
    "ROOM_SLOTS", "RoomSlot", "Condition", "Severity", "OverallStatus",
    "DamageItem", "RoomAssessment", "ItemToCheck", "FinalSummary", "InspectionResult",
    "CompareRequest", "UploadResponse",
    "InspectionCreate", "InspectionRead", "RoomSlotRead", "SlotStatus",
    "WSMessage",
]
