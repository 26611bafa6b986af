from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class RoomSlot(str, Enum):
    KITCHEN = "Kitchen"
    BATHROOM = "Bathroom"
    LIVING_ROOM = "Living Room"
    BEDROOM = "Bedroom"

    @property
    def key(self) -> str:
        """Stable identifier used in URLs, form fields and config."""
        return _ROOM_KEYS[self]

    @classmethod
    def from_key(cls, key: str) -> RoomSlot:
        for slot, slot_key in _ROOM_KEYS.items():
            if slot_key == key:
                return slot
        raise ValueError(f"Unknown room: {key}")


_ROOM_KEYS = {
    RoomSlot.KITCHEN: "kitchen",
    RoomSlot.BATHROOM: "bathroom",
    RoomSlot.LIVING_ROOM: "livingRoom",
    RoomSlot.BEDROOM: "bedroom",
}

ROOM_SLOTS: tuple[RoomSlot, ...] = tuple(RoomSlot)


class Condition(str, Enum):
    MISSING = "missing"
    DAMAGED = "damaged"
    BROKEN = "broken"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OverallStatus(str, Enum):
    ALL_CLEAR = "all_clear"
    MINOR_ISSUES = "minor_issues"
    MAJOR_CONCERNS = "major_concerns"


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class DamageItem(CamelModel):
    item_name: str
    condition: Condition
    description: str
    severity: Severity


class RoomAssessment(CamelModel):
    room: RoomSlot
    damage_detected: bool
    items: list[DamageItem] = Field(default_factory=list)
    notes: str | None = None
    # True when produced by a fallback path rather than a successful analysis
    degraded: bool = False


class ItemToCheck(CamelModel):
    room: str
    item: str


class FinalSummary(CamelModel):
    overall_status: OverallStatus
    summary: str
    items_to_check: list[ItemToCheck] = Field(default_factory=list)
    total_issues_found: int
    degraded: bool = False


class InspectionResult(CamelModel):
    summary: FinalSummary
    room_assessments: list[RoomAssessment]


class UploadResponse(CamelModel):
    file_name: str


class CompareRequest(CamelModel):
    kitchen_filename: str | None = None
    bathroom_filename: str | None = None
    living_room_filename: str | None = None
    bedroom_filename: str | None = None
    property_id: str = "default"

    def filenames(self) -> dict[RoomSlot, str | None]:
        return {
            RoomSlot.KITCHEN: self.kitchen_filename,
            RoomSlot.BATHROOM: self.bathroom_filename,
            RoomSlot.LIVING_ROOM: self.living_room_filename,
            RoomSlot.BEDROOM: self.bedroom_filename,
        }
