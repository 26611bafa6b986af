"""LangGraph TypedDict state for the inspection agent."""

from __future__ import annotations

from typing import TypedDict

from app.schemas.inspection import FinalSummary, RoomAssessment


class RoomPair(TypedDict):
    room: str  # RoomSlot value
    baseline_name: str  # "" when no baseline is configured
    current_name: str  # "" when the upload failed
    upload_error: str


class InspectionState(TypedDict):
    property_id: str
    pairs: list[RoomPair]
    assessments: list[RoomAssessment]  # one per room, RoomSlot order
    summary: FinalSummary | None
