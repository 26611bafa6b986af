from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class WSMessage(BaseModel):
    # room_captured | room_uploaded | room_upload_failed |
    # analysis_started | room_assessed | analysis_complete
    event: str
    room: str = ""  # RoomSlot value, empty for inspection-wide events
    data: dict[str, Any] = Field(default_factory=dict)
