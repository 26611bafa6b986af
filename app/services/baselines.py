"""Baseline (pre-stay) reference photos, configured per property."""

from __future__ import annotations

from app.config import Settings, get_settings
from app.schemas.inspection import ROOM_SLOTS, RoomSlot


class UnknownPropertyError(LookupError):
    pass


def resolve_baselines(property_id: str, settings: Settings | None = None) -> dict[RoomSlot, str]:
    """Map each room to its baseline asset name for ``property_id``.

    Rooms without a configured baseline are left out; the comparison step
    turns them into degraded assessments.
    """
    settings = settings or get_settings()
    configured = settings.baselines.get(property_id)
    if configured is None:
        raise UnknownPropertyError(f"No baseline images configured for property {property_id!r}")
    return {room: configured[room.key] for room in ROOM_SLOTS if configured.get(room.key)}
