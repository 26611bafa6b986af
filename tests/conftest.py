"""Shared fakes: an in-memory asset store and a scripted vision model."""

from __future__ import annotations

import asyncio
import json

import pytest

from app.agents.llm_provider import LLMProvider
from app.schemas import AssetState, RemoteAssetReference, RoomSlot
from app.services.asset_store import AssetNotFoundError, AssetStore


class MemoryStore(AssetStore):
    """Uploads are ready immediately; names are ``files/<display name>``."""

    def __init__(self, names=()):
        self.assets: dict[str, AssetState] = {n: AssetState.READY for n in names}
        self.data: dict[str, bytes] = {}

    async def upload(self, data, mime_type, display_name=""):
        name = f"files/{display_name or len(self.assets)}"
        self.assets[name] = AssetState.READY
        self.data[name] = data
        return RemoteAssetReference(name=name, uri=f"https://store/{name}", mime_type=mime_type, state=AssetState.READY)

    async def get(self, name):
        if name not in self.assets:
            raise AssetNotFoundError(f"Asset not found: {name}")
        return RemoteAssetReference(name=name, uri=f"https://store/{name}", mime_type="image/jpeg", state=self.assets[name])

    async def read_bytes(self, name):
        if name not in self.data:
            raise AssetNotFoundError(f"Asset not found: {name}")
        return self.data[name]


def room_report(*items, notes=None):
    return json.dumps({"damageDetected": bool(items), "items": list(items), "notes": notes})


def damage(name, severity="medium", condition="damaged", description="Visible damage"):
    return {"itemName": name, "condition": condition, "description": description, "severity": severity}


class ScriptedModel(LLMProvider):
    """Answers per room, keyed by the room key found in the baseline asset name.

    A room's answer may be a string (returned as-is), an exception (raised) or
    a ``(delay, answer)`` tuple.
    """

    def __init__(self, rooms=None, summary=None):
        self.rooms = rooms or {}
        self.summary = summary
        self.compare_calls: list[list[str]] = []
        self.summary_prompts: list[str] = []
        self.completed: list[RoomSlot] = []
        self.temperatures: list[float] = []

    def _room_of(self, images):
        for room in RoomSlot:
            if room.key in images[0].name:
                return room
        raise AssertionError(f"Unexpected images {images}")

    async def compare_images(self, images, prompt, schema, temperature=0.1):
        room = self._room_of(images)
        self.temperatures.append(temperature)
        self.compare_calls.append([img.name for img in images])
        answer = self.rooms.get(room, room_report())
        if isinstance(answer, tuple):
            delay, answer = answer
            await asyncio.sleep(delay)
        self.completed.append(room)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    async def generate_json(self, prompt, schema, temperature=0.2):
        self.temperatures.append(temperature)
        self.summary_prompts.append(prompt)
        if isinstance(self.summary, BaseException):
            raise self.summary
        if self.summary is None:
            return json.dumps({
                "overallStatus": "all_clear",
                "summary": "The property is in good condition.",
                "itemsToCheck": [],
                "totalIssuesFound": 0,
            })
        return self.summary


BASELINES = {room: f"files/base-{room.key}" for room in RoomSlot}
CURRENTS = {room: f"files/now-{room.key}" for room in RoomSlot}


@pytest.fixture
def memory_store():
    return MemoryStore([*BASELINES.values(), *CURRENTS.values()])
