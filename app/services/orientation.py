"""Device orientation capability.

Platforms differ: some hand out orientation readings freely, others need an
explicit user permission first. Both hide behind ``request_permission()``,
which answers granted, denied or unsupported.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)


class SensorPermission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class OrientationSensor(ABC):
    """Source of pitch readings in degrees (90 = phone held upright)."""

    @abstractmethod
    async def request_permission(self) -> SensorPermission:
        ...

    @abstractmethod
    def readings(self) -> AsyncIterator[float]:
        ...


class QueueOrientationSensor(OrientationSensor):
    """Readings pushed in by whatever relays the device's sensor events.

    Pass ``permission_prompt`` for platforms that require an explicit grant;
    without it access is ambient and always granted.
    """

    def __init__(self, permission_prompt: Callable[[], Awaitable[bool]] | None = None):
        self._prompt = permission_prompt
        self._queue: asyncio.Queue[float | None] = asyncio.Queue()
        self.permission: SensorPermission | None = None

    async def request_permission(self) -> SensorPermission:
        if self._prompt is None:
            self.permission = SensorPermission.GRANTED
        else:
            granted = await self._prompt()
            self.permission = SensorPermission.GRANTED if granted else SensorPermission.DENIED
        return self.permission

    def push(self, pitch: float) -> None:
        if self.permission != SensorPermission.GRANTED:
            logger.debug("Dropping orientation reading received before permission was granted")
            return
        self._queue.put_nowait(float(pitch))

    def close(self) -> None:
        self._queue.put_nowait(None)

    async def readings(self) -> AsyncIterator[float]:
        if self.permission != SensorPermission.GRANTED:
            raise RuntimeError("Orientation permission has not been granted")
        while True:
            pitch = await self._queue.get()
            if pitch is None:
                return
            yield pitch


class UnsupportedOrientationSensor(OrientationSensor):
    """For hosts without an orientation sensor (desktops, headless runs)."""

    async def request_permission(self) -> SensorPermission:
        return SensorPermission.UNSUPPORTED

    async def readings(self) -> AsyncIterator[float]:
        return
        yield
