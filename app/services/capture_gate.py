"""Camera capture gated on how the phone is held.

A photo can only be taken while the device pitch sits inside the configured
window (85°–95° by default, i.e. held upright). When no orientation sensor is
available the gate stays closed until ``enable_manually()`` is called.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import cv2
import numpy as np

from app.config import CaptureConfig
from app.services.ingestion import CapturedImage
from app.services.orientation import OrientationSensor, SensorPermission, UnsupportedOrientationSensor

logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """Base class for capture-time failures."""


class CameraPermissionError(CaptureError):
    pass


class NoCameraError(CaptureError):
    pass


class CameraBusyError(CaptureError):
    pass


class InsecureContextError(CaptureError):
    pass


class CaptureNotAllowedError(CaptureError):
    pass


@dataclass(frozen=True)
class PitchWindow:
    min_deg: float = 85.0
    max_deg: float = 95.0

    def contains(self, pitch: float) -> bool:
        return self.min_deg <= pitch <= self.max_deg

    @classmethod
    def from_config(cls, cfg: CaptureConfig) -> PitchWindow:
        return cls(cfg.pitch_min_deg, cfg.pitch_max_deg)


class CameraSource(ABC):
    @abstractmethod
    def open(self) -> None:
        ...

    @abstractmethod
    def read_frame(self) -> np.ndarray:
        ...

    @abstractmethod
    def release(self) -> None:
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...


_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
_INSECURE_SCHEMES = {"http", "rtsp"}


def check_secure_source(url: str) -> None:
    """Plain-text streams are only acceptable from the local machine."""
    parsed = urlparse(url)
    if parsed.scheme in _INSECURE_SCHEMES and parsed.hostname not in _LOCAL_HOSTS:
        raise InsecureContextError(
            "Camera requires a secure connection (HTTPS). Please use HTTPS or localhost."
        )


class OpenCVCamera(CameraSource):
    """Camera device (by index) or network stream (by URL) read through OpenCV."""

    def __init__(self, source: int | str = 0, width: int = 1920, height: int = 1080):
        self.source = source
        self.width = width
        self.height = height
        self._cap: cv2.VideoCapture | None = None

    def _check_device(self, index: int) -> bool:
        """Return True when the device node is known to exist."""
        if not sys.platform.startswith("linux"):
            return False
        dev = Path(f"/dev/video{index}")
        if not dev.exists():
            raise NoCameraError("No camera found on this device.")
        if not os.access(dev, os.R_OK | os.W_OK):
            raise CameraPermissionError(
                "Camera permission denied. Please allow camera access for this user."
            )
        return True

    def open(self) -> None:
        device_known = False
        if isinstance(self.source, str):
            check_secure_source(self.source)
        else:
            device_known = self._check_device(self.source)

        cap = cv2.VideoCapture(self.source)
        if not cap.isOpened():
            cap.release()
            if device_known:
                raise CameraBusyError("Camera is already in use by another application.")
            raise NoCameraError(f"No camera found at {self.source!r}.")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        logger.info(f"Camera {self.source!r} opened")

    def read_frame(self) -> np.ndarray:
        if self._cap is None:
            raise CaptureError("Camera is not open")
        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise CameraBusyError("Camera stopped delivering frames; it may be in use elsewhere.")
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None


def encode_jpeg(frame: np.ndarray, quality: int = 95) -> bytes:
    ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise CaptureError("Could not encode the captured frame")
    return buf.tobytes()


def _log_follow_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Orientation readings stopped: {task.exception()}")


class CaptureGate:
    def __init__(
        self,
        camera: CameraSource,
        sensor: OrientationSensor | None = None,
        window: PitchWindow | None = None,
        jpeg_quality: int = 95,
    ):
        self.camera = camera
        self.sensor = sensor or UnsupportedOrientationSensor()
        self.window = window or PitchWindow()
        self.jpeg_quality = jpeg_quality
        self.pitch: float | None = None
        self.permission: SensorPermission | None = None
        self._manual = False
        self._follow_task: asyncio.Task | None = None

    async def start(self) -> SensorPermission:
        """Open the camera, then ask for orientation access.

        Camera failures raise the specific ``CaptureError`` subclass. A denied
        or unsupported sensor is not an error: the gate stays closed until
        ``enable_manually()``.
        """
        self._cancel_follow()
        self.pitch = None
        self._manual = False
        await asyncio.to_thread(self.camera.open)
        try:
            self.permission = await self.sensor.request_permission()
        except Exception:
            self.stop()
            raise
        if self.permission == SensorPermission.GRANTED:
            self._follow_task = asyncio.create_task(self.follow())
            self._follow_task.add_done_callback(_log_follow_failure)
        else:
            logger.warning(f"Orientation sensor {self.permission.value}; capture needs manual enable")
        return self.permission

    async def follow(self, sensor: OrientationSensor | None = None) -> None:
        """Feed every reading from ``sensor`` (default: the gate's own) into the gate."""
        async for pitch in (sensor or self.sensor).readings():
            self.update_pitch(pitch)

    def update_pitch(self, pitch: float) -> None:
        self.pitch = pitch

    def enable_manually(self) -> None:
        self._manual = True

    @property
    def sensor_available(self) -> bool:
        return self.permission == SensorPermission.GRANTED

    @property
    def pitch_valid(self) -> bool:
        return self.pitch is not None and self.window.contains(self.pitch)

    @property
    def capture_enabled(self) -> bool:
        return self.camera.is_open and (self.pitch_valid or self._manual)

    async def capture(self) -> CapturedImage:
        """Grab the current frame at native resolution and close the camera."""
        if not self.capture_enabled:
            if not self.camera.is_open:
                raise CaptureNotAllowedError("Camera is not running")
            raise CaptureNotAllowedError(
                f"Hold phone upright ({self.window.min_deg:g}-{self.window.max_deg:g}°) to enable capture"
            )
        frame = await asyncio.to_thread(self.camera.read_frame)
        data = await asyncio.to_thread(encode_jpeg, frame, self.jpeg_quality)
        height, width = frame.shape[:2]
        logger.info(f"Photo captured, size: {width} x {height}")
        self.stop()
        return CapturedImage(data=data, mime_type="image/jpeg")

    def cancel(self) -> None:
        self.stop()

    def _cancel_follow(self) -> None:
        if self._follow_task is not None:
            self._follow_task.cancel()
            self._follow_task = None

    def stop(self) -> None:
        self._cancel_follow()
        self.camera.release()
