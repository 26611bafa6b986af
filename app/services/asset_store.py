"""Remote asset stores: where room photos live while they are compared.

Two backends share one interface:

- ``GeminiFileStore`` uploads to the Gemini File API. Files come back in a
  PROCESSING state and become ACTIVE (or FAILED) some time later.
- ``LocalAssetStore`` keeps files under ``asset_store.base_dir``. Uploads start
  pending and a background Pillow verification marks them ready or failed,
  so callers poll it exactly like the remote store.
"""

from __future__ import annotations

import asyncio
import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image
from ulid import ULID

from app.config import Settings, get_settings
from app.schemas.asset import AssetState, RemoteAssetReference

logger = logging.getLogger(__name__)

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png"}
_MIME_TYPES = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png"}


class AssetNotFoundError(LookupError):
    """The store has no asset with the requested name."""


class AssetBytesUnavailableError(RuntimeError):
    """The store keeps the asset but cannot hand its bytes back."""


class AssetStore(ABC):
    """Abstract interface for the file store that holds inspection photos."""

    @abstractmethod
    async def upload(self, data: bytes, mime_type: str, display_name: str = "") -> RemoteAssetReference:
        """Send bytes to the store. The returned reference may still be pending."""
        ...

    @abstractmethod
    async def get(self, name: str) -> RemoteAssetReference:
        """Return the current state of an asset."""
        ...

    @abstractmethod
    async def read_bytes(self, name: str) -> bytes:
        """Return the raw asset bytes, for providers that need inline images."""
        ...


# ── Gemini File API ───────────────────────────────────────

_GEMINI_STATES = {
    "PROCESSING": AssetState.PENDING,
    "ACTIVE": AssetState.READY,
    "FAILED": AssetState.FAILED,
}


def _from_gemini_file(f) -> RemoteAssetReference:
    raw_state = getattr(f.state, "value", f.state)
    return RemoteAssetReference(
        name=f.name,
        uri=f.uri or "",
        mime_type=f.mime_type or "",
        state=_GEMINI_STATES.get(str(raw_state), AssetState.READY),
    )


class GeminiFileStore(AssetStore):
    """Gemini File API store."""

    def __init__(self, api_key: str = "", client=None):
        if client is None:
            if not api_key:
                raise RuntimeError("GOOGLE_API_KEY is not set. Configure it in your .env file.")
            from google import genai
            client = genai.Client(api_key=api_key)
        self.client = client

    async def upload(self, data: bytes, mime_type: str, display_name: str = "") -> RemoteAssetReference:
        from google.genai import types

        uploaded = await self.client.aio.files.upload(
            file=io.BytesIO(data),
            config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name or None),
        )
        logger.info(f"Uploaded file: {uploaded.name}")
        return _from_gemini_file(uploaded)

    async def get(self, name: str) -> RemoteAssetReference:
        from google.genai import errors

        try:
            f = await self.client.aio.files.get(name=name)
        except errors.ClientError as e:
            if e.code == 404:
                raise AssetNotFoundError(f"Asset not found: {name}") from e
            raise
        return _from_gemini_file(f)

    async def read_bytes(self, name: str) -> bytes:
        # The File API only serves uploaded files to models, never back to us
        raise AssetBytesUnavailableError(f"Gemini File API does not return the bytes of {name}")


# ── Local disk ────────────────────────────────────────────

def _write_sync(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def _verify_sync(path: Path) -> bool:
    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (OSError, SyntaxError):
        return False


class LocalAssetStore(AssetStore):
    """On-disk store. Asset names look like ``files/<ulid>``."""

    def __init__(self, base_dir: str | Path):
        self.base = Path(base_dir)
        self._states: dict[str, AssetState] = {}
        self._tasks: set[asyncio.Task] = set()

    def _find(self, name: str) -> Path | None:
        asset_id = name.removeprefix("files/")
        if not asset_id or "/" in asset_id or asset_id.startswith("."):
            return None
        for candidate in self.base.glob(f"{asset_id}.*"):
            return candidate
        return None

    def _ref(self, name: str, path: Path, state: AssetState) -> RemoteAssetReference:
        return RemoteAssetReference(
            name=name,
            uri=path.resolve().as_uri(),
            mime_type=_MIME_TYPES.get(path.suffix.lower(), "application/octet-stream"),
            state=state,
        )

    async def upload(self, data: bytes, mime_type: str, display_name: str = "") -> RemoteAssetReference:
        asset_id = str(ULID()).lower()
        name = f"files/{asset_id}"
        path = self.base / f"{asset_id}{_EXTENSIONS.get(mime_type, '.bin')}"
        await asyncio.to_thread(_write_sync, path, data)

        self._states[name] = AssetState.PENDING
        task = asyncio.create_task(self._process(name, path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(f"Stored {display_name or 'image'} as {name}")
        return self._ref(name, path, AssetState.PENDING)

    async def _process(self, name: str, path: Path) -> None:
        ok = await asyncio.to_thread(_verify_sync, path)
        self._states[name] = AssetState.READY if ok else AssetState.FAILED
        if not ok:
            logger.warning(f"Asset {name} is not a decodable image")

    async def get(self, name: str) -> RemoteAssetReference:
        path = self._find(name)
        if path is None:
            raise AssetNotFoundError(f"Asset not found: {name}")
        # Files present on disk from an earlier run were verified back then
        return self._ref(name, path, self._states.get(name, AssetState.READY))

    async def read_bytes(self, name: str) -> bytes:
        path = self._find(name)
        if path is None:
            raise AssetNotFoundError(f"Asset not found: {name}")
        return await asyncio.to_thread(path.read_bytes)


def get_asset_store(settings: Settings | None = None) -> AssetStore:
    """Factory: build the store selected by ``asset_store.backend``."""
    settings = settings or get_settings()
    backend = settings.asset_store.backend
    if backend == "local":
        return LocalAssetStore(settings.asset_store.base_dir)
    if backend == "gemini":
        return GeminiFileStore(settings.google_api_key)
    raise RuntimeError(f"Unknown asset store backend: {backend}")
