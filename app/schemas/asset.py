from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class AssetState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class RemoteAssetReference(BaseModel):
    name: str
    uri: str = ""
    mime_type: str = ""
    state: AssetState = AssetState.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.state != AssetState.PENDING
