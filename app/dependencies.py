"""FastAPI dependency providers for settings, the asset store, the model provider and sessions."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException

from app.agents.llm_provider import LLMProvider, get_llm_provider
from app.config import Settings, get_settings
from app.services.asset_store import AssetStore, get_asset_store
from app.services.session_manager import SessionManager, session_manager


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache
def _shared_store() -> AssetStore:
    return get_asset_store(get_settings_dep())


def get_store() -> AssetStore:
    """The configured asset store; 503 when it cannot be built (e.g. no API key)."""
    try:
        return _shared_store()
    except RuntimeError as e:
        raise HTTPException(503, str(e))


def get_llm(
    store: AssetStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
) -> LLMProvider:
    try:
        return get_llm_provider(store, settings)
    except RuntimeError as e:
        raise HTTPException(503, str(e))


def get_sessions() -> SessionManager:
    return session_manager
