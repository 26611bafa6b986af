"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class IngestionConfig(BaseSettings):
    poll_interval_s: float = 1.0
    max_poll_attempts: int = 60
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_types: list[str] = Field(default_factory=lambda: ["image/jpeg", "image/png"])


class CaptureConfig(BaseSettings):
    pitch_min_deg: float = 85.0
    pitch_max_deg: float = 95.0
    jpeg_quality: int = 95


class ModelConfig(BaseSettings):
    inspection_model: str = "gemini-3-pro-preview"
    summary_model: str = "gemini-2.5-flash"
    openai_model: str = "gpt-4o"
    anthropic_model: str = "claude-sonnet-4-20250514"
    inspection_temperature: float = 0.1
    summary_temperature: float = 0.2


class AssetStoreConfig(BaseSettings):
    backend: str = "gemini"  # gemini | local
    base_dir: str = "data/assets"


class Settings(BaseSettings):
    google_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_provider: str = "gemini"  # gemini | openai | anthropic
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)
    asset_store: AssetStoreConfig = Field(default_factory=AssetStoreConfig)
    # property id -> room key -> asset name
    baselines: dict[str, dict[str, str]] = Field(default_factory=dict)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    ing = IngestionConfig(**y.get("ingestion", {}))
    cap = CaptureConfig(**y.get("capture", {}))
    models = ModelConfig(**y.get("models", {}))
    store = AssetStoreConfig(**y.get("asset_store", {}))
    return Settings(
        ingestion=ing,
        capture=cap,
        models=models,
        asset_store=store,
        baselines=y.get("baselines", {}),
    )
