"""Abstract multimodal LLM provider with Gemini, OpenAI and Anthropic adapters."""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod

from app.config import Settings, get_settings
from app.schemas.asset import RemoteAssetReference
from app.services.asset_store import AssetStore, GeminiFileStore


class LLMProvider(ABC):
    """Abstract interface for the two calls an inspection makes."""

    @abstractmethod
    async def compare_images(
        self, images: list[RemoteAssetReference], prompt: str, schema: dict, temperature: float = 0.1,
    ) -> str:
        """Send stored images + prompt, return the raw JSON text."""
        ...

    @abstractmethod
    async def generate_json(self, prompt: str, schema: dict, temperature: float = 0.2) -> str:
        """Text-only call constrained to a JSON schema."""
        ...


class GeminiProvider(LLMProvider):
    """Gemini provider.

    Images in the Gemini File API are referenced by URI; images from a local
    store are sent inline.
    """

    def __init__(
        self, api_key: str, inspection_model: str, summary_model: str,
        store: AssetStore | None = None, client=None,
    ):
        if client is None:
            from google import genai
            client = genai.Client(api_key=api_key)
        self.client = client
        self.store = store
        self.inspection_model = inspection_model
        self.summary_model = summary_model

    async def compare_images(self, images, prompt, schema, temperature=0.1):
        from google.genai import types

        parts = []
        for img in images:
            if img.uri.startswith("file:") and self.store is not None:
                data = await self.store.read_bytes(img.name)
                parts.append(types.Part.from_bytes(data=data, mime_type=img.mime_type))
            else:
                parts.append(types.Part.from_uri(file_uri=img.uri, mime_type=img.mime_type))
        parts.append(types.Part.from_text(text=prompt))
        resp = await self.client.aio.models.generate_content(
            model=self.inspection_model,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(
                temperature=temperature,
                top_p=0.1,
                top_k=10,
                media_resolution=types.MediaResolution.MEDIA_RESOLUTION_HIGH,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return resp.text or ""

    async def generate_json(self, prompt, schema, temperature=0.2):
        from google.genai import types

        resp = await self.client.aio.models.generate_content(
            model=self.summary_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return resp.text or ""


def _data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.standard_b64encode(data).decode('utf-8')}"


class OpenAIProvider(LLMProvider):
    """OpenAI GPT-4o vision provider. Reads image bytes back from the store."""

    def __init__(self, api_key: str, store: AssetStore, model: str = "gpt-4o"):
        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=api_key)
        self.store = store
        self.model = model

    async def compare_images(self, images, prompt, schema, temperature=0.1):
        content = []
        for img in images:
            data = await self.store.read_bytes(img.name)
            content.append({"type": "image_url", "image_url": {"url": _data_url(data, img.mime_type)}})
        content.append({"type": "text", "text": prompt})
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=2048,
        )
        return resp.choices[0].message.content or ""

    async def generate_json(self, prompt, schema, temperature=0.2):
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=1024,
        )
        return resp.choices[0].message.content or ""


class AnthropicProvider(LLMProvider):
    """Anthropic Claude vision provider. Reads image bytes back from the store."""

    def __init__(self, api_key: str, store: AssetStore, model: str = "claude-sonnet-4-20250514"):
        from anthropic import AsyncAnthropic
        self.client = AsyncAnthropic(api_key=api_key)
        self.store = store
        self.model = model

    async def compare_images(self, images, prompt, schema, temperature=0.1):
        content = []
        for img in images:
            data = await self.store.read_bytes(img.name)
            b64 = base64.standard_b64encode(data).decode("utf-8")
            content.append({"type": "image", "source": {"type": "base64", "media_type": img.mime_type, "data": b64}})
        content.append({"type": "text", "text": prompt})
        resp = await self.client.messages.create(
            model=self.model,
            max_tokens=2048,
            temperature=temperature,
            messages=[{"role": "user", "content": content}],
        )
        return resp.content[0].text

    async def generate_json(self, prompt, schema, temperature=0.2):
        resp = await self.client.messages.create(
            model=self.model,
            max_tokens=1024,
            temperature=temperature,
            messages=[{"role": "user", "content": [{"type": "text", "text": prompt}]}],
        )
        return resp.content[0].text


def get_llm_provider(store: AssetStore, settings: Settings | None = None) -> LLMProvider:
    """Factory: returns the provider named by ``llm_provider``."""
    settings = settings or get_settings()
    name = settings.llm_provider
    if name == "gemini":
        if not settings.google_api_key:
            raise RuntimeError("No Gemini API key configured. Set GOOGLE_API_KEY.")
        return GeminiProvider(
            settings.google_api_key,
            settings.models.inspection_model,
            settings.models.summary_model,
            store=store,
        )
    if isinstance(store, GeminiFileStore):
        raise RuntimeError(f"The {name} provider needs inline images; set asset_store.backend to 'local'.")
    if name == "openai":
        if not settings.openai_api_key:
            raise RuntimeError("No OpenAI API key configured. Set OPENAI_API_KEY.")
        return OpenAIProvider(settings.openai_api_key, store, settings.models.openai_model)
    if name == "anthropic":
        if not settings.anthropic_api_key:
            raise RuntimeError("No Anthropic API key configured. Set ANTHROPIC_API_KEY.")
        return AnthropicProvider(settings.anthropic_api_key, store, settings.models.anthropic_model)
    raise RuntimeError(f"Unknown LLM provider: {name}")
