from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.agents.llm_provider import GeminiProvider, OpenAIProvider, get_llm_provider
from app.config import Settings
from app.schemas import RemoteAssetReference
from app.services.asset_store import GeminiFileStore, LocalAssetStore


def _gemini_client(text='{"items": []}'):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(text=text))
    return client


def test_gemini_requires_key(tmp_path):
    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        get_llm_provider(LocalAssetStore(tmp_path), Settings(llm_provider="gemini", google_api_key=""))


def test_openai_rejects_gemini_file_store():
    store = GeminiFileStore(client=MagicMock())
    with pytest.raises(RuntimeError, match="local"):
        get_llm_provider(store, Settings(llm_provider="openai", openai_api_key="sk-test"))


def test_openai_with_local_store(tmp_path):
    provider = get_llm_provider(LocalAssetStore(tmp_path), Settings(llm_provider="openai", openai_api_key="sk-test"))
    assert isinstance(provider, OpenAIProvider)


def test_unknown_provider(tmp_path):
    with pytest.raises(RuntimeError, match="Unknown LLM provider"):
        get_llm_provider(LocalAssetStore(tmp_path), Settings(llm_provider="grok"))


async def test_gemini_compare_references_remote_files_by_uri():
    client = _gemini_client()
    provider = GeminiProvider("key", "inspect-model", "summary-model", client=client)
    images = [
        RemoteAssetReference(name="files/a", uri="https://files/a", mime_type="image/jpeg"),
        RemoteAssetReference(name="files/b", uri="https://files/b", mime_type="image/jpeg"),
    ]

    raw = await provider.compare_images(images, "Compare these", {"type": "OBJECT"}, 0.1)

    assert raw == '{"items": []}'
    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "inspect-model"
    parts = kwargs["contents"][0].parts
    assert [p.file_data.file_uri for p in parts[:2]] == ["https://files/a", "https://files/b"]
    assert parts[2].text == "Compare these"
    assert kwargs["config"].temperature == 0.1
    assert kwargs["config"].response_mime_type == "application/json"


async def test_gemini_compare_inlines_local_files():
    client = _gemini_client()
    store = MagicMock()
    store.read_bytes = AsyncMock(return_value=b"\xff\xd8jpeg")
    provider = GeminiProvider("key", "inspect-model", "summary-model", store=store, client=client)
    images = [RemoteAssetReference(name="files/a", uri="file:///tmp/a.jpg", mime_type="image/jpeg")]

    await provider.compare_images(images, "Compare", {"type": "OBJECT"})

    parts = client.aio.models.generate_content.call_args.kwargs["contents"][0].parts
    assert parts[0].inline_data.data == b"\xff\xd8jpeg"
    store.read_bytes.assert_awaited_once_with("files/a")


async def test_gemini_summary_uses_summary_model():
    client = _gemini_client('{"summary": "ok"}')
    provider = GeminiProvider("key", "inspect-model", "summary-model", client=client)
    assert await provider.generate_json("Summarize", {"type": "OBJECT"}, 0.2) == '{"summary": "ok"}'
    assert client.aio.models.generate_content.call_args.kwargs["model"] == "summary-model"
