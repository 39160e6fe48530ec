"""
Tests for AI Providers - Base classes and mocked transports.

This module tests:
- TokenUsage dataclass
- AIResponse dataclass
- OpenAIProvider with a mocked AsyncOpenAI client
- OllamaProvider against httpx.MockTransport (all reply shapes)

We mock every call to ensure tests are:
- Fast (no network calls)
- Reliable (no API flakiness)
- Free (no token costs)
"""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx

from taskpilot.ai.providers import (
    AIResponse,
    OllamaProvider,
    OpenAIProvider,
    ProviderType,
    TokenUsage,
)


class TestTokenUsage:
    """Tests for TokenUsage dataclass."""

    def test_auto_calculate_total(self):
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50)

        assert usage.total_tokens == 150

    def test_default_values(self):
        usage = TokenUsage()

        assert usage.prompt_tokens == 0
        assert usage.completion_tokens == 0
        assert usage.total_tokens == 0

    def test_total_overrides_calculation(self):
        """An explicit non-zero total is kept."""
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=200)

        assert usage.total_tokens == 200


class TestAIResponse:
    """Tests for AIResponse dataclass."""

    def test_create_error_response(self):
        response = AIResponse(
            content="",
            provider=ProviderType.OLLAMA,
            model="llama3",
            success=False,
            error="connection refused",
        )

        assert response.success is False
        assert response.error == "connection refused"

    def test_to_dict_truncates_long_content(self):
        response = AIResponse(content="x" * 150, provider=ProviderType.OPENAI, model="gpt-4o-mini")

        result = response.to_dict()

        assert result["content"] == "x" * 100 + "..."
        assert result["provider"] == "openai"
        assert result["tokens"]["total"] == 0

    def test_created_at_timestamp(self):
        before = datetime.now(timezone.utc)
        response = AIResponse(content="{}", provider=ProviderType.OPENAI, model="gpt-4o-mini")
        after = datetime.now(timezone.utc)

        assert before <= response.created_at <= after


class TestProviderType:

    def test_all_providers_exist(self):
        assert ProviderType.OPENAI.value == "openai"
        assert ProviderType.OLLAMA.value == "ollama"
        assert len(ProviderType) == 2


# ---------------------------------------------------------------------------
# OPENAI
# ---------------------------------------------------------------------------

def _openai_completion(content, prompt_tokens=40, completion_tokens=12):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


def _mock_openai_client(**create_kwargs):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    return client


class TestOpenAIProvider:

    def test_not_configured_without_key(self):
        provider = OpenAIProvider(api_key=None)

        assert provider.is_configured is False

    @pytest.mark.asyncio
    async def test_unconfigured_call_returns_error_response(self):
        provider = OpenAIProvider(api_key=None)

        response = await provider.generate_json("hello")

        assert response.success is False
        assert "not configured" in response.error

    @pytest.mark.asyncio
    async def test_generate_json_success(self):
        content = '{"intent": "task.list", "confidence": 0.9, "parameters": {}}'
        client = _mock_openai_client(return_value=_openai_completion(content))
        provider = OpenAIProvider(model="gpt-4o-mini", client=client)

        response = await provider.generate_json("show my tasks", system_prompt="labels")

        assert response.success is True
        assert response.content == content
        assert response.usage.total_tokens == 52

        call = client.chat.completions.create.call_args.kwargs
        assert call["model"] == "gpt-4o-mini"
        assert call["temperature"] == 0
        assert call["response_format"] == {"type": "json_object"}
        assert call["messages"][0] == {"role": "system", "content": "labels"}
        assert call["messages"][1] == {"role": "user", "content": "show my tasks"}

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self):
        client = _mock_openai_client(return_value=_openai_completion("   "))
        provider = OpenAIProvider(client=client)

        response = await provider.generate_json("hi")

        assert response.success is False
        assert response.error == "Empty response from OpenAI"

    @pytest.mark.asyncio
    async def test_transport_exception_is_captured(self):
        client = _mock_openai_client(side_effect=RuntimeError("rate limited"))
        provider = OpenAIProvider(client=client)

        response = await provider.generate_json("hi")

        assert response.success is False
        assert response.error == "rate limited"


# ---------------------------------------------------------------------------
# OLLAMA
# ---------------------------------------------------------------------------

def _ollama_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestOllamaProvider:

    def test_not_configured_without_host(self):
        assert OllamaProvider(host="").is_configured is False
        assert OllamaProvider(host="http://localhost:11434/").chat_url == "http://localhost:11434/api/chat"

    @pytest.mark.asyncio
    async def test_string_content(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = request.read()
            return httpx.Response(200, json={
                "message": {"content": '{"intent": "grocery.list"}'},
                "prompt_eval_count": 30,
                "eval_count": 8,
            })

        provider = OllamaProvider(host="http://ollama:11434", client=_ollama_client(handler))

        response = await provider.generate_json("shopping list please", system_prompt="labels")

        assert response.success is True
        assert response.content == '{"intent": "grocery.list"}'
        assert response.usage.total_tokens == 38
        assert captured["url"] == "http://ollama:11434/api/chat"
        assert b'"format":"json"' in captured["body"].replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_list_of_text_parts(self):
        def handler(request):
            return httpx.Response(200, json={
                "message": {"content": [{"type": "text", "text": '{"intent":'}, {"type": "text", "text": '"unknown"}'}]},
            })

        provider = OllamaProvider(host="http://ollama:11434", client=_ollama_client(handler))

        response = await provider.generate_json("?")

        assert response.content == '{"intent":\n"unknown"}'

    @pytest.mark.asyncio
    async def test_top_level_response_field(self):
        def handler(request):
            return httpx.Response(200, json={"response": '{"intent": "task.list"}'})

        provider = OllamaProvider(host="http://ollama:11434", client=_ollama_client(handler))

        response = await provider.generate_json("tasks")

        assert response.success is True
        assert response.content == '{"intent": "task.list"}'

    @pytest.mark.asyncio
    async def test_bad_status(self):
        def handler(request):
            return httpx.Response(500, text="model not loaded")

        provider = OllamaProvider(host="http://ollama:11434", client=_ollama_client(handler))

        response = await provider.generate_json("tasks")

        assert response.success is False
        assert "500" in response.error

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        provider = OllamaProvider(host="http://ollama:11434", timeout=2.0, client=_ollama_client(handler))

        response = await provider.generate_json("tasks")

        assert response.success is False
        assert "timed out" in response.error
