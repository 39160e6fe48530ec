"""
Tests for the intent classifier fallback chain.

Covers:
- Response parsing (code fences, label whitelist, confidence clamping)
- Strategy timeouts and provider errors
- Fallback order and totality: classify() always returns a label
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from taskpilot.ai.intent import (
    FallbackIntentClassifier,
    IntentLabel,
    KeywordIntentStrategy,
    ProviderIntentStrategy,
    build_default_classifier,
)
from taskpilot.ai.intent.classifier import (
    IntentStrategy,
    clamp_confidence,
    fold_parameter_synonyms,
    parse_intent_payload,
    strip_code_fences,
)
from taskpilot.ai.providers import AIResponse, ProviderType
from taskpilot.core.config import Settings
from taskpilot.core.errors import ProviderError


def _provider(provider_type=ProviderType.OPENAI, configured=True, **generate_kwargs):
    provider = MagicMock()
    provider.provider_type = provider_type
    provider.is_configured = configured
    provider.generate_json = AsyncMock(**generate_kwargs)
    return provider


def _ok(content, provider_type=ProviderType.OPENAI):
    return AIResponse(content=content, provider=provider_type, model="test-model")


def _failed(error, provider_type=ProviderType.OPENAI):
    return AIResponse(content="", provider=provider_type, model="test-model", success=False, error=error)


# ---------------------------------------------------------------------------
# PARSING
# ---------------------------------------------------------------------------

class TestResponseParsing:

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"intent": "task.list"}\n```') == '{"intent": "task.list"}'
        assert strip_code_fences('```{"a": 1}```') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_parse_fenced_payload(self):
        content = '```json\n{"intent": "reminder.create", "confidence": 0.8, "parameters": {"description": "call Anna"}}\n```'

        result = parse_intent_payload(content, provider="openai")

        assert result.intent == IntentLabel.REMINDER_CREATE
        assert result.confidence == 0.8
        assert result.parameters == {"description": "call Anna"}
        assert result.provider == "openai"

    def test_unknown_label_is_rejected(self):
        with pytest.raises(ProviderError):
            parse_intent_payload('{"intent": "weather.forecast"}', provider="openai")

    def test_label_is_case_insensitive(self):
        result = parse_intent_payload('{"intent": " Task.Create "}', provider="ollama")

        assert result.intent == IntentLabel.TASK_CREATE

    def test_invalid_json_is_rejected(self):
        with pytest.raises(ProviderError):
            parse_intent_payload("intent: task.list", provider="ollama")

    def test_non_object_is_rejected(self):
        with pytest.raises(ProviderError):
            parse_intent_payload('["task.list"]', provider="ollama")

    def test_missing_parameters_become_empty(self):
        result = parse_intent_payload('{"intent": "task.list", "parameters": "none"}', provider="openai")

        assert result.parameters == {}

    @pytest.mark.parametrize("raw,expected", [
        (0.5, 0.5),
        (1.7, 1.0),
        (-0.2, 0.0),
        ("0.25", 0.25),
        ("high", None),
        (True, None),
        (float("nan"), None),
        (None, None),
    ])
    def test_clamp_confidence(self, raw, expected):
        assert clamp_confidence(raw) == expected

    def test_synonyms_do_not_overwrite_canonical_keys(self):
        folded = fold_parameter_synonyms({"dateTime": "2026-10-20T09:00", "remindAt": "ignored", "day": "friday"})

        assert folded == {"dateTime": "2026-10-20T09:00", "date": "friday"}


# ---------------------------------------------------------------------------
# STRATEGIES
# ---------------------------------------------------------------------------

class TestProviderIntentStrategy:

    @pytest.mark.asyncio
    async def test_success(self):
        provider = _provider(return_value=_ok('{"intent": "task.list", "confidence": 0.9}'))
        strategy = ProviderIntentStrategy(provider, timeout=1.0)

        result = await strategy.classify("show my tasks")

        assert strategy.name == "openai"
        assert result.intent == IntentLabel.TASK_LIST
        assert result.confidence == 0.9

    @pytest.mark.asyncio
    async def test_failed_response_raises_provider_error(self):
        provider = _provider(return_value=_failed("quota exceeded"))
        strategy = ProviderIntentStrategy(provider, timeout=1.0)

        with pytest.raises(ProviderError, match="quota exceeded"):
            await strategy.classify("show my tasks")

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_error(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)
            return _ok('{"intent": "task.list"}')

        provider = _provider()
        provider.generate_json = slow
        strategy = ProviderIntentStrategy(provider, timeout=0.05)

        with pytest.raises(ProviderError, match="Timed out"):
            await strategy.classify("show my tasks")

    def test_availability_follows_provider(self):
        assert ProviderIntentStrategy(_provider(configured=False), timeout=1.0).is_available is False


# ---------------------------------------------------------------------------
# FALLBACK CHAIN
# ---------------------------------------------------------------------------

class TestFallbackIntentClassifier:

    def test_keyword_strategy_is_always_last(self):
        classifier = FallbackIntentClassifier([ProviderIntentStrategy(_provider(), timeout=1.0)])

        assert isinstance(classifier.strategies[-1], KeywordIntentStrategy)
        assert len(classifier.strategies) == 2

    @pytest.mark.asyncio
    async def test_primary_wins(self):
        primary = _provider(return_value=_ok('{"intent": "email.send", "confidence": 0.95}'))
        secondary = _provider(ProviderType.OLLAMA, return_value=_ok('{"intent": "task.list"}'))
        classifier = FallbackIntentClassifier([
            ProviderIntentStrategy(primary, timeout=1.0),
            ProviderIntentStrategy(secondary, timeout=1.0),
        ])

        result = await classifier.classify("mail the report to anna@example.com")

        assert result.intent == IntentLabel.EMAIL_SEND
        assert result.provider == "openai"
        secondary.generate_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_through_to_secondary(self):
        primary = _provider(return_value=_ok('{"intent": "not-a-label"}'))
        secondary = _provider(ProviderType.OLLAMA, return_value=_ok('```json\n{"intent": "task.list"}\n```'))
        classifier = FallbackIntentClassifier([
            ProviderIntentStrategy(primary, timeout=1.0),
            ProviderIntentStrategy(secondary, timeout=1.0),
        ])

        result = await classifier.classify("show my tasks")

        assert result.intent == IntentLabel.TASK_LIST
        assert result.provider == "ollama"

    @pytest.mark.asyncio
    async def test_unconfigured_providers_are_skipped(self):
        primary = _provider(configured=False)
        classifier = FallbackIntentClassifier([ProviderIntentStrategy(primary, timeout=1.0)])

        result = await classifier.classify("what is 2+2")

        primary.generate_json.assert_not_called()
        assert result.intent == IntentLabel.MATH_CALCULATE
        assert result.provider == "keywords"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [
        "remind me to call Anna tomorrow at 9",
        "book a 30-minute team meeting Friday at 14:30 in meeting room B",
        "",
        "¿qué tal?",
        "12 * (3 + 4)",
        "lorem ipsum dolor sit amet",
    ])
    async def test_total_when_every_provider_fails(self, text):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        primary = _provider(side_effect=RuntimeError("boom"))
        secondary = _provider(ProviderType.OLLAMA)
        secondary.generate_json = slow
        classifier = FallbackIntentClassifier([
            ProviderIntentStrategy(primary, timeout=1.0),
            ProviderIntentStrategy(secondary, timeout=0.05),
        ])

        result = await classifier.classify(text)

        assert result.intent in set(IntentLabel)
        assert result.provider == "keywords"

    @pytest.mark.asyncio
    async def test_non_string_input_is_unknown(self):
        classifier = FallbackIntentClassifier([])

        result = await classifier.classify(None)

        assert result.intent == IntentLabel.UNKNOWN
        assert result.confidence is None

    @pytest.mark.asyncio
    async def test_strategy_bug_does_not_escape(self):
        class Broken(IntentStrategy):
            name = "broken"

            async def classify(self, text):
                raise KeyError("oops")

        classifier = FallbackIntentClassifier([Broken()])

        result = await classifier.classify("show my tasks")

        assert result.intent == IntentLabel.TASK_LIST


class TestBuildDefaultClassifier:

    def test_chain_order(self):
        config = Settings(OPENAI_API_KEY="", OLLAMA_HOST="http://localhost:11434")

        classifier = build_default_classifier(config=config, openai_client=MagicMock())

        names = [strategy.name for strategy in classifier.strategies]
        assert names == ["openai", "ollama", "keywords"]
        assert all(strategy.is_available for strategy in classifier.strategies)

    def test_no_credentials_means_keywords_only(self):
        config = Settings(OPENAI_API_KEY="", OLLAMA_HOST="")

        classifier = build_default_classifier(config=config)

        available = [strategy.name for strategy in classifier.strategies if strategy.is_available]
        assert available == ["keywords"]
