"""
Intent Classifier - ordered fallback chain over interchangeable strategies.

Design Pattern: Strategy + Composite
====================================
Each way of classifying text is an IntentStrategy:
- ProviderIntentStrategy wraps any AIProvider (OpenAI, Ollama)
- KeywordIntentStrategy runs the deterministic keyword rules

FallbackIntentClassifier holds an ordered list of strategies and returns
the first success. The keyword strategy is always last and cannot fail, so
classify() never raises.

Usage:
    classifier = build_default_classifier()
    result = await classifier.classify("remind me to call Anna tomorrow at 9")
    result.intent  # IntentLabel.REMINDER_CREATE
"""

import asyncio
import json
import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from taskpilot.ai.intent.keyword_rules import classify_by_keywords, KEYWORD_PROVIDER
from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.ai.monitoring import ai_logger
from taskpilot.ai.prompts import INTENT_SYSTEM_PROMPT
from taskpilot.ai.providers import AIProvider, OpenAIProvider, OllamaProvider
from taskpilot.core.config import Settings, settings as default_settings
from taskpilot.core.errors import ProviderError

logger = logging.getLogger("taskpilot.ai.intent")


# ---------------------------------------------------------------------------
# RESPONSE PARSING
# ---------------------------------------------------------------------------

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

# Remote models use a handful of alternative parameter names
PARAMETER_SYNONYMS: Dict[str, str] = {
    "text": "description",
    "datetime": "dateTime",
    "remindAt": "dateTime",
    "day": "date",
}


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json ... ``` block, if any."""
    return _FENCE_PATTERN.sub("", content.strip()).strip()


def clamp_confidence(value: Any) -> Optional[float]:
    """Clamp a numeric confidence into [0, 1]; anything non-numeric is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or value != value:
        return None
    return max(0.0, min(1.0, float(value)))


def fold_parameter_synonyms(parameters: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rename synonym keys to their canonical names.

    An existing canonical key is never overwritten by its synonym.
    """
    folded: Dict[str, Any] = {}
    for key, value in parameters.items():
        canonical = PARAMETER_SYNONYMS.get(key, key)
        if canonical in folded and canonical != key:
            continue
        folded[canonical] = value
    return folded


def parse_intent_payload(content: str, provider: str) -> IntentResult:
    """
    Decode and validate a provider's JSON answer.

    Raises:
        ProviderError: Empty content, invalid JSON, or a label outside the set
    """
    cleaned = strip_code_fences(content or "")
    if not cleaned:
        raise ProviderError("Empty response", provider=provider)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Invalid JSON: {e}", provider=provider)

    if not isinstance(payload, dict):
        raise ProviderError("Response is not a JSON object", provider=provider)

    label = IntentLabel.parse(payload.get("intent"))
    if label is None:
        raise ProviderError(
            f"Unrecognized intent: {payload.get('intent')!r}", provider=provider
        )

    parameters = payload.get("parameters")
    if not isinstance(parameters, dict):
        parameters = {}

    return IntentResult(
        intent=label,
        confidence=clamp_confidence(payload.get("confidence")),
        parameters=fold_parameter_synonyms(parameters),
        provider=provider,
    )


# ---------------------------------------------------------------------------
# STRATEGIES
# ---------------------------------------------------------------------------

class IntentStrategy(ABC):
    """One way of turning text into an IntentResult."""

    name: str = "strategy"

    @property
    def is_available(self) -> bool:
        """False when the strategy should be skipped (e.g. no API key)."""
        return True

    @abstractmethod
    async def classify(self, text: str) -> IntentResult:
        """
        Classify text.

        Raises:
            ProviderError: Any failure; the chain moves on to the next strategy
        """
        pass


class ProviderIntentStrategy(IntentStrategy):
    """
    Classify through a remote AIProvider.

    The provider call is bounded by asyncio.wait_for. A timed out call is
    cancelled and not retried.
    """

    def __init__(
        self,
        provider: AIProvider,
        timeout: float,
        system_prompt: str = INTENT_SYSTEM_PROMPT,
    ):
        self.provider = provider
        self.timeout = timeout
        self.system_prompt = system_prompt
        self.name = provider.provider_type.value

    @property
    def is_available(self) -> bool:
        return self.provider.is_configured

    async def classify(self, text: str) -> IntentResult:
        try:
            response = await asyncio.wait_for(
                self.provider.generate_json(text, system_prompt=self.system_prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ProviderError(
                f"Timed out after {self.timeout:.1f}s", provider=self.name
            )

        if not response.success:
            raise ProviderError(response.error or "Provider call failed", provider=self.name)

        return parse_intent_payload(response.content, provider=self.name)


class KeywordIntentStrategy(IntentStrategy):
    """Deterministic keyword rules. Never fails."""

    name = KEYWORD_PROVIDER

    async def classify(self, text: str) -> IntentResult:
        return classify_by_keywords(text)


# ---------------------------------------------------------------------------
# FALLBACK CHAIN
# ---------------------------------------------------------------------------

class FallbackIntentClassifier:
    """
    Try each strategy in order; first success wins.

    A KeywordIntentStrategy is appended when the given list does not end
    with one, so the chain is always total.
    """

    def __init__(self, strategies: Sequence[IntentStrategy]):
        chain: List[IntentStrategy] = list(strategies)
        if not chain or not isinstance(chain[-1], KeywordIntentStrategy):
            chain.append(KeywordIntentStrategy())
        self.strategies = chain

    async def classify(self, text: str, request_id: Optional[str] = None) -> IntentResult:
        """
        Classify text into one of the fixed labels.

        Never raises: provider errors, timeouts and unexpected exceptions
        all fall through to the next strategy.
        """
        request_id = request_id or str(uuid.uuid4())[:8]
        text = text if isinstance(text, str) else ""
        start_time = time.time()

        for strategy in self.strategies:
            if not strategy.is_available:
                logger.debug(f"[{request_id}] Skipping {strategy.name}: not configured")
                continue

            attempt_start = time.time()
            try:
                result = await strategy.classify(text)
            except ProviderError as e:
                ai_logger.log_attempt(
                    request_id=request_id,
                    strategy=strategy.name,
                    success=False,
                    error=str(e),
                    latency_ms=(time.time() - attempt_start) * 1000,
                )
                continue
            except Exception as e:
                ai_logger.log_error(
                    request_id=request_id,
                    error=str(e),
                    stage="classification",
                    metadata={"strategy": strategy.name},
                )
                continue

            ai_logger.log_attempt(
                request_id=request_id,
                strategy=strategy.name,
                success=True,
                latency_ms=(time.time() - attempt_start) * 1000,
            )
            ai_logger.log_intent(
                request_id=request_id,
                original_text=text,
                intent=result.intent.value,
                confidence=result.confidence,
                provider=result.provider,
                processing_time_ms=(time.time() - start_time) * 1000,
            )
            return result

        # Only reachable if the keyword strategy was made unavailable by a subclass
        return IntentResult(intent=IntentLabel.UNKNOWN, provider=KEYWORD_PROVIDER)


def build_default_classifier(
    config: Optional[Settings] = None,
    openai_client: Optional[Any] = None,
    ollama_client: Optional[Any] = None,
) -> FallbackIntentClassifier:
    """
    Build the OpenAI -> Ollama -> keywords chain from settings.

    Clients can be injected (tests pass mocks); otherwise each provider
    builds its own from the configured credentials.
    """
    config = config or default_settings

    openai_provider = OpenAIProvider(
        model=config.OPENAI_INTENT_MODEL,
        api_key=config.OPENAI_API_KEY or None,
        client=openai_client,
    )
    ollama_provider = OllamaProvider(
        host=config.OLLAMA_HOST or None,
        model=config.OLLAMA_INTENT_MODEL,
        timeout=config.OLLAMA_TIMEOUT_SECONDS,
        client=ollama_client,
    )

    return FallbackIntentClassifier([
        ProviderIntentStrategy(openai_provider, timeout=config.OPENAI_TIMEOUT_SECONDS),
        ProviderIntentStrategy(ollama_provider, timeout=config.OLLAMA_TIMEOUT_SECONDS),
        KeywordIntentStrategy(),
    ])
