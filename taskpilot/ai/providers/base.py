"""
Base AI Provider - Abstract interface for the classifier's LLM transports.

This module defines the contract that every remote provider follows, so
the intent classifier can treat OpenAI and a locally hosted Ollama model
as interchangeable strategies.

Design Pattern: Strategy Pattern
================================
The base class defines the interface, and each provider implements it.
The fallback chain iterates over providers without knowing which is which.

Example:
    provider = OpenAIProvider(api_key="sk-...")
    response = await provider.generate_json(text, system_prompt=prompt)
    if response.success:
        print(response.content)
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Any, Dict
from enum import Enum
import logging

logger = logging.getLogger("taskpilot.ai")


class ProviderType(str, Enum):
    """Enum of supported classifier providers."""
    OPENAI = "openai"
    OLLAMA = "ollama"


@dataclass
class TokenUsage:
    """
    Token usage statistics for an AI request.

    Ollama reports evaluation counts instead of tokens; they are mapped
    onto the same fields.
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Standardized response from any provider.

    Attributes:
        content: The generated text (expected to be JSON for classification)
        provider: Which provider generated this response
        model: The specific model used
        usage: Token usage statistics
        latency_ms: How long the request took
        success: Whether the request succeeded
        error: Error message if failed
        raw_response: Original provider response (for debugging)
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    raw_response: Optional[Any] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


class AIProvider(ABC):
    """
    Abstract base class for classifier transports.

    Responsibilities:
    - Send a user message plus a system instruction
    - Ask the model for a JSON object
    - Report failures inside AIResponse instead of raising

    Usage:
        class MyProvider(AIProvider):
            provider_type = ProviderType.OPENAI

            @property
            def is_configured(self) -> bool:
                return True

            async def generate_json(self, prompt, system_prompt=None, **kwargs):
                ...
    """

    provider_type: ProviderType
    model: str

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials/host are present and calls can be attempted."""
        pass

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response from the model.

        Args:
            prompt: The user's message
            system_prompt: System instructions, including the JSON shape
            **kwargs: Provider-specific options

        Returns:
            AIResponse with the raw content string (may still be wrapped
            in code fences; callers strip them)

        Raises:
            This method should NOT raise exceptions.
            Errors are captured in AIResponse.error
        """
        pass

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def _create_error_response(
        self,
        error: str,
        model: str,
        latency_ms: float = 0.0
    ) -> AIResponse:
        """Create a standardized error response."""
        logger.warning(f"AI Provider Error [{self.provider_type.value}]: {error}")
        return AIResponse(
            content="",
            provider=self.provider_type,
            model=model,
            latency_ms=latency_ms,
            success=False,
            error=error,
        )
