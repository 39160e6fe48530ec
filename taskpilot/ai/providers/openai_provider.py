"""
OpenAI Provider - primary intent classification transport.

Uses the chat completions API in JSON mode with temperature 0 so that the
same sentence classifies the same way on every call.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import time
import logging
from typing import Optional

from openai import AsyncOpenAI

from taskpilot.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("taskpilot.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT provider implementation.

    The AsyncOpenAI client is created once in the constructor, or passed in
    (tests inject a mock). Without an API key the provider reports itself
    as not configured and every call returns an error response.

    Usage:
        provider = OpenAIProvider(api_key=settings.OPENAI_API_KEY)
        response = await provider.generate_json(
            prompt="remind me to call Anna tomorrow",
            system_prompt=INTENT_SYSTEM_PROMPT,
        )
    """

    provider_type = ProviderType.OPENAI

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the OpenAI provider.

        Args:
            model: Model name used for classification
            api_key: API key; ignored when a client is injected
            client: Pre-built AsyncOpenAI client
        """
        self.model = model
        self.api_key = api_key

        if client is not None:
            self._client = client
        elif self.api_key:
            self._client = AsyncOpenAI(api_key=self.api_key)
            logger.info(f"OpenAI provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.info("OpenAI API key not configured - provider unavailable")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response using OpenAI's JSON mode.

        Args:
            prompt: The user's message
            system_prompt: System prompt (label set and JSON shape)

        Returns:
            AIResponse with JSON content string
        """
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="OpenAI API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": prompt})

            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0,
                response_format={"type": "json_object"},
            )

            latency_ms = self._measure_latency(start_time)

            content = ""
            if response.choices:
                content = response.choices[0].message.content or ""
            if not content.strip():
                return self._create_error_response(
                    error="Empty response from OpenAI",
                    model=self.model,
                    latency_ms=latency_ms
                )

            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
                completion_tokens=response.usage.completion_tokens if response.usage else 0,
            )

            logger.info(f"OpenAI JSON request completed in {latency_ms:.0f}ms")

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
                raw_response=response,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )
