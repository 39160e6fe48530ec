"""
Ollama Provider - secondary, locally hosted classification transport.

Talks to Ollama's /api/chat endpoint over httpx. The model is asked for
JSON (format="json"), but the reply shape differs between Ollama versions:

    {"message": {"content": "<json string>"}}
    {"message": {"content": [{"type": "text", "text": "<json>"}]}}
    {"response": "<json string>"}

All three are accepted.

API Documentation: https://github.com/ollama/ollama/blob/main/docs/api.md
"""

import json
import time
import logging
from typing import Optional, Any, Dict

import httpx

from taskpilot.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("taskpilot.ai.ollama")


class OllamaProvider(AIProvider):
    """
    Ollama chat provider implementation.

    Usage:
        provider = OllamaProvider(host="http://localhost:11434", timeout=6.0)
        response = await provider.generate_json(text, system_prompt=prompt)

    A pre-built httpx.AsyncClient may be injected (tests use one backed by
    httpx.MockTransport); otherwise a short-lived client is opened per call.
    """

    provider_type = ProviderType.OLLAMA

    def __init__(
        self,
        host: Optional[str] = None,
        model: str = "llama3",
        timeout: float = 6.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.host = (host or "").rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

        if self.host:
            logger.info(f"Ollama provider initialized: {self.host} model={self.model}")
        else:
            logger.info("Ollama host not configured - provider unavailable")

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    @property
    def chat_url(self) -> str:
        return f"{self.host}/api/chat"

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response using a local Ollama model.

        Returns:
            AIResponse with the model's content string
        """
        start_time = time.time()

        if not self.is_configured:
            return self._create_error_response(
                error="Ollama host not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "stream": False,
            "format": "json",
            "options": {"temperature": 0},
            "messages": messages,
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.chat_url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.chat_url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException:
            return self._create_error_response(
                error=f"Ollama request timed out after {self.timeout:.1f}s",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )
        except httpx.RequestError as e:
            return self._create_error_response(
                error=f"Network error: {e}",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        latency_ms = self._measure_latency(start_time)

        if response.status_code >= 400:
            return self._create_error_response(
                error=f"Ollama request failed ({response.status_code}): {response.text[:200]}",
                model=self.model,
                latency_ms=latency_ms
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return self._create_error_response(
                error="Ollama response is not valid JSON",
                model=self.model,
                latency_ms=latency_ms
            )

        content = self._extract_content(data)
        if not content:
            return self._create_error_response(
                error="Empty response from Ollama",
                model=self.model,
                latency_ms=latency_ms
            )

        usage = TokenUsage(
            prompt_tokens=int(data.get("prompt_eval_count") or 0) if isinstance(data, dict) else 0,
            completion_tokens=int(data.get("eval_count") or 0) if isinstance(data, dict) else 0,
        )

        logger.info(f"Ollama JSON request completed in {latency_ms:.0f}ms")

        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=usage,
            latency_ms=latency_ms,
            success=True,
            raw_response=data,
        )

    @staticmethod
    def _extract_content(data: Any) -> Optional[str]:
        """Pull the model's text out of any of the known reply shapes."""
        if not isinstance(data, dict):
            return None

        message: Dict[str, Any] = data.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None

        if isinstance(content, str):
            return content

        if isinstance(content, list):
            parts = [
                part.get("text") for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            return "\n".join(parts) if parts else None

        if isinstance(data.get("response"), str):
            return data["response"]

        return None
