"""
AI Providers Module - transports behind the intent classifier.

- OpenAI (primary, hosted)
- Ollama (secondary, locally hosted)

Each provider has the same interface, making them interchangeable:
    response = await provider.generate_json(prompt, system_prompt=...)

The deterministic keyword fallback is not a provider; it lives in
taskpilot.ai.intent.keyword_rules and needs no transport.
"""

from taskpilot.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from taskpilot.ai.providers.openai_provider import OpenAIProvider
from taskpilot.ai.providers.ollama_provider import OllamaProvider

__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "OpenAIProvider",
    "OllamaProvider",
]
