"""
Prompts Module - Centralized prompt templates for AI interactions.
"""

from taskpilot.ai.prompts.intent_prompts import INTENT_SYSTEM_PROMPT

__all__ = [
    "INTENT_SYSTEM_PROMPT",
]
