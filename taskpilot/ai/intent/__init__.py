"""
Intent Module - turns free-form text into one of a fixed set of labels.

Example Flow:
============
User says: "remind me to call Anna tomorrow at 9"

The classifier returns:
{
    "intent": "reminder.create",
    "confidence": 0.82,
    "parameters": {"description": "call Anna", "dateTime": "2025-11-07T09:00"}
}

Schemas are imported first: the prompt module reads the label set from them.
"""

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult, INTENT_VALUES
from taskpilot.ai.intent.keyword_rules import classify_by_keywords
from taskpilot.ai.intent.classifier import (
    IntentStrategy,
    ProviderIntentStrategy,
    KeywordIntentStrategy,
    FallbackIntentClassifier,
    build_default_classifier,
)

__all__ = [
    "IntentLabel",
    "IntentResult",
    "INTENT_VALUES",
    "classify_by_keywords",
    "IntentStrategy",
    "ProviderIntentStrategy",
    "KeywordIntentStrategy",
    "FallbackIntentClassifier",
    "build_default_classifier",
]
