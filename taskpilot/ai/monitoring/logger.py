"""
AI Logger - Structured logging for the classification pipeline.

Each entry is a JSON object on one line, so log shippers can parse it:
- classification_attempt: one provider call (success, latency, error)
- intent_classified: the final label for a request
- action_failed: a downstream action error that was folded into a message
- ai_error: anything else worth tracing
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from taskpilot.ai.providers.base import AIResponse

# Configure the AI logger
logger = logging.getLogger("taskpilot.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _preview(text: str, limit: int = 50) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class AILogger:
    """
    Structured logger for classifier and router events.

    Usage:
        ai_logger.log_attempt(request_id="abc123", strategy="openai", response=ai_response)
        ai_logger.log_intent(request_id="abc123", original_text=text,
                             intent="task.create", confidence=0.9, provider="openai")
    """

    def __init__(self):
        self._logger = logger

    def log_attempt(
        self,
        request_id: str,
        strategy: str,
        response: Optional[AIResponse] = None,
        success: bool = True,
        error: Optional[str] = None,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Log one provider attempt in the fallback chain.

        Can be called with an AIResponse or with individual values (timeouts
        and validation failures have no response object).
        """
        if response is not None:
            success = success and response.success
            error = error or response.error
            latency_ms = response.latency_ms or latency_ms

        log_data: Dict[str, Any] = {
            "event": "classification_attempt",
            "request_id": request_id,
            "strategy": strategy,
            "success": success,
            "latency_ms": round(latency_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if response is not None:
            log_data["model"] = response.model
            log_data["tokens"] = response.usage.total_tokens
        if error:
            log_data["error"] = error

        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"Classification Attempt: {json.dumps(log_data)}")

    def log_intent(
        self,
        request_id: str,
        original_text: str,
        intent: str,
        confidence: Optional[float],
        provider: str,
        processing_time_ms: float = 0.0,
    ) -> None:
        """Log the final classification for a request."""
        log_data = {
            "event": "intent_classified",
            "request_id": request_id,
            "intent": intent,
            "confidence": round(confidence, 3) if confidence is not None else None,
            "provider": provider,
            "processing_time_ms": round(processing_time_ms, 2),
            "original_text": _preview(original_text),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        self._logger.info(f"Intent Classified: {json.dumps(log_data)}")

    def log_action_failure(
        self,
        request_id: str,
        action: str,
        error: str,
        intent: Optional[str] = None,
    ) -> None:
        """Log a downstream action failure that did not abort the request."""
        log_data = {
            "event": "action_failed",
            "request_id": request_id,
            "action": action,
            "intent": intent,
            "error": error,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        self._logger.warning(f"Action Failed: {json.dumps(log_data)}")

    def log_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an error in the pipeline.

        Args:
            request_id: Request identifier
            error: Error message
            stage: Where the error occurred (classification, normalization, routing)
            metadata: Additional context
        """
        log_data: Dict[str, Any] = {
            "event": "ai_error",
            "request_id": request_id,
            "error": error,
            "stage": stage,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.error(f"AI Error: {json.dumps(log_data, default=str)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
# Stateless apart from the stdlib logger, so sharing it is safe.
ai_logger = AILogger()
