"""
Monitoring Module - structured logging for classification and routing.

Usage:
    from taskpilot.ai.monitoring import ai_logger

    ai_logger.log_intent(request_id, text, "task.create", 0.9, "openai")
"""

from taskpilot.ai.monitoring.logger import AILogger, ai_logger

__all__ = [
    "AILogger",
    "ai_logger",
]
