"""
Intent Result Types - Shared data structures for intent processing.

HandlerResult is what each intent handler returns to AssistantService.
AssistantResponse is the transport-agnostic object the service hands to
its callers (HTTP router, tests, a CLI):

    {"intent": "room.reserve", "parameters": {...},
     "message": "Room Meeting room B reserved.", "result": {...},
     "confidence": 0.92}

Kept in a separate module so handlers and the service can both import it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class HandlerResultType(str, Enum):
    """How a handler call ended."""
    COMPLETED = "completed"
    CLARIFICATION = "clarification"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class HandlerResult:
    """
    Result of handling one classified intent.

    Attributes:
        success: Whether the primary action went through
        result_type: COMPLETED, CLARIFICATION, NOT_FOUND or ERROR
        message: Human-readable message for the user
        result: JSON-ready payload (created task, reservation, alternatives, ...)
        parameters: Normalized slots in wire shape; None keeps the raw bag
        processing_time_ms: Time spent since the request started
    """
    success: bool
    result_type: HandlerResultType
    message: str = ""
    result: Optional[Dict[str, Any]] = None
    parameters: Optional[Dict[str, Any]] = None
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "result_type": self.result_type.value,
            "message": self.message,
            "result": self.result,
            "parameters": self.parameters,
            "processing_time_ms": self.processing_time_ms,
        }


class AssistantResponse(BaseModel):
    """
    The single response object of the pipeline.

    Example:
    {
        "intent": "math.calculate",
        "parameters": {"expression": "2+2"},
        "message": "Result: 4",
        "result": {"formatted": "4", "result": 4.0, ...},
        "confidence": 0.4
    }
    """
    intent: str = Field(description="Classified intent label")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Normalized or raw parameters")
    message: Optional[str] = Field(default=None, description="Human-readable response message")
    result: Optional[Dict[str, Any]] = Field(default=None, description="Action payload")
    confidence: Optional[float] = Field(default=None, description="Classifier confidence 0-1")
