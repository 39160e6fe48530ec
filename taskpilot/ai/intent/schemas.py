"""
Intent Schemas - Pydantic models for classified intents.

IntentResult is produced once per request by the classifier and consumed
by the normalizer and the action router. It is frozen: nothing downstream
mutates the parameter bag it received.

Wire shape (shared with the classifier transports):
    {"intent": "reminder.create", "confidence": 0.74,
     "parameters": {"description": "Call the client", "dateTime": "2025-11-07T09:00"}}
"""

from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field


class IntentLabel(str, Enum):
    """
    The fixed label set. Every classification ends in exactly one of these.

    TASK_CREATE / TASK_LIST: To-do items
    REMINDER_CREATE / REMINDER_LIST: Timed reminders
    CALENDAR_CREATE / MEETING_SCHEDULE: Calendar events
    ROOM_RESERVE: Book a meeting room (conflict resolver)
    EMAIL_SEND / EMAIL_WRITE: Send a message, or only draft one
    GROCERY_LIST: Produce a shopping list
    FILE_SUMMARIZE: Summarize an uploaded document
    MATH_CALCULATE: Evaluate an arithmetic expression
    UNKNOWN: Nothing matched
    """
    TASK_CREATE = "task.create"
    TASK_LIST = "task.list"
    REMINDER_CREATE = "reminder.create"
    REMINDER_LIST = "reminder.list"
    CALENDAR_CREATE = "calendar.create"
    MEETING_SCHEDULE = "meeting.schedule"
    ROOM_RESERVE = "room.reserve"
    EMAIL_SEND = "email.send"
    EMAIL_WRITE = "email.write"
    GROCERY_LIST = "grocery.list"
    FILE_SUMMARIZE = "file.summarize"
    MATH_CALCULATE = "math.calculate"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Optional["IntentLabel"]:
        """Map a raw label onto the whitelist; None when unrecognized."""
        if not isinstance(value, str):
            return None
        candidate = value.strip().lower()
        for label in cls:
            if label.value == candidate:
                return label
        return None


INTENT_VALUES: List[str] = [label.value for label in IntentLabel]


class IntentResult(BaseModel):
    """
    Result of intent classification.

    Attributes:
        intent: One label from IntentLabel
        confidence: 0-1, None when the provider gave no usable number
        parameters: Raw parameter bag (string keys, any values)
        provider: Which strategy produced the result ("openai", "ollama", "keywords")
    """
    model_config = ConfigDict(frozen=True)

    intent: IntentLabel
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    provider: str = "keywords"

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the transport JSON shape."""
        data: Dict[str, Any] = {
            "intent": self.intent.value,
            "parameters": dict(self.parameters),
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data
