"""
Slots Module - Parameter Normalizer.

Turns the classifier's raw parameter bag plus the original sentence into
typed slots. Missing slots come back as None, never as exceptions (the
arithmetic evaluator is the one exception: it raises MathEvaluationError).
"""

from taskpilot.services.slots.models import (
    CalendarEventSlots,
    EmailRouting,
    EmailSlots,
    EmailTemplate,
    GroceryItem,
    MathEvaluation,
    MathExpression,
    ReminderSlots,
    ReservationRequest,
    TaskSlots,
)
from taskpilot.services.slots.normalizer import ParameterNormalizer
from taskpilot.services.slots.math_eval import evaluate

__all__ = [
    "CalendarEventSlots",
    "EmailRouting",
    "EmailSlots",
    "EmailTemplate",
    "GroceryItem",
    "MathEvaluation",
    "MathExpression",
    "ReminderSlots",
    "ReservationRequest",
    "TaskSlots",
    "ParameterNormalizer",
    "evaluate",
]
