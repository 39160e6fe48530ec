"""
Error taxonomy for the assistant pipeline.

Every failure path in taskpilot degrades to a structured, user-readable
response. These exceptions mark where each kind of failure is caught:

- ProviderError: swallowed by the classifier fallback chain
- SlotValidationError: turned into a clarification message by a handler
- RoomConflictError: turned into a "no availability" result with alternatives
- DownstreamActionError: appended to the primary action's message
- InvalidRecurrenceRuleError: raised to callers attaching a bad rule
- NotFoundError: raised to callers referencing an unknown task or rule
"""

from typing import Any, List, Optional


class TaskpilotError(Exception):
    """Base exception for all taskpilot errors."""
    pass


class ProviderError(TaskpilotError):
    """A classifier provider failed (transport, timeout, status, bad JSON)."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class SlotValidationError(TaskpilotError):
    """A required slot could not be resolved from the input."""

    def __init__(self, message: str, slot: Optional[str] = None):
        super().__init__(message)
        self.slot = slot


class MathEvaluationError(SlotValidationError):
    """An arithmetic expression failed sanitization or evaluation."""

    def __init__(self, message: str):
        super().__init__(message, slot="expression")


class RoomConflictError(TaskpilotError):
    """No meeting room satisfies the capacity and time constraints."""

    def __init__(self, message: str, alternatives: Optional[List[Any]] = None):
        super().__init__(message)
        self.alternatives = alternatives or []


class DownstreamActionError(TaskpilotError):
    """A domain action (calendar, mail, ...) failed."""

    def __init__(self, message: str, action: Optional[str] = None):
        super().__init__(message)
        self.action = action


class InvalidRecurrenceRuleError(TaskpilotError):
    """The recurrence rule yields no next occurrence."""
    pass


class NotFoundError(TaskpilotError):
    """A record referenced by id does not exist."""
    pass
