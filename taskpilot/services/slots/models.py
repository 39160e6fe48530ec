"""
Slot models - typed values the normalizer hands to the handlers.

The classifier's parameter bag is an untyped dict. Each intent reads the
slots it needs out of it into one of these models, so the handlers never
touch raw keys. Models serialize to the same camelCase shape the
classifier transport uses (by_alias=True).
"""

from datetime import datetime
from typing import List, Optional, Dict

from pydantic import BaseModel, ConfigDict, Field


class SlotModel(BaseModel):
    """Base: accepts both snake_case and camelCase on input."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# SINGLE SLOTS
# ---------------------------------------------------------------------------

class EmailRouting(SlotModel):
    """Recipients of a message. 'to' is None when nothing was found."""
    to: Optional[str] = None
    cc: List[str] = Field(default_factory=list)
    bcc: List[str] = Field(default_factory=list)


class MathExpression(SlotModel):
    """An expression before and after sanitization."""
    original: str
    sanitized: str


class MathEvaluation(SlotModel):
    """Outcome of evaluating a MathExpression."""
    original_expression: str = Field(alias="originalExpression")
    sanitized_expression: str = Field(alias="sanitizedExpression")
    result: float
    formatted: str
    precision: int


class GroceryItem(SlotModel):
    name: str
    quantity: str = "1"


class EmailTemplate(SlotModel):
    """A drafted e-mail, split into parts so clients can edit each one."""
    subject: str
    body: str
    greeting: str
    closing: str
    signature: str
    tone: str
    summary: str
    key_points: List[str] = Field(default_factory=list, alias="keyPoints")
    placeholders: Dict[str, str] = Field(default_factory=dict)


class ReservationRequest(SlotModel):
    """
    A room booking window plus who and what it is for.

    start/end are aware datetimes; end > start once normalized.
    """
    start: datetime
    end: datetime
    title: str
    description: Optional[str] = None
    preferred_room: Optional[str] = Field(default=None, alias="preferredRoom")
    attendees: List[str] = Field(default_factory=list)
    capacity: Optional[int] = None
    notes: Optional[str] = None
    duration_minutes: int = Field(default=60, alias="durationMinutes")


# ---------------------------------------------------------------------------
# PER-INTENT SLOTS
# ---------------------------------------------------------------------------

class TaskSlots(SlotModel):
    text: str
    status: str = "todo"


class ReminderSlots(SlotModel):
    description: str
    remind_at: datetime = Field(alias="dateTime")
    add_to_calendar: bool = Field(default=False, alias="calendar")


class CalendarEventSlots(SlotModel):
    title: str
    start: datetime = Field(alias="dateTime")
    description: Optional[str] = None
    location: Optional[str] = None


class EmailSlots(SlotModel):
    routing: EmailRouting
    template: EmailTemplate
