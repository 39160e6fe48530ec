"""
Parameter Normalizer - one entry point per intent.

Each method reads the raw parameter bag and the original sentence and
returns a typed slot model, or None when a required slot is missing.
Nothing here raises for missing input; handlers turn None into a
clarification message.

Candidate order for every slot: the structured field, its synonyms,
then extraction from the sentence.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from taskpilot.core.config import settings
from taskpilot.core.timeutils import local_zone
from taskpilot.services.slots.dates import resolve_date_time
from taskpilot.services.slots.email_template import compose_email_template
from taskpilot.services.slots.math_eval import extract_math_expression
from taskpilot.services.slots.models import (
    CalendarEventSlots,
    EmailSlots,
    GroceryItem,
    ReminderSlots,
    ReservationRequest,
    TaskSlots,
)
from taskpilot.services.slots.options import resolve_grocery_list, wants_calendar_event
from taskpilot.services.slots.recipients import resolve_email_routing
from taskpilot.services.slots.reservation import build_reservation_request
from taskpilot.services.slots.text import (
    clean_reminder_description,
    clean_task_description,
    ensure_number,
    ensure_string,
    first_present,
    pick,
)

# Calendar events without any time are placed this far ahead
CALENDAR_DEFAULT_LEAD = timedelta(minutes=5)


class ParameterNormalizer:
    """
    Reads typed slots out of (parameters, text).

    The clock and zone are injectable so tests can pin "now".
    """

    def __init__(
        self,
        zone: Optional[ZoneInfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.zone = zone or local_zone()
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            current = self._clock()
            return current if current.tzinfo else current.replace(tzinfo=self.zone)
        return datetime.now(self.zone)

    # -----------------------------------------------------------------------
    # TASKS
    # -----------------------------------------------------------------------

    def task(self, parameters: dict, text: str) -> Optional[TaskSlots]:
        direct = first_present(pick(parameters, "text", "title", "description", "task"))
        cleaned = clean_task_description(direct) if direct else None
        resolved = cleaned or clean_task_description(text) or direct
        if not resolved:
            return None
        status = "done" if ensure_string(parameters.get("status")) == "done" else "todo"
        return TaskSlots(text=resolved, status=status)

    # -----------------------------------------------------------------------
    # REMINDERS
    # -----------------------------------------------------------------------

    def reminder_description(self, parameters: dict, text: str) -> Optional[str]:
        for key in ("description", "summary", "text", "title", "name"):
            candidate = ensure_string(parameters.get(key))
            if candidate:
                cleaned = clean_reminder_description(candidate)
                if cleaned:
                    return cleaned
        return clean_reminder_description(text)

    def reminder_time(self, parameters: dict, text: str) -> Optional[datetime]:
        return resolve_date_time(parameters, text, now=self.now(), zone=self.zone)

    def reminder(self, parameters: dict, text: str) -> Tuple[Optional[str], Optional[datetime], Optional[ReminderSlots]]:
        """
        Returns (description, remind_at, slots).

        slots is None when either part is missing; the first two tell the
        handler which one to ask about.
        """
        description = self.reminder_description(parameters, text)
        remind_at = self.reminder_time(parameters, text)
        if not description or remind_at is None:
            return description, remind_at, None
        slots = ReminderSlots(
            description=description,
            remind_at=remind_at,
            add_to_calendar=wants_calendar_event(parameters, text),
        )
        return description, remind_at, slots

    # -----------------------------------------------------------------------
    # CALENDAR
    # -----------------------------------------------------------------------

    def calendar_event(self, parameters: dict, text: str) -> CalendarEventSlots:
        """Calendar events always resolve: title and time have defaults."""
        title = first_present(pick(parameters, "title", "summary", "subject")) or f"{settings.APP_NAME} appointment"
        start = resolve_date_time(parameters, text, now=self.now(), zone=self.zone)
        if start is None:
            start = self.now() + CALENDAR_DEFAULT_LEAD
        return CalendarEventSlots(
            title=title,
            start=start,
            description=first_present(parameters.get("description"), text),
            location=ensure_string(parameters.get("location")),
        )

    # -----------------------------------------------------------------------
    # ROOMS
    # -----------------------------------------------------------------------

    def reservation(self, parameters: dict, text: str) -> Optional[ReservationRequest]:
        return build_reservation_request(parameters, text, now=self.now(), zone=self.zone)

    # -----------------------------------------------------------------------
    # E-MAIL
    # -----------------------------------------------------------------------

    def email(self, parameters: dict, text: str) -> EmailSlots:
        routing = resolve_email_routing(parameters, text)
        template = compose_email_template(parameters, text, routing)
        return EmailSlots(routing=routing, template=template)

    # -----------------------------------------------------------------------
    # MATH / GROCERIES
    # -----------------------------------------------------------------------

    def math(self, parameters: dict, text: str) -> Tuple[Optional[str], Optional[float]]:
        """Returns (expression, explicit precision)."""
        expression = first_present(parameters.get("expression")) or extract_math_expression(text)
        return expression, ensure_number(parameters.get("precision"))

    def groceries(self, parameters: dict, text: str) -> List[GroceryItem]:
        return resolve_grocery_list(parameters, text)
