"""
Date and time extraction.

Values come from two places:
- Structured parameters from the classifier ("2025-11-07T09:00", "07/11", "14:30")
- The original text ("tomorrow at 9", "Friday at 14:30", "12/03/26 3pm")

Rules:
- today / tomorrow / (the) day after tomorrow are relative to local now
- A weekday name means the next such day strictly after today
- dd/mm[/yyyy] and dd-mm[-yy]; a two-digit year is in the current century;
  a date without a year that already passed rolls forward one year
- HH:MM, HH.MM, 3pm, 3 pm, "at 9"
- A time without a date is the next occurrence of that time of day
- A date without a time gets the caller's default time of day

Everything returned is timezone-aware in the local zone; callers convert
to UTC before storing.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo

from taskpilot.core.timeutils import local_zone
from taskpilot.services.slots.text import ensure_string, pick

DEFAULT_TIME_OF_DAY = time(9, 0)

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMERIC_DATE = re.compile(r"(?<![\d:.])(\d{1,2})[/-](\d{1,2})(?:[/-](\d{2}|\d{4}))?(?![\d:])")
_CLOCK = re.compile(r"(?<![\d/-])(\d{1,2})[:.](\d{2})(?![\d/])")
_MERIDIEM = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE)
_AT_HOUR = re.compile(r"\b(?:at|around|by)\s+(\d{1,2})\b(?!\s*(?:[:./-]|%|minutes?|mins?|hours?|people|persons?|attendees))", re.IGNORECASE)


def _now(now: Optional[datetime], zone: Optional[ZoneInfo]) -> datetime:
    zone = zone or local_zone()
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


# ---------------------------------------------------------------------------
# TIME OF DAY
# ---------------------------------------------------------------------------

def _make_time(hours: int, minutes: int = 0) -> Optional[time]:
    if 0 <= hours <= 23 and 0 <= minutes <= 59:
        return time(hours, minutes)
    return None


def _from_meridiem(hours: int, minutes: int, meridiem: str) -> Optional[time]:
    if not 1 <= hours <= 12:
        return None
    hours = hours % 12
    if meridiem.lower() == "pm":
        hours += 12
    return _make_time(hours, minutes)


def parse_time_of_day(value: Any) -> Optional[time]:
    """Parse a standalone time value: "14:30", "14.30", "9", "9h", "3pm"."""
    text = ensure_string(value)
    if not text:
        return None

    match = re.fullmatch(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)", text, re.IGNORECASE)
    if match:
        return _from_meridiem(int(match.group(1)), int(match.group(2) or 0), match.group(3))

    match = re.fullmatch(r"(\d{1,2})(?:[:.h](\d{2}))?(?::\d{2})?h?", text, re.IGNORECASE)
    if match:
        return _make_time(int(match.group(1)), int(match.group(2) or 0))

    return None


def extract_time(text: Any) -> Optional[time]:
    """Find the first clock time in free text."""
    message = ensure_string(text)
    if not message:
        return None

    match = _CLOCK.search(message)
    if match:
        parsed = _make_time(int(match.group(1)), int(match.group(2)))
        if parsed:
            return parsed

    match = _MERIDIEM.search(message)
    if match:
        parsed = _from_meridiem(int(match.group(1)), int(match.group(2) or 0), match.group(3))
        if parsed:
            return parsed

    match = _AT_HOUR.search(message)
    if match:
        return _make_time(int(match.group(1)))

    return None


# ---------------------------------------------------------------------------
# DATES
# ---------------------------------------------------------------------------

def _numeric_date(day: int, month: int, year_text: Optional[str], today: date) -> Optional[date]:
    if year_text:
        year = int(year_text)
        if year < 100:
            year += (today.year // 100) * 100
    else:
        year = today.year

    try:
        candidate = date(year, month, day)
    except ValueError:
        return None

    if not year_text and candidate < today:
        try:
            candidate = date(year + 1, month, day)
        except ValueError:
            return None
    return candidate


def next_weekday(weekday: int, today: date) -> date:
    """The next date with this weekday, strictly after today."""
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


def extract_date(text: Any, now: Optional[datetime] = None, zone: Optional[ZoneInfo] = None) -> Optional[date]:
    """Find the first date expression in free text."""
    message = ensure_string(text)
    if not message:
        return None

    lowered = message.lower()
    today = _now(now, zone).date()

    if re.search(r"\bday after tomorrow\b", lowered):
        return today + timedelta(days=2)
    if re.search(r"\btomorrow\b", lowered):
        return today + timedelta(days=1)
    if re.search(r"\b(?:today|tonight)\b", lowered):
        return today

    for name, index in WEEKDAYS.items():
        if re.search(rf"\b{name}\b", lowered):
            return next_weekday(index, today)

    match = _NUMERIC_DATE.search(message)
    if match:
        return _numeric_date(int(match.group(1)), int(match.group(2)), match.group(3), today)

    return None


def parse_date_value(value: Any, now: Optional[datetime] = None, zone: Optional[ZoneInfo] = None) -> Optional[date]:
    """Parse a structured date field: ISO, dd/mm[/yyyy], or a relative word."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = ensure_string(value)
    if not text:
        return None

    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    match = _NUMERIC_DATE.fullmatch(text)
    if match:
        today = _now(now, zone).date()
        return _numeric_date(int(match.group(1)), int(match.group(2)), match.group(3), today)

    return extract_date(text, now=now, zone=zone)


def parse_datetime_value(value: Any, zone: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """
    Parse a full timestamp: datetime, ISO 8601 string, or epoch milliseconds.

    Naive values are read in the local zone. Date-only strings are not
    timestamps and return None (use parse_date_value).
    """
    zone = zone or local_zone()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = ensure_string(value)
        if not text or _ISO_DATE.match(text) or ("T" not in text.upper() and " " not in text):
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


# ---------------------------------------------------------------------------
# COMBINING
# ---------------------------------------------------------------------------

def combine(day: date, time_of_day: time, zone: Optional[ZoneInfo] = None) -> datetime:
    """Set the time of day on a date, in the local zone."""
    return datetime.combine(day, time_of_day, tzinfo=zone or local_zone())


def next_time_of_day(time_of_day: time, now: Optional[datetime] = None, zone: Optional[ZoneInfo] = None) -> datetime:
    """The next moment with this time of day: today if still ahead, else tomorrow."""
    current = _now(now, zone)
    candidate = combine(current.date(), time_of_day, current.tzinfo)
    if candidate <= current:
        candidate = combine(current.date() + timedelta(days=1), time_of_day, current.tzinfo)
    return candidate


def date_and_time_from_text(
    text: Any,
    now: Optional[datetime] = None,
    zone: Optional[ZoneInfo] = None,
) -> Tuple[Optional[date], Optional[time]]:
    return extract_date(text, now=now, zone=zone), extract_time(text)


def resolve_date_time(
    parameters: dict,
    text: Any,
    now: Optional[datetime] = None,
    zone: Optional[ZoneInfo] = None,
    datetime_keys: Tuple[str, ...] = ("dateTime", "datetime", "remindAt", "start", "startAt"),
    date_keys: Tuple[str, ...] = ("date", "day"),
    time_keys: Tuple[str, ...] = ("time", "hour", "timeOfDay", "startTime"),
    default_time: time = DEFAULT_TIME_OF_DAY,
) -> Optional[datetime]:
    """
    Resolve one absolute moment from the parameter bag, then the text.

    Order: full timestamp field, then date/time fields, then free text.
    Returns None when nothing usable is found.
    """
    zone = zone or local_zone()
    current = _now(now, zone)

    direct = parse_datetime_value(pick(parameters, *datetime_keys), zone=zone)
    if direct:
        return direct

    # A datetime field holding only a date or a time still counts
    loose = pick(parameters, *datetime_keys)
    day = parse_date_value(pick(parameters, *date_keys), now=current, zone=zone)
    time_of_day = parse_time_of_day(pick(parameters, *time_keys))
    if day is None and loose is not None:
        day = parse_date_value(loose, now=current, zone=zone)
    if time_of_day is None and loose is not None:
        time_of_day = parse_time_of_day(loose)

    if day is None and time_of_day is None:
        day, time_of_day = date_and_time_from_text(text, now=current, zone=zone)

    if day is not None:
        return combine(day, time_of_day or default_time, zone)
    if time_of_day is not None:
        return next_time_of_day(time_of_day, now=current, zone=zone)
    return None
