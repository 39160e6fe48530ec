"""
Reservation slot extraction.

Turns the parameter bag plus the original sentence into a
ReservationRequest. The window is taken as stated: shifting a past start
and repairing an inverted window is the booking resolver's job.

    "book a 30-minute team meeting Friday at 14:30 in meeting room B"
    -> start=Friday 14:30 local, end=15:00, title="Team meeting",
       preferred_room="Meeting room B"
"""

import re
from datetime import datetime, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from taskpilot.services.slots.dates import parse_datetime_value, resolve_date_time
from taskpilot.services.slots.models import ReservationRequest
from taskpilot.services.slots.recipients import parse_recipient_list
from taskpilot.services.slots.text import (
    capitalize,
    collapse_whitespace,
    ensure_number,
    ensure_string,
    first_present,
    first_sentence,
    pick,
    strip_command_phrases,
    strip_time_fragments,
    trim_punctuation,
)

DEFAULT_DURATION_MINUTES = 60
MIN_DURATION_MINUTES = 15
MAX_TITLE_LENGTH = 90

_DURATION_KEYS = ("durationMinutes", "duration", "lengthMinutes", "length", "minutes")
_START_KEYS = ("dateTime", "datetime", "start", "startAt", "begin", "from")
_END_KEYS = ("end", "endAt", "until", "finish")
_ROOM_KEYS = ("preferredRoom", "roomLabel", "room", "space", "location", "roomName")

_MINUTES_TEXT = re.compile(r"\b(\d{1,3})\s*-?\s*(?:minutes?|mins?|min)\b", re.IGNORECASE)
_HOURS_TEXT = re.compile(r"\b(\d{1,2}(?:[.,]\d+)?)\s*-?\s*(?:hours?|hrs?)\b", re.IGNORECASE)
_HALF_HOUR_TEXT = re.compile(r"\bhalf\s+an?\s+hour\b", re.IGNORECASE)
_ONE_HOUR_TEXT = re.compile(r"\b(?:an|one)\s+hour\b", re.IGNORECASE)

_NAMED_ROOM_TEXT = re.compile(r"\b(?:in\s+|at\s+)?(?:the\s+)?(meeting|conference|focus)\s+room\s+([\w-]+)", re.IGNORECASE)
_BARE_ROOM_TEXT = re.compile(r"\b(?:in\s+|at\s+)?(?:the\s+)?room\s+([A-Za-z]|\d{1,3})\b", re.IGNORECASE)
_HEADCOUNT_TEXT = re.compile(r"\bfor\s+(\d{1,3})\s+(?:people|persons|attendees|participants|guests)\b", re.IGNORECASE)


# ---------------------------------------------------------------------------
# DURATION
# ---------------------------------------------------------------------------

def extract_duration_minutes(text: Any) -> Optional[int]:
    """Read "30-minute", "45 min", "2 hours", "half an hour" from text."""
    message = ensure_string(text)
    if not message:
        return None

    match = _MINUTES_TEXT.search(message)
    if match:
        return int(match.group(1))

    match = _HOURS_TEXT.search(message)
    if match:
        return int(round(float(match.group(1).replace(",", ".")) * 60))

    if _HALF_HOUR_TEXT.search(message):
        return 30
    if _ONE_HOUR_TEXT.search(message):
        return 60
    return None


def resolve_duration(parameters: dict, message: str) -> int:
    explicit = ensure_number(pick(parameters, *_DURATION_KEYS))
    if explicit is not None and explicit > 0:
        return int(round(explicit))
    return extract_duration_minutes(message) or DEFAULT_DURATION_MINUTES


# ---------------------------------------------------------------------------
# ROOM NAME
# ---------------------------------------------------------------------------

def _normalize_identifier(identifier: str) -> Optional[str]:
    if len(identifier) == 1 and identifier.isalpha():
        return identifier.upper()
    if identifier.isdigit() and len(identifier) <= 3:
        return identifier
    # Named rooms are capitalized in text ("meeting room Amsterdam")
    if identifier[:1].isupper():
        return identifier
    return None


def extract_room_name(text: Any) -> Optional[str]:
    """
    Find a room reference and normalize it.

    "meeting room b" -> "Meeting room B"; "room 3" -> "Meeting room 3";
    "focus room 1" -> "Focus room 1"
    """
    message = ensure_string(text)
    if not message:
        return None

    match = _NAMED_ROOM_TEXT.search(message)
    if match:
        identifier = _normalize_identifier(match.group(2))
        if identifier:
            return f"{match.group(1).capitalize()} room {identifier}"

    match = _BARE_ROOM_TEXT.search(message)
    if match:
        identifier = _normalize_identifier(match.group(1))
        if identifier:
            return f"Meeting room {identifier}"

    return None


def normalize_room_name(value: Any) -> Optional[str]:
    """Normalize a structured room value the same way as text references."""
    name = ensure_string(value)
    if not name:
        return None
    return extract_room_name(name) or name


# ---------------------------------------------------------------------------
# TITLE
# ---------------------------------------------------------------------------

def derive_title(message: str, preferred_room: Optional[str] = None) -> str:
    """First meaningful sentence of the request, with scheduling details removed."""
    cleaned = strip_command_phrases(message)
    cleaned = _NAMED_ROOM_TEXT.sub(" ", cleaned)
    cleaned = _BARE_ROOM_TEXT.sub(" ", cleaned)
    cleaned = _MINUTES_TEXT.sub(" ", cleaned)
    cleaned = _HOURS_TEXT.sub(" ", cleaned)
    cleaned = _HALF_HOUR_TEXT.sub(" ", cleaned)
    cleaned = _HEADCOUNT_TEXT.sub(" ", cleaned)
    cleaned = re.sub(r"\bfor\s+(?=\s|$)", " ", cleaned, flags=re.IGNORECASE)
    cleaned = strip_time_fragments(cleaned)
    cleaned = trim_punctuation(collapse_whitespace(cleaned))

    sentence = first_sentence(cleaned)
    if sentence and len(sentence) > 3:
        return capitalize(sentence[:MAX_TITLE_LENGTH])
    if preferred_room:
        return f"Meeting in {preferred_room}"
    return "Meeting"


# ---------------------------------------------------------------------------
# REQUEST
# ---------------------------------------------------------------------------

def build_reservation_request(
    parameters: dict,
    message: str,
    now: Optional[datetime] = None,
    zone: Optional[ZoneInfo] = None,
) -> Optional[ReservationRequest]:
    """
    Build a ReservationRequest, or None when no start can be found.

    Start: full timestamp fields, then date/time fields, then the text.
    End: end/endAt/until/finish, else start + max(15, duration).
    """
    duration = resolve_duration(parameters, message)

    start = resolve_date_time(parameters, message, now=now, zone=zone, datetime_keys=_START_KEYS)
    if start is None:
        return None

    end = parse_datetime_value(pick(parameters, *_END_KEYS), zone=zone)
    if end is None or end <= start:
        end = start + timedelta(minutes=max(MIN_DURATION_MINUTES, duration))

    attendees = parse_recipient_list(pick(parameters, "attendees", "participants", "invitees")) or []

    capacity = ensure_number(pick(parameters, "capacity", "attendeeCount", "headcount", "seats"))
    if capacity is None:
        match = _HEADCOUNT_TEXT.search(message or "")
        if match:
            capacity = float(match.group(1))
        elif attendees:
            capacity = float(len(attendees))

    preferred_room = normalize_room_name(pick(parameters, *_ROOM_KEYS)) or extract_room_name(message)

    title = first_present(
        pick(parameters, "title", "summary", "subject"),
    ) or derive_title(message or "", preferred_room)

    description = first_present(
        pick(parameters, "description", "agenda", "purpose"),
        strip_command_phrases(message),
    )

    return ReservationRequest(
        start=start,
        end=end,
        title=title,
        description=description,
        preferred_room=preferred_room,
        attendees=attendees,
        capacity=max(1, int(round(capacity))) if capacity else None,
        notes=ensure_string(parameters.get("notes")),
        duration_minutes=duration,
    )
