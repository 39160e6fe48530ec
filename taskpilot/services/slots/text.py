"""
Text helpers for slot extraction.

Every helper here returns None for "missing" instead of raising, so the
handlers can turn a missing slot into a clarification message.
"""

import re
from typing import Any, Iterable, List, Optional

# A cleaned description shorter than this is treated as absent
MIN_DESCRIPTION_LENGTH = 3

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


# ---------------------------------------------------------------------------
# CANDIDATE RESOLUTION
# ---------------------------------------------------------------------------

def ensure_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings and blank strings."""
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    return None


def ensure_number(value: Any) -> Optional[float]:
    """Finite number from a number or numeric string ("2,5" is accepted)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        normalized = value.replace(",", ".", 1).strip()
        match = re.match(r"^[+-]?\d+(?:\.\d+)?", normalized)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def first_present(*candidates: Any) -> Optional[str]:
    """
    Return the first non-empty trimmed string among the candidates.

    Callers pass the structured field first, then synonyms, then anything
    extracted from free text.
    """
    for candidate in candidates:
        value = ensure_string(candidate)
        if value:
            return value
    return None


def pick(parameters: dict, *keys: str) -> Any:
    """First value in the bag under any of the keys that is not None."""
    for key in keys:
        value = parameters.get(key)
        if value is not None:
            return value
    return None


def extract_first_email(text: Any) -> Optional[str]:
    if not isinstance(text, str):
        return None
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


# ---------------------------------------------------------------------------
# FORMATTING
# ---------------------------------------------------------------------------

def capitalize(value: str) -> str:
    """Upper-case the first character only ("iPhone" stays "IPhone")."""
    trimmed = value.strip()
    return trimmed[:1].upper() + trimmed[1:] if trimmed else ""


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s{2,}", " ", value).strip()


def trim_punctuation(value: str) -> str:
    return re.sub(r"^[,.\-\s]+|[,.\-\s]+$", "", value)


def first_sentence(value: str) -> Optional[str]:
    for part in re.split(r"[.!?\n]", value):
        part = part.strip()
        if part:
            return part
    return None


def dedupe(values: Iterable[str]) -> List[str]:
    """Remove case-insensitive duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        key = value.lower()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


# ---------------------------------------------------------------------------
# DESCRIPTION CLEANING
# ---------------------------------------------------------------------------
# Applied in order. Leading command phrases first, then clock times and
# relative day words, then trailing calendar boilerplate.

_TIME_WORDS = r"(?:today|tomorrow|the day after tomorrow|day after tomorrow|tonight|this (?:morning|afternoon|evening))"

_REMINDER_COMMANDS = [
    r"^(?:please\s+)?remind\s+me\s+(?:to|about|of|that)?\s*",
    r"^(?:please\s+)?(?:create|make|set|add)\s+(?:a\s+|an\s+)?reminder\s*(?:to|for|about|that)?\s*",
    r"^reminder\s*[:,\-]?\s*",
]

_TASK_COMMANDS = [
    r"^(?:please\s+)?(?:create|make|add|new)\s+(?:a\s+|an\s+)?(?:new\s+)?(?:task|todo|to-do)\s*(?:to|for|about|:)?\s*",
    r"^(?:please\s+)?(?:add|put)\s+(.+?)\s+(?:to|on)\s+my\s+(?:task|todo|to-do)\s+list\s*$",
    r"^i\s+(?:need|have)\s+to\s+",
    r"^(?:task|todo)\s*[:,\-]\s*",
]

_TIME_FRAGMENTS = [
    r"\b(?:at|by|around)\s+\d{1,2}(?:[:.]\d{2})?\s*(?:am|pm|o'clock|h)?\b",
    r"\b\d{1,2}[:.]\d{2}\b",
    r"\b\d{1,2}\s*(?:am|pm)\b",
    r"\b(?:on\s+)?\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?\b",
    rf"^{_TIME_WORDS}\b[\s,]*",
    rf"\b{_TIME_WORDS}\s*$",
    r"\b(?:on\s+)?(?:next\s+)?(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
]

_CALENDAR_BOILERPLATE = [
    r"\b(?:and\s+)?(?:put|add|place)\s+(?:it\s+)?(?:in|to|into|on)\s+(?:my\s+|the\s+)?(?:calendar|agenda)\b.*$",
    r"\b(?:and\s+)?(?:also\s+)?(?:with|as)\s+(?:a\s+)?calendar\s+(?:event|entry)\b.*$",
    r"\b(?:as\s+a\s+task|on\s+my\s+(?:todo|to-do|task)\s+list)\b.*$",
]


def _apply(patterns: List[str], value: str) -> str:
    for pattern in patterns:
        match = re.search(pattern, value, flags=re.IGNORECASE)
        if not match:
            continue
        # "add X to my todo list" keeps X
        if match.groups() and match.group(1):
            value = value[:match.start()] + match.group(1) + value[match.end():]
        else:
            value = value[:match.start()] + " " + value[match.end():]
        value = value.strip()
    return value


def _finish(value: str) -> Optional[str]:
    value = trim_punctuation(collapse_whitespace(value))
    if len(value) < MIN_DESCRIPTION_LENGTH:
        return None
    return value


def clean_reminder_description(raw: Any) -> Optional[str]:
    """
    Strip reminder commands, clock times and calendar boilerplate.

    "remind me to call Anna tomorrow at 9 and put it in the calendar" -> "call Anna"
    """
    value = ensure_string(raw)
    if not value:
        return None
    value = _apply(_REMINDER_COMMANDS, value)
    value = _apply(_CALENDAR_BOILERPLATE, value)
    value = _apply(_TIME_FRAGMENTS, value)
    value = re.sub(r"\b(?:a\s+)?reminder\b", " ", value, flags=re.IGNORECASE)
    # "remind me tomorrow to ..." leaves a dangling "to"
    value = re.sub(r"^\s*(?:to|about|that)\s+", "", value, flags=re.IGNORECASE)
    return _finish(value)


def clean_task_description(raw: Any) -> Optional[str]:
    """
    Strip task commands and list boilerplate.

    "create a task: file the VAT return" -> "file the VAT return"
    """
    value = ensure_string(raw)
    if not value:
        return None
    value = _apply(_TASK_COMMANDS, value)
    value = _apply(_CALENDAR_BOILERPLATE, value)
    return _finish(value)


_COMMAND_PHRASES = [
    r"^(?:please\s+)?(?:write|draft|compose|create|make|send)\s+(?:me\s+)?(?:a\s+|an\s+)?(?:[a-z]+\s+){0,3}?(?:e-?mail|mail|message|letter)\b",
    r"^(?:to|for)\s+[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b[,:\s]*",
    r"^(?:please\s+)?(?:book|reserve|plan|schedule)\s+(?:a\s+|an\s+)?(?:\d+[- ]?(?:minute|min|hour)s?\s+)?(?:room|space|meeting room|conference room)\s*(?:for|on)?\s*",
    r"^(?:please\s+)?(?:book|reserve|plan|schedule)\s+(?:a\s+|an\s+|the\s+)?",
    r"^(?:please\s+)?(?:calculate|compute|what\s+is|how\s+much\s+is)\s+",
]


def strip_command_phrases(message: Any) -> str:
    """
    Remove a leading command ("write an email", "book a room for ...").

    When a colon follows, only the text after it is kept:
    "draft an email: the report is late" -> "the report is late"
    """
    value = ensure_string(message) or ""
    for pattern in _COMMAND_PHRASES:
        value = re.sub(pattern, "", value, count=1, flags=re.IGNORECASE).strip()
    if ":" in value:
        after = value.split(":", 1)[1].strip()
        if after:
            value = after
    return value.strip()


def strip_time_fragments(value: str) -> str:
    """Remove clock times, numeric dates, weekdays and relative day words."""
    return collapse_whitespace(_apply(_TIME_FRAGMENTS, value))
