"""
Keyword Rules - the deterministic last resort of the classifier chain.

An ordered list of (name, predicate, builder) rules over the lower-cased
text. The first rule whose predicate matches builds the result. Rules are
pure functions of the text: no clock, no I/O, no exceptions, so this
strategy can never fail.

Order matters:
1. Reminder vocabulary (list phrases before create)
2. Task vocabulary (list phrases before create)
3. Scheduling vocabulary (room booking before generic meetings)
4. E-mail vocabulary (drafting before sending)
5. Groceries, then documents
6. Arithmetic (skipped when the text contains a clock time)

Parameters are only what can be read off the text directly. Dates and
times are left to the normalizer, which reads them from the original text.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Any, List, Optional

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult

KEYWORD_PROVIDER = "keywords"

# Confidence reported for keyword matches: clearly below typical LLM scores
KEYWORD_CONFIDENCE = 0.4


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text) is not None


# ---------------------------------------------------------------------------
# VOCABULARY
# ---------------------------------------------------------------------------

_REMINDER_LIST = r"\b(?:show|list|view|what are)\b.*\breminders\b|\bmy reminders\b"
_REMINDER = r"\bremind(?:er|ers)?\b|\bremind me\b"

_TASK_LIST = r"\b(?:show|list|view|what are)\b.*\b(?:tasks|todos|to-dos)\b|\bmy tasks\b|\btask list\b"
_TASK = r"\btasks?\b|\btodos?\b|\bto-do\b|\bto do list\b"

_ROOM = r"\b(?:meeting|conference|focus)\s+room\b|\bbook\b.*\broom\b|\breserve\b.*\b(?:room|space)\b"
_MEETING = r"\bmeetings?\b|\bappointments?\b|\bcalls?\b|\bcalendar\b|\bevents?\b|\bschedule\b"
_SCHEDULE_MEETING = r"\bschedule\b.*\bmeeting\b|\bplan\b.*\bmeeting\b"

_EMAIL = r"\be-?mails?\b|\bmail\b"
_EMAIL_WRITE = r"\b(?:write|draft|compose)\b.*\b(?:e-?mail|mail|letter)\b|\b(?:e-?mail|mail)\b.*\bdraft\b"

_GROCERY = r"\bgrocer(?:y|ies)\b|\bshopping list\b"
_DOCUMENT = r"\bpdf\b|\bdocument\b|\bsummari[sz]e\b"

_CLOCK_TIME = r"\b\d{1,2}[:.]\d{2}\b|\b\d{1,2}\s*(?:am|pm|o'clock)\b"
_MATH_CHARS = re.compile(r"[^0-9+\-*/().,^%\s]")
_MATH_OPERATOR = re.compile(r"[+\-*/^%]")
_MATH_KEYWORD = r"\b(?:calculate|calc|compute|sum|how much is|what is)\b"


def extract_math_candidate(lowered: str) -> Optional[str]:
    """
    Return the arithmetic part of the text, or None when it is not a sum.

    Requires a digit, plus an operator or a calculation keyword.
    """
    if _has(_CLOCK_TIME, lowered) or _has(_REMINDER, lowered):
        return None

    candidate = _MATH_CHARS.sub(" ", lowered)
    candidate = re.sub(r"\s{2,}", " ", candidate).strip()
    if not candidate or not re.search(r"\d", candidate):
        return None

    if not _MATH_OPERATOR.search(candidate) and not _has(_MATH_KEYWORD, lowered):
        return None

    return candidate


# ---------------------------------------------------------------------------
# RULES
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeywordRule:
    """One ordered rule of the fallback classifier."""
    name: str
    matches: Callable[[str], bool]
    build: Callable[[str, str], IntentResult]


def _result(label: IntentLabel, parameters: Optional[Dict[str, Any]] = None) -> IntentResult:
    return IntentResult(
        intent=label,
        confidence=KEYWORD_CONFIDENCE if label != IntentLabel.UNKNOWN else None,
        parameters=parameters or {},
        provider=KEYWORD_PROVIDER,
    )


def _build_math(message: str, lowered: str) -> IntentResult:
    return _result(IntentLabel.MATH_CALCULATE, {"expression": extract_math_candidate(lowered)})


KEYWORD_RULES: List[KeywordRule] = [
    KeywordRule(
        "reminder.list",
        lambda t: _has(_REMINDER_LIST, t),
        lambda m, t: _result(IntentLabel.REMINDER_LIST),
    ),
    KeywordRule(
        "reminder.create",
        lambda t: _has(_REMINDER, t),
        lambda m, t: _result(IntentLabel.REMINDER_CREATE, {"text": m.strip()}),
    ),
    KeywordRule(
        "task.list",
        lambda t: _has(_TASK_LIST, t),
        lambda m, t: _result(IntentLabel.TASK_LIST),
    ),
    KeywordRule(
        "task.create",
        lambda t: _has(_TASK, t),
        lambda m, t: _result(IntentLabel.TASK_CREATE, {"text": m.strip()}),
    ),
    KeywordRule(
        "room.reserve",
        lambda t: _has(_ROOM, t),
        lambda m, t: _result(IntentLabel.ROOM_RESERVE),
    ),
    KeywordRule(
        "meeting.schedule",
        lambda t: _has(_SCHEDULE_MEETING, t),
        lambda m, t: _result(IntentLabel.MEETING_SCHEDULE),
    ),
    KeywordRule(
        "calendar.create",
        lambda t: _has(_MEETING, t),
        lambda m, t: _result(IntentLabel.CALENDAR_CREATE),
    ),
    KeywordRule(
        "email.write",
        lambda t: _has(_EMAIL_WRITE, t),
        lambda m, t: _result(IntentLabel.EMAIL_WRITE, {"body": m.strip()}),
    ),
    KeywordRule(
        "email.send",
        lambda t: _has(_EMAIL, t),
        lambda m, t: _result(IntentLabel.EMAIL_SEND),
    ),
    KeywordRule(
        "grocery.list",
        lambda t: _has(_GROCERY, t),
        lambda m, t: _result(IntentLabel.GROCERY_LIST),
    ),
    KeywordRule(
        "file.summarize",
        lambda t: _has(_DOCUMENT, t),
        lambda m, t: _result(IntentLabel.FILE_SUMMARIZE),
    ),
    KeywordRule(
        "math.calculate",
        lambda t: extract_math_candidate(t) is not None,
        _build_math,
    ),
]


def classify_by_keywords(message: str) -> IntentResult:
    """
    Classify text with the ordered keyword rules.

    Total: always returns a result, UNKNOWN when nothing matches.
    """
    text = message if isinstance(message, str) else ""
    lowered = text.lower()

    for rule in KEYWORD_RULES:
        if rule.matches(lowered):
            return rule.build(text, lowered)

    return _result(IntentLabel.UNKNOWN)
