"""
E-mail drafting: tone, subject, greeting, closing and key points.

The draft is built from whatever the classifier extracted, with the
original sentence as fallback for every part.
"""

import re
from typing import List, Optional

from taskpilot.services.slots.models import EmailRouting, EmailTemplate
from taskpilot.services.slots.text import (
    EMAIL_PATTERN,
    capitalize,
    ensure_string,
    first_present,
    first_sentence,
    pick,
    strip_command_phrases,
)

TONE_FORMAL = "formal"
TONE_INFORMAL = "informal"
TONE_NEUTRAL = "neutral"

SIGNATURE_PLACEHOLDER = "[Your name]"
BODY_PLACEHOLDER = "Write your message here."

# A leftover body shorter than this is dropped in favour of the placeholder
MIN_BODY_LENGTH = 5
MAX_KEY_POINTS = 5


def determine_tone(parameters: dict, message: str) -> str:
    direct = ensure_string(pick(parameters, "tone", "style"))
    if direct:
        if re.search(r"forma|business|professional", direct, re.IGNORECASE):
            return TONE_FORMAL
        if re.search(r"inform|friend|casu|short", direct, re.IGNORECASE):
            return TONE_INFORMAL

    lowered = (message or "").lower()
    if re.search(r"\b(?:formal|business|professional)\b", lowered):
        return TONE_FORMAL
    if re.search(r"\b(?:informal|casual|friendly|short)\b", lowered):
        return TONE_INFORMAL
    return TONE_NEUTRAL


def resolve_subject(message: str) -> str:
    match = re.search(r"subject\s*[:\-]\s*(.+)$", message or "", re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return first_sentence(strip_command_phrases(message)) or "Message"


def sanitize_body(message: str) -> Optional[str]:
    """The sentence minus the command, addresses and quotes."""
    stripped = strip_command_phrases(message)
    if not stripped:
        return None
    cleaned = EMAIL_PATTERN.sub("", stripped)
    cleaned = re.sub(r"[\"“”]", "", cleaned)
    cleaned = re.sub(r"\s{2,}", " ", cleaned).strip()
    cleaned = re.sub(r"^(?:to|for)\s+", "", cleaned, flags=re.IGNORECASE).strip()
    # "subject: ..." was consumed as the subject
    cleaned = re.sub(r"\bsubject\s*[:\-].*$", "", cleaned, flags=re.IGNORECASE).strip()
    if len(cleaned) < MIN_BODY_LENGTH:
        return None
    return cleaned


def display_name_from_address(address: str) -> Optional[str]:
    """anna.de_vries42@example.com -> "Anna De Vries"."""
    trimmed = address.strip()
    if "@" not in trimmed:
        return capitalize(trimmed) or None
    local_part = trimmed.split("@", 1)[0]
    cleaned = re.sub(r"\d+", " ", re.sub(r"[._]", " ", local_part)).strip()
    if not cleaned:
        return None
    return " ".join(capitalize(part) for part in cleaned.split())


def build_greeting(to: Optional[str], tone: str) -> str:
    name = display_name_from_address(to) if to else None
    if tone == TONE_FORMAL:
        return f"Dear {name}," if name else "Dear Sir or Madam,"
    if tone == TONE_INFORMAL:
        return f"Hi {name}," if name else "Hi,"
    return f"Hello {name}," if name else "Hello,"


def build_closing(tone: str) -> str:
    if tone == TONE_INFORMAL:
        return "Cheers,"
    if tone == TONE_FORMAL:
        return "Yours sincerely,"
    return "Kind regards,"


def derive_key_points(content: str) -> List[str]:
    parts = re.split(r"[\n•]+|\s+-\s+", content)
    points = [part.strip(" -•") for part in parts]
    return [point for point in points if point][:MAX_KEY_POINTS]


def compose_email_template(parameters: dict, message: str, routing: EmailRouting) -> EmailTemplate:
    """Assemble a complete draft from the parameter bag and the sentence."""
    tone = determine_tone(parameters, message)
    subject = first_present(pick(parameters, "subject", "title")) or resolve_subject(message)
    raw_body = (
        first_present(pick(parameters, "body", "content"))
        or sanitize_body(message)
        or BODY_PLACEHOLDER
    )

    greeting = build_greeting(routing.to, tone)
    closing = build_closing(tone)
    body_text = capitalize(raw_body)
    key_points = derive_key_points(body_text)
    summary = key_points[0] if key_points else body_text[:120]

    body = "\n".join([greeting, "", body_text, "", closing, SIGNATURE_PLACEHOLDER])

    return EmailTemplate(
        subject=capitalize(subject),
        body=body,
        greeting=greeting,
        closing=closing,
        signature=SIGNATURE_PLACEHOLDER,
        tone=tone,
        summary=summary,
        key_points=key_points,
        placeholders={"signature": SIGNATURE_PLACEHOLDER},
    )


def outgoing_body(parameters: dict, template: EmailTemplate) -> str:
    """Body to actually send: an explicit body wins over the drafted one."""
    return first_present(pick(parameters, "body")) or template.body
