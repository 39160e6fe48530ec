"""
Recipient parsing for e-mail routing and meeting attendees.

Accepted shapes:
    "anna@example.com"
    "anna@example.com, bob@example.com; carol@example.com"
    ["anna@example.com", {"email": "bob@example.com"}]

Lists keep their order and are not deduplicated; room booking dedupes
attendees itself.
"""

import re
from typing import Any, List, Optional

from taskpilot.services.slots.models import EmailRouting
from taskpilot.services.slots.text import ensure_string, extract_first_email, pick


def parse_recipient_list(value: Any) -> Optional[List[str]]:
    """Normalize any accepted recipient shape to a list; None when empty."""
    if isinstance(value, str):
        parts = [part.strip() for part in re.split(r"[,;\n]+", value)]
        parts = [part for part in parts if part]
        return parts or None

    if not isinstance(value, (list, tuple)):
        return None

    cleaned: List[str] = []
    for entry in value:
        if isinstance(entry, str):
            candidate = entry.strip()
        elif isinstance(entry, dict):
            candidate = ensure_string(entry.get("email"))
        else:
            candidate = None
        if candidate:
            cleaned.append(candidate)
    return cleaned or None


def primary_recipient(value: Any) -> Optional[str]:
    """First usable address in a string or a (nested) list."""
    if isinstance(value, str):
        return ensure_string(value)
    if isinstance(value, dict):
        return ensure_string(value.get("email"))
    if isinstance(value, (list, tuple)):
        for entry in value:
            candidate = primary_recipient(entry)
            if candidate:
                return candidate
    return None


def resolve_email_routing(parameters: dict, message: str) -> EmailRouting:
    """
    Build {to, cc, bcc} from the parameter bag.

    "to" falls back through recipients, recipient, email and finally the
    first address found anywhere in the message.
    """
    to_list = parse_recipient_list(parameters.get("to"))
    to = (
        (to_list[0] if to_list else None)
        or primary_recipient(parameters.get("recipients"))
        or ensure_string(parameters.get("recipient"))
        or ensure_string(parameters.get("email"))
        or extract_first_email(message)
    )

    cc = parse_recipient_list(pick(parameters, "cc", "carbonCopy")) or []
    bcc = parse_recipient_list(pick(parameters, "bcc", "blindCopy")) or []

    return EmailRouting(to=to, cc=cc, bcc=bcc)
