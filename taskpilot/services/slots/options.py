"""
Small yes/no and list options read from requests.
"""

import re
from typing import Any, List

from taskpilot.services.slots.models import GroceryItem
from taskpilot.services.slots.text import ensure_string, pick

_CALENDAR_NEGATIVE = re.compile(
    r"\bno\s+(?:calendar|agenda)\b|\bnot\s+(?:in|on|to)\s+(?:the\s+|my\s+)?(?:calendar|agenda)\b"
    r"|\bwithout\s+(?:a\s+)?(?:calendar|agenda)\b"
)
_CALENDAR_POSITIVE = re.compile(r"\bcalendar\b|\bagenda\b")


def wants_calendar_event(parameters: dict, message: str) -> bool:
    """
    Should a reminder also go into the calendar?

    An explicit calendar/createCalendarEvent flag wins. Otherwise negative
    phrases ("no calendar") say no and any mention of the calendar says yes.
    """
    flag = pick(parameters, "calendar", "createCalendarEvent")
    if isinstance(flag, bool):
        return flag
    if isinstance(flag, str):
        lowered = flag.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False

    haystack = " ".join(
        [str(value) for value in parameters.values() if isinstance(value, str)] + [message or ""]
    ).lower()
    if _CALENDAR_NEGATIVE.search(haystack):
        return False
    return bool(_CALENDAR_POSITIVE.search(haystack))


# ---------------------------------------------------------------------------
# GROCERIES
# ---------------------------------------------------------------------------

DEFAULT_GROCERIES = [
    GroceryItem(name="Mixed vegetables", quantity="2 bags"),
    GroceryItem(name="Chicken breast", quantity="500g"),
    GroceryItem(name="Wholewheat pasta", quantity="1 pack"),
    GroceryItem(name="Fruit (bananas, apples)", quantity="8 pieces"),
    GroceryItem(name="Oat milk", quantity="2 litres"),
]

HEALTHY_EXTRAS = [
    GroceryItem(name="Mixed nuts", quantity="1 bag"),
    GroceryItem(name="Greek yoghurt", quantity="1 kg"),
]


def normalize_grocery_items(items: Any) -> List[GroceryItem]:
    """Accept ["milk", {"name": "eggs", "quantity": "12"}, ...]."""
    if not isinstance(items, list):
        return []

    groceries: List[GroceryItem] = []
    for item in items:
        if isinstance(item, str) and item.strip():
            groceries.append(GroceryItem(name=item.strip()))
        elif isinstance(item, dict):
            name = ensure_string(pick(item, "name", "item"))
            if name:
                quantity = pick(item, "quantity", "amount")
                groceries.append(GroceryItem(name=name, quantity=str(quantity).strip() if quantity is not None else "1"))
    return groceries


def default_grocery_list(message: str) -> List[GroceryItem]:
    groceries = [item.model_copy() for item in DEFAULT_GROCERIES]
    if "healthy" in (message or "").lower():
        groceries.extend(item.model_copy() for item in HEALTHY_EXTRAS)
    return groceries


def resolve_grocery_list(parameters: dict, message: str) -> List[GroceryItem]:
    return normalize_grocery_items(parameters.get("items")) or default_grocery_list(message)
