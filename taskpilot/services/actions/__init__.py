"""
Actions Package - domain actions the router dispatches to.

Usage:
    from taskpilot.services.actions import DatabaseActions, TaskDraft

    actions = DatabaseActions(SessionLocal)
"""

from taskpilot.services.actions.base import (
    CalendarClient,
    CalendarEventDraft,
    DomainActions,
    EmailMessage,
    MailClient,
    TaskDraft,
)
from taskpilot.services.actions.database import DatabaseActions

__all__ = [
    "CalendarClient",
    "CalendarEventDraft",
    "DomainActions",
    "EmailMessage",
    "MailClient",
    "TaskDraft",
    "DatabaseActions",
]
