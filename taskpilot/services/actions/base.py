"""
Domain Actions - the boundary between the router and everything it drives.

The router never touches storage or third-party transports directly. It
calls a DomainActions implementation, which returns plain dicts ready to be
placed in a response. Failures of secondary actions are raised as
DownstreamActionError so the router can report partial success.

Design Pattern: Strategy Pattern
================================
DomainActions is the interface; DatabaseActions is the shipped
implementation. Tests substitute an in-memory fake.

Calendar and mail transports are separate interfaces (CalendarClient,
MailClient). No implementation ships: without one, calendar and mail
actions fail with DownstreamActionError("... is not connected").
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# PAYLOADS
# ---------------------------------------------------------------------------

@dataclass
class TaskDraft:
    title: str
    status: str = "todo"
    description: Optional[str] = None
    due_date: Optional[datetime] = None


@dataclass
class EmailMessage:
    to: str
    subject: str
    body: str
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)


@dataclass
class CalendarEventDraft:
    """
    A calendar event to create.

    start is timezone-aware; end defaults to start + 30 minutes in clients
    that need one.
    """
    title: str
    start: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None


# ---------------------------------------------------------------------------
# TRANSPORTS
# ---------------------------------------------------------------------------

class CalendarClient(ABC):
    """Third-party calendar transport (Google Calendar, CalDAV, ...)."""

    @abstractmethod
    async def create_event(self, user_id: str, event: CalendarEventDraft) -> Dict[str, Any]:
        pass


class MailClient(ABC):
    """Third-party mail transport (Gmail, SMTP relay, ...)."""

    @abstractmethod
    async def send(self, user_id: str, message: EmailMessage) -> Dict[str, Any]:
        pass


# ---------------------------------------------------------------------------
# ACTIONS
# ---------------------------------------------------------------------------

class DomainActions(ABC):
    """
    Everything the action router can make happen.

    Every method returns JSON-ready dicts. Methods may raise
    DownstreamActionError; any other exception is treated as a bug and
    reported as a generic failure by the router.
    """

    @abstractmethod
    async def create_task(self, user_id: str, draft: TaskDraft) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def list_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def create_reminder(self, user_id: str, text: str, remind_at: datetime) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def list_reminders(self, user_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def send_email(self, user_id: str, message: EmailMessage) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def create_calendar_event(self, user_id: str, event: CalendarEventDraft) -> Dict[str, Any]:
        pass
