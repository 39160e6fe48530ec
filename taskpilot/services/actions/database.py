"""
DatabaseActions - DomainActions backed by SQLAlchemy plus optional transports.

Tasks and reminders are stored in the local database. Calendar and mail
go through the injected clients; when a client is missing the action
raises DownstreamActionError, which the router folds into its message.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskpilot.core.errors import DownstreamActionError
from taskpilot.core.timeutils import as_utc
from taskpilot.models import Reminder, Task
from taskpilot.services.actions.base import (
    CalendarClient,
    CalendarEventDraft,
    DomainActions,
    EmailMessage,
    MailClient,
    TaskDraft,
)

logger = logging.getLogger("taskpilot.services.actions")


class DatabaseActions(DomainActions):
    """
    Usage:
        actions = DatabaseActions(SessionLocal, calendar_client=my_calendar)
        task = await actions.create_task("user-1", TaskDraft(title="File VAT return"))
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        calendar_client: Optional[CalendarClient] = None,
        mail_client: Optional[MailClient] = None,
    ):
        self._session_factory = session_factory
        self.calendar_client = calendar_client
        self.mail_client = mail_client

    # -----------------------------------------------------------------------
    # TASKS
    # -----------------------------------------------------------------------

    async def create_task(self, user_id: str, draft: TaskDraft) -> Dict[str, Any]:
        with self._session_factory() as db:
            task = Task(
                user_id=user_id,
                title=draft.title,
                description=draft.description,
                status=draft.status,
                due_date=as_utc(draft.due_date) if draft.due_date else None,
                labels=[],
                checklist=[],
            )
            db.add(task)
            db.commit()
            db.refresh(task)
            logger.info(f"Task created: {task.id} for user {user_id}")
            return task.to_dict()

    async def list_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        with self._session_factory() as db:
            tasks = db.scalars(
                select(Task)
                .where(Task.user_id == user_id, Task.status != "done")
                .order_by(Task.created_at)
            ).all()
            return [task.to_dict() for task in tasks]

    # -----------------------------------------------------------------------
    # REMINDERS
    # -----------------------------------------------------------------------

    async def create_reminder(self, user_id: str, text: str, remind_at: datetime) -> Dict[str, Any]:
        with self._session_factory() as db:
            reminder = Reminder(user_id=user_id, text=text, remind_at=as_utc(remind_at), sent=False)
            db.add(reminder)
            db.commit()
            db.refresh(reminder)
            logger.info(f"Reminder created: {reminder.id} for user {user_id}")
            return reminder.to_dict()

    async def list_reminders(self, user_id: str) -> List[Dict[str, Any]]:
        with self._session_factory() as db:
            reminders = db.scalars(
                select(Reminder)
                .where(Reminder.user_id == user_id)
                .order_by(Reminder.remind_at)
            ).all()
            return [reminder.to_dict() for reminder in reminders]

    # -----------------------------------------------------------------------
    # TRANSPORTS
    # -----------------------------------------------------------------------

    async def send_email(self, user_id: str, message: EmailMessage) -> Dict[str, Any]:
        if self.mail_client is None:
            raise DownstreamActionError("Mail is not connected", action="send_email")
        try:
            return await self.mail_client.send(user_id, message)
        except DownstreamActionError:
            raise
        except Exception as e:
            logger.error(f"Mail transport failed for user {user_id}: {e}")
            raise DownstreamActionError(str(e), action="send_email")

    async def create_calendar_event(self, user_id: str, event: CalendarEventDraft) -> Dict[str, Any]:
        if self.calendar_client is None:
            raise DownstreamActionError("Calendar is not connected", action="create_calendar_event")
        try:
            return await self.calendar_client.create_event(user_id, event)
        except DownstreamActionError:
            raise
        except Exception as e:
            logger.error(f"Calendar transport failed for user {user_id}: {e}")
            raise DownstreamActionError(str(e), action="create_calendar_event")
