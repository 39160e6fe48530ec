"""
Task and reminder models - the minimal records behind the domain actions.

Tasks double as recurrence templates: a task whose recurrence_id is set is
cloned by the recurrence engine each time its rule fires.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey, JSON, Text, Uuid, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskpilot.core.timeutils import as_utc
from taskpilot.db.base import Base


class Task(Base):
    """A to-do item owned by one user."""

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # status: "todo" | "open" | "done"
    status: Mapped[str] = mapped_column(String(20), default="todo", nullable=False)

    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assignee_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # labels: ["finance", "weekly"]
    labels: Mapped[list] = mapped_column(JSON, default=list)

    # checklist: [{"text": "Collect receipts", "position": 0}, ...]
    checklist: Mapped[list] = mapped_column(JSON, default=list)

    recurrence_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("recurrence_rules.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    recurrence: Mapped[Optional["RecurrenceRule"]] = relationship(
        "RecurrenceRule", back_populates="tasks"
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "due_date": as_utc(self.due_date).isoformat() if self.due_date else None,
            "assignee_id": self.assignee_id,
            "labels": list(self.labels or []),
            "checklist": list(self.checklist or []),
            "recurrence_id": str(self.recurrence_id) if self.recurrence_id else None,
        }


class Reminder(Base):
    """A timed reminder owned by one user."""

    __tablename__ = "reminders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    remind_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sent: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "text": self.text,
            "remind_at": as_utc(self.remind_at).isoformat(),
            "sent": self.sent,
        }
