"""
Recurrence rule model.

State machine:
    active=True, next_occurrence=T  --tick at >= T-->  next_occurrence=step(T)
    active=True, step(T) is None    --tick-->          active=False (terminal)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskpilot.core.timeutils import as_utc
from taskpilot.db.base import Base


class RecurrenceRule(Base):
    """A repeating schedule attached to one or more template tasks."""

    __tablename__ = "recurrence_rules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # rule: "FREQ=DAILY" | "FREQ=WEEKLY" | "FREQ=MONTHLY" (RRULE-like)
    rule: Mapped[str] = mapped_column(String(200), nullable=False)

    # next_occurrence: Stored in UTC; None once nothing follows
    next_occurrence: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    tasks: Mapped[list["Task"]] = relationship("Task", back_populates="recurrence")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "rule": self.rule,
            "next_occurrence": as_utc(self.next_occurrence).isoformat() if self.next_occurrence else None,
            "active": self.active,
        }
