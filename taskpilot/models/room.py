"""
Meeting room models - bookable rooms and their reservations.

MeetingRoom rows are created lazily: a seed set is inserted the first time
the booking resolver runs against an empty table, and ad hoc rooms are
created the first time a user names them.

Invariant for RoomReservation: for a fixed room, no two reservations'
[start, end) intervals intersect. The resolver enforces it with a
check-then-insert inside one transaction.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, JSON, Text, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskpilot.core.timeutils import as_utc
from taskpilot.db.base import Base


class MeetingRoom(Base):
    """A bookable meeting room."""

    __tablename__ = "meeting_rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # name: "Meeting room B", "Focus room 1" (matched case-insensitively)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)

    # capacity: Seats; None means unknown. Only ever raised, never lowered.
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    location: Mapped[str | None] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    reservations: Mapped[list["RoomReservation"]] = relationship(
        "RoomReservation", back_populates="room", cascade="all, delete-orphan"
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "capacity": self.capacity,
            "location": self.location,
        }


class RoomReservation(Base):
    """A booking of one room for the half-open window [start, end)."""

    __tablename__ = "room_reservations"
    __table_args__ = (
        Index("ix_room_reservations_room_window", "room_id", "start", "end"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("meeting_rooms.id", ondelete="CASCADE"), nullable=False
    )

    # user_id: Opaque requester identifier (auth lives outside this service)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Stored in UTC
    start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    attendees: Mapped[list] = mapped_column(JSON, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    room: Mapped[MeetingRoom] = relationship("MeetingRoom", back_populates="reservations")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "room_id": str(self.room_id),
            "title": self.title,
            "description": self.description,
            "start": as_utc(self.start).isoformat(),
            "end": as_utc(self.end).isoformat(),
            "attendees": list(self.attendees or []),
            "notes": self.notes,
        }
