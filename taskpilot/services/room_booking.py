"""
Room Booking Resolver - conflict-free meeting room reservations.

Algorithm:
1. Seed the default rooms when the table is empty
2. Normalize the request (trim, dedupe attendees, repair the window,
   shift a past start a few minutes into the future)
3. Preferred room: find it case-insensitively or create it, raise its
   capacity when the request needs more, book it when free
4. Otherwise walk the other rooms by ascending capacity (then name),
   skipping rooms that are too small, and book the first free one
5. Every room that was tested and rejected is returned as an alternative
   with its conflicting bookings; if nothing was free, RoomConflictError
   carries the same list

Two windows conflict when existing.start < new.end AND existing.end > new.start,
so back-to-back bookings are fine.

Concurrency: the check and the insert happen in one session and one
transaction. That serializes on databases that lock on write, but two
processes can still race on others.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from taskpilot.core.errors import RoomConflictError
from taskpilot.core.timeutils import as_utc, utc_now
from taskpilot.models import MeetingRoom, RoomReservation
from taskpilot.services.slots.models import ReservationRequest
from taskpilot.services.slots.text import dedupe, ensure_string

logger = logging.getLogger("taskpilot.services.room_booking")

DEFAULT_ROOMS = [
    {"name": "Meeting room A", "location": "Head office", "capacity": 6},
    {"name": "Meeting room B", "location": "Head office", "capacity": 10},
    {"name": "Focus room 1", "location": "Head office", "capacity": 4},
]

DEFAULT_DURATION_MINUTES = 60
MIN_DURATION_MINUTES = 15

# A start in the past is moved this far past "now"
PAST_START_SHIFT = timedelta(minutes=5)


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open [start, end) overlap: touching boundaries do not overlap."""
    return as_utc(start_a) < as_utc(end_b) and as_utc(end_a) > as_utc(start_b)


def format_room_name(value: str) -> str:
    """Capitalize each word's first letter, leave the rest alone."""
    return " ".join(part[:1].upper() + part[1:] for part in value.split())


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------

@dataclass
class AlternativeRoom:
    """A room that was tried and rejected, with what blocked it."""
    room: Dict[str, Any]
    conflicts: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"room": self.room, "conflicts": self.conflicts}


@dataclass
class ReservationOutcome:
    reservation: Dict[str, Any]
    room: Dict[str, Any]
    start: datetime
    end: datetime
    alternatives: List[AlternativeRoom] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"reservation": self.reservation, "room": self.room}
        if self.alternatives:
            data["alternatives"] = [alternative.to_dict() for alternative in self.alternatives]
        return data


@dataclass
class _NormalizedRequest:
    start: datetime
    end: datetime
    title: str
    description: Optional[str]
    preferred_room: Optional[str]
    attendees: List[str]
    capacity: Optional[int]
    notes: Optional[str]

    @property
    def capacity_need(self) -> int:
        return self.capacity or len(self.attendees)


# ---------------------------------------------------------------------------
# RESOLVER
# ---------------------------------------------------------------------------

class RoomBookingResolver:
    """
    Usage:
        resolver = RoomBookingResolver(SessionLocal)
        outcome = resolver.reserve("user-1", request)
        outcome.room["name"]  # "Meeting room B"
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or utc_now

    def reserve(self, user_id: str, request: ReservationRequest) -> ReservationOutcome:
        """
        Book the preferred room or the best free alternative.

        Raises:
            RoomConflictError: No room satisfies capacity and time; carries
                the alternatives that were tried
        """
        with self._session_factory() as db:
            self.ensure_default_rooms(db)
            normalized = self.normalize_request(request)
            alternatives: List[AlternativeRoom] = []

            preferred: Optional[MeetingRoom] = None
            if normalized.preferred_room:
                preferred = self.find_or_create_room(db, normalized.preferred_room, normalized.capacity_need)
                conflicts = self.find_conflicts(db, preferred.id, normalized.start, normalized.end)
                if not conflicts:
                    return self._book(db, user_id, preferred, normalized, alternatives)
                alternatives.append(self._alternative(preferred, conflicts))
                logger.info(
                    f"Preferred room '{preferred.name}' is taken "
                    f"({len(conflicts)} conflict(s)), looking for another room"
                )

            room = self._best_available_room(
                db, normalized, alternatives, exclude_id=preferred.id if preferred else None
            )
            if room is None:
                db.rollback()
                unique = self._unique(alternatives)
                logger.info(f"No room available for user {user_id}, {len(unique)} alternative(s) tried")
                raise RoomConflictError(
                    "No rooms are available for this time slot.",
                    alternatives=[alternative.to_dict() for alternative in unique],
                )

            return self._book(db, user_id, room, normalized, alternatives)

    # -----------------------------------------------------------------------
    # STEPS
    # -----------------------------------------------------------------------

    def ensure_default_rooms(self, db: Session) -> None:
        if db.scalar(select(func.count()).select_from(MeetingRoom)):
            return
        for room in DEFAULT_ROOMS:
            db.add(MeetingRoom(**room))
        db.flush()
        logger.info(f"Seeded {len(DEFAULT_ROOMS)} default meeting rooms")

    def normalize_request(self, request: ReservationRequest) -> _NormalizedRequest:
        now = as_utc(self._clock())
        duration = request.duration_minutes if request.duration_minutes > 0 else DEFAULT_DURATION_MINUTES

        start = as_utc(request.start)
        end = as_utc(request.end)
        if start < now:
            start = now + PAST_START_SHIFT
        if end <= start:
            end = start + timedelta(minutes=max(MIN_DURATION_MINUTES, duration))

        attendees = dedupe(entry.strip() for entry in request.attendees if entry and entry.strip())
        capacity = request.capacity if request.capacity and request.capacity > 0 else None

        return _NormalizedRequest(
            start=start,
            end=end,
            title=ensure_string(request.title) or "Meeting",
            description=ensure_string(request.description),
            preferred_room=ensure_string(request.preferred_room),
            attendees=attendees,
            capacity=capacity,
            notes=ensure_string(request.notes),
        )

    def find_or_create_room(self, db: Session, name: str, capacity_need: int = 0) -> MeetingRoom:
        """Case-insensitive lookup; capacity is raised when needed, never lowered."""
        room = db.scalars(
            select(MeetingRoom).where(func.lower(MeetingRoom.name) == name.strip().lower())
        ).first()

        if room is None:
            room = MeetingRoom(name=format_room_name(name), capacity=capacity_need or None)
            db.add(room)
            db.flush()
            logger.info(f"Created ad hoc room '{room.name}'")
            return room

        if capacity_need and (room.capacity is None or room.capacity < capacity_need):
            logger.info(f"Raising capacity of '{room.name}' from {room.capacity} to {capacity_need}")
            room.capacity = capacity_need
            db.flush()
        return room

    def find_conflicts(self, db: Session, room_id: UUID, start: datetime, end: datetime) -> List[RoomReservation]:
        return list(
            db.scalars(
                select(RoomReservation)
                .where(
                    RoomReservation.room_id == room_id,
                    RoomReservation.start < end,
                    RoomReservation.end > start,
                )
                .order_by(RoomReservation.start)
            ).all()
        )

    def _best_available_room(
        self,
        db: Session,
        request: _NormalizedRequest,
        alternatives: List[AlternativeRoom],
        exclude_id: Optional[UUID] = None,
    ) -> Optional[MeetingRoom]:
        need = request.capacity_need
        rooms = db.scalars(select(MeetingRoom)).all()

        candidates = [
            room for room in rooms
            if room.id != exclude_id and (not need or room.capacity is None or room.capacity >= need)
        ]
        # Unknown capacity sorts as if it fit exactly
        candidates.sort(key=lambda room: (room.capacity if room.capacity is not None else need, room.name))

        for room in candidates:
            conflicts = self.find_conflicts(db, room.id, request.start, request.end)
            if not conflicts:
                return room
            alternatives.append(self._alternative(room, conflicts))
        return None

    def _book(
        self,
        db: Session,
        user_id: str,
        room: MeetingRoom,
        request: _NormalizedRequest,
        alternatives: List[AlternativeRoom],
    ) -> ReservationOutcome:
        reservation = RoomReservation(
            room_id=room.id,
            user_id=user_id,
            title=request.title,
            description=request.description,
            start=request.start,
            end=request.end,
            attendees=request.attendees,
            notes=request.notes,
        )
        db.add(reservation)
        db.commit()
        logger.info(
            f"Room '{room.name}' reserved for user {user_id}: "
            f"{request.start.isoformat()} - {request.end.isoformat()}"
        )
        return ReservationOutcome(
            reservation=reservation.to_dict(),
            room=room.to_dict(),
            start=request.start,
            end=request.end,
            alternatives=self._unique(alternatives),
        )

    @staticmethod
    def _alternative(room: MeetingRoom, conflicts: List[RoomReservation]) -> AlternativeRoom:
        return AlternativeRoom(
            room=room.to_dict(),
            conflicts=[
                {
                    "title": conflict.title,
                    "start": as_utc(conflict.start).isoformat(),
                    "end": as_utc(conflict.end).isoformat(),
                }
                for conflict in conflicts
            ],
        )

    @staticmethod
    def _unique(alternatives: List[AlternativeRoom]) -> List[AlternativeRoom]:
        seen = set()
        unique = []
        for alternative in alternatives:
            room_id = alternative.room["id"]
            if room_id in seen:
                continue
            seen.add(room_id)
            unique.append(alternative)
        return unique
