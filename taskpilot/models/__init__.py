"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from taskpilot.models.room import MeetingRoom, RoomReservation
from taskpilot.models.task import Task, Reminder
from taskpilot.models.recurrence import RecurrenceRule

__all__ = [
    "MeetingRoom",
    "RoomReservation",
    "Task",
    "Reminder",
    "RecurrenceRule",
]
