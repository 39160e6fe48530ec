"""
Time helpers shared by the normalizer, room booking and recurrence engine.

Storage is always UTC. SQLite hands back naive datetimes even for
DateTime(timezone=True) columns, so anything read from the database goes
through as_utc() before it is compared with an aware value.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from taskpilot.core.config import settings


def local_zone(name: Optional[str] = None) -> ZoneInfo:
    """Return the zone user text is interpreted in."""
    return ZoneInfo(name or settings.TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, zone: Optional[ZoneInfo] = None) -> datetime:
    """Convert any datetime (naive = UTC) to the local zone."""
    return as_utc(value).astimezone(zone or local_zone())
