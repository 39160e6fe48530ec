"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- A fixed clock (Monday 19 October 2026, 10:00 Amsterdam time)
- An in-memory DomainActions fake
- The assistant service wired with keyword-only classification
- Test client (FastAPI TestClient)
"""

import os

# Settings are read at import time: no remote providers, no background loop
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RECURRENCE_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["OLLAMA_HOST"] = ""
os.environ["TIMEZONE"] = "Europe/Amsterdam"

import pytest
from datetime import datetime, timedelta
from typing import Any, Dict, Generator, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from taskpilot.ai.intent import FallbackIntentClassifier
from taskpilot.core.errors import DownstreamActionError
from taskpilot.db.base import Base
from taskpilot.deps import get_assistant_service
from taskpilot.main import app
from taskpilot.services.actions import (
    CalendarEventDraft,
    DomainActions,
    EmailMessage,
    TaskDraft,
)
from taskpilot.services.assistant_service import AssistantService
from taskpilot.services.room_booking import RoomBookingResolver
from taskpilot.services.slots import ParameterNormalizer
import taskpilot.models  # noqa: F401


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests (no PostgreSQL dependency)
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


# ---------------------------------------------------------------------------
# CLOCK
# ---------------------------------------------------------------------------

AMSTERDAM = ZoneInfo("Europe/Amsterdam")

# Monday; the following Friday is 23 October 2026 (still summer time, UTC+2)
FIXED_NOW = datetime(2026, 10, 19, 10, 0, tzinfo=AMSTERDAM)


def fixed_clock() -> datetime:
    return FIXED_NOW


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def session_factory() -> Generator[sessionmaker, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields the session factory services are built with
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """A session for arranging and inspecting data directly."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# DOMAIN ACTIONS FAKE
# ---------------------------------------------------------------------------

class FakeActions(DomainActions):
    """
    In-memory DomainActions.

    calendar_error / mail_error make the transport calls raise
    DownstreamActionError with that reason.
    """

    def __init__(self, calendar_error: Optional[str] = None, mail_error: Optional[str] = None):
        self.calendar_error = calendar_error
        self.mail_error = mail_error
        self.tasks: List[Dict[str, Any]] = []
        self.reminders: List[Dict[str, Any]] = []
        self.events: List[CalendarEventDraft] = []
        self.emails: List[EmailMessage] = []

    async def create_task(self, user_id: str, draft: TaskDraft) -> Dict[str, Any]:
        task = {"id": str(uuid4()), "user_id": user_id, "title": draft.title, "status": draft.status}
        self.tasks.append(task)
        return task

    async def list_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        return [task for task in self.tasks if task["user_id"] == user_id and task["status"] != "done"]

    async def create_reminder(self, user_id: str, text: str, remind_at: datetime) -> Dict[str, Any]:
        reminder = {"id": str(uuid4()), "user_id": user_id, "text": text, "remind_at": remind_at.isoformat()}
        self.reminders.append(reminder)
        return reminder

    async def list_reminders(self, user_id: str) -> List[Dict[str, Any]]:
        return [reminder for reminder in self.reminders if reminder["user_id"] == user_id]

    async def send_email(self, user_id: str, message: EmailMessage) -> Dict[str, Any]:
        if self.mail_error:
            raise DownstreamActionError(self.mail_error, action="send_email")
        self.emails.append(message)
        return {"id": str(uuid4()), "to": message.to}

    async def create_calendar_event(self, user_id: str, event: CalendarEventDraft) -> Dict[str, Any]:
        if self.calendar_error:
            raise DownstreamActionError(self.calendar_error, action="create_calendar_event")
        self.events.append(event)
        return {"id": str(uuid4()), "title": event.title, "start": event.start.isoformat()}


@pytest.fixture
def actions() -> FakeActions:
    return FakeActions()


# ---------------------------------------------------------------------------
# SERVICE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def normalizer() -> ParameterNormalizer:
    return ParameterNormalizer(zone=AMSTERDAM, clock=fixed_clock)


@pytest.fixture
def room_resolver(session_factory: sessionmaker) -> RoomBookingResolver:
    return RoomBookingResolver(session_factory, clock=fixed_clock)


@pytest.fixture
def keyword_classifier() -> FallbackIntentClassifier:
    """Only the deterministic rules: no provider is configured in tests."""
    return FallbackIntentClassifier([])


@pytest.fixture
def assistant(
    actions: FakeActions,
    room_resolver: RoomBookingResolver,
    keyword_classifier: FallbackIntentClassifier,
    normalizer: ParameterNormalizer,
) -> AssistantService:
    return AssistantService(
        actions=actions,
        room_resolver=room_resolver,
        classifier=keyword_classifier,
        normalizer=normalizer,
    )


@pytest.fixture(scope="function")
def client(assistant: AssistantService) -> Generator[TestClient, None, None]:
    """
    Create a test client wired to the test assistant.

    Overrides the get_assistant_service dependency.
    """
    app.dependency_overrides[get_assistant_service] = lambda: assistant

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def in_days(days: int, hour: int = 9, minute: int = 0) -> datetime:
    """FIXED_NOW's date plus some days, at a local time of day."""
    return (FIXED_NOW + timedelta(days=days)).replace(hour=hour, minute=minute)
