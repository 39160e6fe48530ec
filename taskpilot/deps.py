"""
Dependencies module - reusable FastAPI dependencies for route handlers.

get_assistant_service builds the pipeline once per process from settings.
Tests replace it through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, status

from taskpilot.ai.intent import build_default_classifier
from taskpilot.db.session import SessionLocal
from taskpilot.services.actions import DatabaseActions
from taskpilot.services.assistant_service import AssistantService
from taskpilot.services.room_booking import RoomBookingResolver


@lru_cache
def get_assistant_service() -> AssistantService:
    return AssistantService(
        actions=DatabaseActions(SessionLocal),
        room_resolver=RoomBookingResolver(SessionLocal),
        classifier=build_default_classifier(),
    )


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    The caller's user id from the X-User-Id header.

    Authentication lives in front of this service; whoever terminates it
    forwards the user id. Returns None so the route can fall back to the
    request body.
    """
    if x_user_id is None:
        return None
    x_user_id = x_user_id.strip()
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id header is empty",
        )
    return x_user_id
