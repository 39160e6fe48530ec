"""
Intent Handlers Package - Strategy pattern for intent processing.

Each handler is responsible for a group of intent labels. AssistantService
builds a registry keyed by label from supported_intent_types.

Usage:
    from taskpilot.services.intent_handlers import IntentHandler, HandlerContext

    class MyHandler(IntentHandler):
        @property
        def handler_name(self) -> str:
            return "my_handler"

        @property
        def supported_intent_types(self) -> List[str]:
            return ["my.label"]

        async def handle(self, intent, context) -> HandlerResult:
            ...
"""

from taskpilot.services.intent_handlers.base import (
    IntentHandler,
    HandlerContext,
)
from taskpilot.services.intent_handlers.task_handler import TaskHandler
from taskpilot.services.intent_handlers.reminder_handler import ReminderHandler
from taskpilot.services.intent_handlers.calendar_handler import CalendarHandler
from taskpilot.services.intent_handlers.room_handler import RoomHandler
from taskpilot.services.intent_handlers.email_handler import EmailHandler
from taskpilot.services.intent_handlers.math_handler import MathHandler
from taskpilot.services.intent_handlers.misc_handler import MiscHandler

__all__ = [
    "IntentHandler",
    "HandlerContext",
    "TaskHandler",
    "ReminderHandler",
    "CalendarHandler",
    "RoomHandler",
    "EmailHandler",
    "MathHandler",
    "MiscHandler",
]
