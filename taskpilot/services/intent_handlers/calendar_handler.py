"""
Calendar Handler - Handles calendar.create and meeting.schedule.

Calendar slots always resolve (default title, default start a few
minutes from now), so this handler never asks for clarification. The
calendar is the primary action here: a DownstreamActionError makes the
whole request fail with the transport's reason.

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

import logging
from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.ai.monitoring import ai_logger
from taskpilot.core.errors import DownstreamActionError
from taskpilot.services.actions import CalendarEventDraft
from taskpilot.services.intent_handlers.base import FOLLOW_UP_EVENT_LENGTH, HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult

logger = logging.getLogger("taskpilot.services.intent_handlers.calendar")


class CalendarHandler(IntentHandler):
    """Handler for calendar events and scheduled meetings."""

    @property
    def handler_name(self) -> str:
        return "calendar"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.CALENDAR_CREATE.value, IntentLabel.MEETING_SCHEDULE.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)

        slots = context.normalizer.calendar_event(intent.parameters, context.text)
        draft = CalendarEventDraft(
            title=slots.title,
            start=slots.start,
            end=slots.start + FOLLOW_UP_EVENT_LENGTH,
            description=slots.description,
            location=slots.location,
        )

        try:
            event = await context.actions.create_calendar_event(context.user_id, draft)
        except DownstreamActionError as e:
            ai_logger.log_action_failure(
                request_id=context.request_id,
                action=e.action or "create_calendar_event",
                error=str(e),
                intent=intent.intent.value,
            )
            return self._failed(
                context,
                f"The calendar event could not be created: {e}.",
                parameters=slots.to_wire(),
            )

        logger.info(f"[{context.request_id}] Calendar event '{slots.title}' created")
        return self._completed(
            context,
            "Calendar event added.",
            result={"event": event},
            parameters=slots.to_wire(),
        )
