"""
Room Handler - Handles room.reserve via RoomBookingResolver.

Flow:
1. Normalize the request (window, room, title, attendees)
2. Ask for a time when none could be found
3. Reserve through the resolver; no free room is a NOT_FOUND result that
   carries the alternatives the resolver tried
4. Mirror the booking in the calendar only when asked: the text mentions
   the calendar or agenda, or a calendar or createCalendarEvent flag is
   set. The event uses the reserved window, not the raw request

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

import logging
from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.core.errors import RoomConflictError
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult, HandlerResultType
from taskpilot.services.slots.options import wants_calendar_event

logger = logging.getLogger("taskpilot.services.intent_handlers.room")


class RoomHandler(IntentHandler):
    """
    Handler for meeting room reservations.

    The resolver is looked up as the "room_resolver" service on the
    context, so tests can swap it.
    """

    @property
    def handler_name(self) -> str:
        return "room"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.ROOM_RESERVE.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)

        request = context.normalizer.reservation(intent.parameters, context.text)
        if request is None:
            return self._clarify(
                context,
                "When do you need the room? For example: Friday at 14:30 for 30 minutes.",
            )

        resolver = context.get_service("room_resolver")
        try:
            outcome = resolver.reserve(context.user_id, request)
        except RoomConflictError as e:
            logger.info(f"[{context.request_id}] No room available, {len(e.alternatives)} alternative(s)")
            return self._failed(
                context,
                str(e),
                result_type=HandlerResultType.NOT_FOUND,
                result={"alternatives": e.alternatives},
                parameters=request.to_wire(),
            )

        result = outcome.to_dict()
        message = f"Room {outcome.room['name']} reserved."

        if wants_calendar_event(intent.parameters, context.text):
            event, suffix = await self._add_calendar_event(
                context,
                title=request.title,
                start=outcome.start,
                end=outcome.end,
                description=request.description,
                location=outcome.room["name"],
            )
            message += suffix
            if event is not None:
                result["event"] = event

        return self._completed(context, message, result=result, parameters=request.to_wire())
