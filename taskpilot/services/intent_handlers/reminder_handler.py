"""
Reminder Handler - Handles timed reminders.

This handler is responsible for:
- reminder.create: Schedule a reminder, optionally mirrored in the calendar
- reminder.list: List the user's reminders

A reminder needs both a description and a time. When one is missing the
handler asks for exactly that one. The calendar event is secondary: if
it fails the reminder is still created and the message says why the
event is missing.

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

import logging
from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.core.timeutils import to_local
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult

logger = logging.getLogger("taskpilot.services.intent_handlers.reminder")


class ReminderHandler(IntentHandler):
    """Handler for reminder.create and reminder.list."""

    @property
    def handler_name(self) -> str:
        return "reminder"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.REMINDER_CREATE.value, IntentLabel.REMINDER_LIST.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)
        if intent.intent == IntentLabel.REMINDER_LIST:
            return await self._list_reminders(context)
        return await self._create_reminder(intent, context)

    async def _create_reminder(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        description, remind_at, slots = context.normalizer.reminder(intent.parameters, context.text)

        if not description:
            return self._clarify(
                context,
                "What should I remind you about? For example: remind me to call the client tomorrow at 10:00.",
            )
        if remind_at is None or slots is None:
            return self._clarify(
                context,
                "When should I remind you? Give me a date or a time, for example tomorrow at 09:00.",
                parameters={"description": description},
            )

        reminder = await context.actions.create_reminder(context.user_id, slots.description, slots.remind_at)
        result = {"reminder": reminder}
        message = "Reminder scheduled."

        if slots.add_to_calendar:
            event, suffix = await self._add_calendar_event(
                context,
                title=slots.description,
                start=slots.remind_at,
                description=context.text,
            )
            message += suffix
            if event is not None:
                result["event"] = event

        local_time = to_local(slots.remind_at, context.normalizer.zone)
        logger.info(f"[{context.request_id}] Reminder at {local_time.isoformat()}: {slots.description}")
        return self._completed(context, message, result=result, parameters=slots.to_wire())

    async def _list_reminders(self, context: HandlerContext) -> HandlerResult:
        reminders = await context.actions.list_reminders(context.user_id)
        if not reminders:
            message = "You have no reminders."
        elif len(reminders) == 1:
            message = "You have 1 reminder."
        else:
            message = f"You have {len(reminders)} reminders."
        return self._completed(context, message, result={"reminders": reminders})
