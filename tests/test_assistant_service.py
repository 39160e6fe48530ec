"""
Tests for AssistantService and the intent handlers behind it.

Requests run through the keyword classifier (no provider configured), the
real normalizer with a fixed clock, the in-memory FakeActions and the
SQLite-backed room resolver.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from conftest import AMSTERDAM, FIXED_NOW, FakeActions

from taskpilot.ai.intent import FallbackIntentClassifier, ProviderIntentStrategy
from taskpilot.ai.providers import AIResponse, ProviderType
from taskpilot.services.assistant_service import GENERIC_FAILURE_MESSAGE, AssistantService
from taskpilot.services.intent_handlers import TaskHandler
from taskpilot.services.intent_handlers.misc_handler import UNKNOWN_MESSAGE

E2E_TEXT = "book a 30-minute team meeting Friday at 14:30 in meeting room B"


def _service(actions, room_resolver, keyword_classifier, normalizer, **kwargs):
    return AssistantService(
        actions=actions,
        room_resolver=room_resolver,
        classifier=kwargs.pop("classifier", keyword_classifier),
        normalizer=normalizer,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# ROOMS
# ---------------------------------------------------------------------------

class TestRoomRequests:

    @pytest.mark.asyncio
    async def test_end_to_end_booking(self, assistant, actions):
        response = await assistant.handle("user-1", E2E_TEXT)

        assert response.intent == "room.reserve"
        assert response.message == "Room Meeting room B reserved."
        assert response.result["room"]["name"] == "Meeting room B"

        reservation = response.result["reservation"]
        start = datetime.fromisoformat(reservation["start"]).astimezone(AMSTERDAM)
        end = datetime.fromisoformat(reservation["end"]).astimezone(AMSTERDAM)
        assert start == datetime(2026, 10, 23, 14, 30, tzinfo=AMSTERDAM)
        assert end - start == timedelta(minutes=30)
        assert reservation["title"] == "Team meeting"
        assert response.parameters["preferredRoom"] == "Meeting room B"
        # No calendar wording: nothing mirrored
        assert actions.events == []

    @pytest.mark.asyncio
    async def test_booking_with_calendar_mirror(self, assistant, actions):
        response = await assistant.handle(
            "user-1", "book meeting room A tomorrow at 11 and add it to my calendar"
        )

        assert response.message == "Room Meeting room A reserved. Calendar event added."
        assert actions.events[0].location == "Meeting room A"
        assert "event" in response.result

    @pytest.mark.asyncio
    async def test_calendar_mirror_uses_the_reserved_window(self, assistant, actions):
        # 09:00 today is already past, so the booking moves to five minutes from now
        response = await assistant.handle(
            "user-1", "book meeting room A today at 09:00 and add it to my calendar"
        )

        reservation = response.result["reservation"]
        event = actions.events[0]
        assert event.start == datetime.fromisoformat(reservation["start"])
        assert event.end == datetime.fromisoformat(reservation["end"])
        assert event.start == FIXED_NOW + timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_no_time_asks_for_one(self, assistant):
        response = await assistant.handle("user-1", "book meeting room A")

        assert response.message.startswith("When do you need the room?")
        assert response.result is None

    @pytest.mark.asyncio
    async def test_all_rooms_taken(self, assistant):
        for _ in range(3):
            booked = await assistant.handle("user-1", "book a room tomorrow at 10")
            assert booked.message.endswith("reserved.")

        response = await assistant.handle("user-2", "book a room tomorrow at 10")

        assert response.message == "No rooms are available for this time slot."
        assert len(response.result["alternatives"]) == 3


# ---------------------------------------------------------------------------
# REMINDERS
# ---------------------------------------------------------------------------

class TestReminderRequests:

    @pytest.mark.asyncio
    async def test_create(self, assistant, actions):
        response = await assistant.handle("user-1", "remind me to call Anna tomorrow at 10")

        assert response.intent == "reminder.create"
        assert response.message == "Reminder scheduled."
        assert actions.reminders[0]["text"] == "call Anna"
        assert actions.reminders[0]["remind_at"] == "2026-10-20T10:00:00+02:00"
        assert actions.events == []

    @pytest.mark.asyncio
    async def test_calendar_mirror(self, assistant, actions):
        response = await assistant.handle(
            "user-1", "remind me to call Anna tomorrow at 10 and put it in my calendar"
        )

        assert response.message == "Reminder scheduled. Calendar event added."
        assert actions.events[0].title == "call Anna"
        assert actions.events[0].end - actions.events[0].start == timedelta(minutes=30)

    @pytest.mark.asyncio
    async def test_calendar_failure_keeps_the_reminder(self, room_resolver, keyword_classifier, normalizer):
        actions = FakeActions(calendar_error="calendar offline")
        service = _service(actions, room_resolver, keyword_classifier, normalizer)

        response = await service.handle(
            "user-1", "remind me to call Anna tomorrow at 10 and put it in my calendar"
        )

        assert len(actions.reminders) == 1
        assert "Calendar event could not be created" in response.message
        assert "calendar offline" in response.message
        assert "event" not in response.result

    @pytest.mark.asyncio
    async def test_missing_time(self, assistant, actions):
        response = await assistant.handle("user-1", "remind me to water the plants")

        assert response.message.startswith("When should I remind you?")
        assert response.parameters == {"description": "water the plants"}
        assert actions.reminders == []

    @pytest.mark.asyncio
    async def test_missing_description(self, assistant):
        response = await assistant.handle("user-1", "remind me tomorrow")

        assert response.message.startswith("What should I remind you about?")

    @pytest.mark.asyncio
    async def test_list(self, assistant):
        empty = await assistant.handle("user-1", "show my reminders")
        await assistant.handle("user-1", "remind me to call Anna tomorrow at 10")
        one = await assistant.handle("user-1", "show my reminders")

        assert empty.message == "You have no reminders."
        assert one.message == "You have 1 reminder."
        assert len(one.result["reminders"]) == 1

    @pytest.mark.asyncio
    async def test_structured_parameters_from_a_provider(self, actions, room_resolver, normalizer):
        provider = MagicMock()
        provider.provider_type = ProviderType.OPENAI
        provider.is_configured = True
        provider.generate_json = AsyncMock(return_value=AIResponse(
            content='{"intent": "reminder.create", "confidence": 0.92, '
                    '"parameters": {"description": "call Anna", "dateTime": "2026-10-21T16:00"}}',
            provider=ProviderType.OPENAI,
            model="test-model",
        ))
        classifier = FallbackIntentClassifier([ProviderIntentStrategy(provider, timeout=1.0)])
        service = _service(actions, room_resolver, None, normalizer, classifier=classifier)

        response = await service.handle("user-1", "ping me about Anna on wednesday afternoon")

        assert response.confidence == 0.92
        assert actions.reminders[0]["text"] == "call Anna"
        assert actions.reminders[0]["remind_at"] == "2026-10-21T16:00:00+02:00"


# ---------------------------------------------------------------------------
# TASKS
# ---------------------------------------------------------------------------

class TestTaskRequests:

    @pytest.mark.asyncio
    async def test_create_and_list(self, assistant, actions):
        empty = await assistant.handle("user-1", "what are my tasks")
        created = await assistant.handle("user-1", "add renew passport to my todo list")
        listed = await assistant.handle("user-1", "what are my tasks")

        assert empty.message == "You have no tasks yet."
        assert created.message == "I added your task."
        assert created.parameters["text"] == "renew passport"
        assert actions.tasks[0]["title"] == "renew passport"
        assert listed.message == "You have 1 open task."

    @pytest.mark.asyncio
    async def test_tasks_are_per_user(self, assistant):
        await assistant.handle("user-1", "add renew passport to my todo list")

        response = await assistant.handle("user-2", "what are my tasks")

        assert response.message == "You have no tasks yet."


# ---------------------------------------------------------------------------
# CALENDAR
# ---------------------------------------------------------------------------

class TestCalendarRequests:

    @pytest.mark.asyncio
    async def test_create(self, assistant, actions):
        response = await assistant.handle("user-1", "put the dentist appointment on 12/11 in my calendar")

        assert response.intent == "calendar.create"
        assert response.message == "Calendar event added."
        event = actions.events[0]
        assert event.title == "Taskpilot appointment"
        assert event.start == datetime(2026, 11, 12, 9, 0, tzinfo=AMSTERDAM)
        assert event.end - event.start == timedelta(minutes=30)

    @pytest.mark.asyncio
    async def test_transport_failure_fails_the_request(self, room_resolver, keyword_classifier, normalizer):
        service = _service(FakeActions(calendar_error="quota exceeded"), room_resolver, keyword_classifier, normalizer)

        response = await service.handle("user-1", "put the dentist appointment on 12/11 in my calendar")

        assert response.message == "The calendar event could not be created: quota exceeded."
        assert response.result is None


# ---------------------------------------------------------------------------
# E-MAIL
# ---------------------------------------------------------------------------

class TestEmailRequests:

    @pytest.mark.asyncio
    async def test_send(self, assistant, actions):
        response = await assistant.handle("user-1", "send an e-mail to anna@example.com")

        assert response.intent == "email.send"
        assert response.message == "Email sent to anna@example.com."
        assert response.parameters["to"] == "anna@example.com"
        assert actions.emails[0].to == "anna@example.com"
        assert actions.emails[0].body

    @pytest.mark.asyncio
    async def test_send_without_recipient(self, assistant, actions):
        response = await assistant.handle("user-1", "send an email to the landlord")

        assert response.message == "I couldn't find a recipient. Who should I send the email to?"
        assert actions.emails == []

    @pytest.mark.asyncio
    async def test_send_failure(self, room_resolver, keyword_classifier, normalizer):
        service = _service(FakeActions(mail_error="smtp down"), room_resolver, keyword_classifier, normalizer)

        response = await service.handle("user-1", "send an e-mail to anna@example.com")

        assert response.message == "The email could not be sent: smtp down."

    @pytest.mark.asyncio
    async def test_write_only_drafts(self, assistant, actions):
        response = await assistant.handle("user-1", "draft an email to the landlord about the heating")

        assert response.intent == "email.write"
        assert response.message == "I drafted an email for you."
        assert response.result["template"]["subject"]
        assert actions.emails == []


# ---------------------------------------------------------------------------
# MATH / MISC
# ---------------------------------------------------------------------------

class TestOtherRequests:

    @pytest.mark.asyncio
    async def test_math(self, assistant):
        response = await assistant.handle("user-1", "what is 12 * (3 + 4)")

        assert response.intent == "math.calculate"
        assert response.message == "Result: 84"
        assert response.result["formatted"] == "84"

    @pytest.mark.asyncio
    async def test_math_failure(self, assistant):
        response = await assistant.handle("user-1", "calculate (1+2")

        assert response.message == "The calculation failed: The parentheses do not match."

    @pytest.mark.asyncio
    async def test_grocery_list(self, assistant):
        response = await assistant.handle("user-1", "make me a shopping list")

        assert response.message == "Here is a shopping list you can use."
        assert len(response.result["items"]) == 5

    @pytest.mark.asyncio
    async def test_file_summary_is_not_available(self, assistant):
        response = await assistant.handle("user-1", "summarize this pdf")

        assert response.intent == "file.summarize"
        assert response.message.startswith("I can't read files yet.")

    @pytest.mark.asyncio
    async def test_unknown(self, assistant):
        response = await assistant.handle("user-1", "hello there")

        assert response.intent == "unknown"
        assert response.message == UNKNOWN_MESSAGE
        assert response.confidence is None


# ---------------------------------------------------------------------------
# ROUTING
# ---------------------------------------------------------------------------

class TestRouting:

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_generic_message(self, assistant, actions):
        actions.list_tasks = AsyncMock(side_effect=RuntimeError("database is locked"))

        response = await assistant.handle("user-1", "what are my tasks")

        assert response.intent == "task.list"
        assert response.message == GENERIC_FAILURE_MESSAGE
        assert response.result is None

    def test_every_label_needs_a_handler(self, actions, room_resolver, keyword_classifier, normalizer):
        with pytest.raises(ValueError, match="No handler registered"):
            _service(actions, room_resolver, keyword_classifier, normalizer, handlers=[TaskHandler()])
