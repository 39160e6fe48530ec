"""
Assistant Service - the request pipeline.

text -> FallbackIntentClassifier -> IntentHandler (normalizer + action) -> AssistantResponse

Architecture:
=============
```
┌──────────────────────┐
│ "book a 30-minute    │
│  team meeting Friday │
│  at 14:30 in room B" │
└──────────┬───────────┘
           ▼
┌──────────────────────┐
│ Intent Classifier    │  OpenAI -> Ollama -> keywords
└──────────┬───────────┘
           ▼
┌──────────────────────┐
│ Handler registry     │  label -> IntentHandler
└──────────┬───────────┘
           ▼
┌──────────────────────┐
│ Normalizer + action  │  DomainActions / RoomBookingResolver
└──────────────────────┘
```

Nothing in here raises to the caller: classification never fails, and an
unexpected handler exception becomes an error message.
"""

import logging
import time
import uuid
from typing import Dict, Optional, Sequence

from taskpilot.ai.intent import FallbackIntentClassifier, build_default_classifier
from taskpilot.ai.intent.schemas import IntentLabel
from taskpilot.ai.monitoring import ai_logger
from taskpilot.services.actions import DomainActions
from taskpilot.services.intent_handlers import (
    CalendarHandler,
    EmailHandler,
    HandlerContext,
    IntentHandler,
    MathHandler,
    MiscHandler,
    ReminderHandler,
    RoomHandler,
    TaskHandler,
)
from taskpilot.services.intent_result import AssistantResponse, HandlerResult
from taskpilot.services.room_booking import RoomBookingResolver
from taskpilot.services.slots import ParameterNormalizer

logger = logging.getLogger("taskpilot.services.assistant")

GENERIC_FAILURE_MESSAGE = "Something went wrong while handling your request. Please try again."


def default_handlers() -> Sequence[IntentHandler]:
    return [
        TaskHandler(),
        ReminderHandler(),
        CalendarHandler(),
        RoomHandler(),
        EmailHandler(),
        MathHandler(),
        MiscHandler(),
    ]


class AssistantService:
    """
    Usage:
        service = AssistantService(
            classifier=build_default_classifier(),
            actions=DatabaseActions(SessionLocal),
            room_resolver=RoomBookingResolver(SessionLocal),
        )
        response = await service.handle("user-1", "what is 2+2")
        response.message  # "Result: 4"

    All collaborators are injected; the service keeps no per-request state.
    """

    def __init__(
        self,
        actions: DomainActions,
        room_resolver: RoomBookingResolver,
        classifier: Optional[FallbackIntentClassifier] = None,
        normalizer: Optional[ParameterNormalizer] = None,
        handlers: Optional[Sequence[IntentHandler]] = None,
    ):
        self.actions = actions
        self.room_resolver = room_resolver
        self.classifier = classifier or build_default_classifier()
        self.normalizer = normalizer or ParameterNormalizer()
        self.handlers: Dict[str, IntentHandler] = {}
        for handler in handlers or default_handlers():
            for label in handler.supported_intent_types:
                self.handlers[label] = handler

        missing = [label.value for label in IntentLabel if label.value not in self.handlers]
        if missing:
            raise ValueError(f"No handler registered for: {', '.join(missing)}")

    async def handle(self, user_id: str, text: str, request_id: Optional[str] = None) -> AssistantResponse:
        """
        Run one request through the pipeline.

        Args:
            user_id: Owner of anything the request creates
            text: The user's sentence
            request_id: Optional trace id (generated when omitted)
        """
        request_id = request_id or str(uuid.uuid4())[:8]
        start_time = time.time()

        intent = await self.classifier.classify(text, request_id=request_id)
        handler = self.handlers[intent.intent.value]

        context = HandlerContext(
            user_id=user_id,
            request_id=request_id,
            text=text,
            actions=self.actions,
            normalizer=self.normalizer,
            start_time=start_time,
            _service_overrides={"room_resolver": self.room_resolver},
        )

        try:
            outcome = await handler.handle(intent, context)
        except Exception as e:
            logger.exception(f"[{request_id}] {handler.handler_name} handler failed")
            ai_logger.log_error(
                request_id=request_id,
                error=str(e),
                stage="routing",
                metadata={"intent": intent.intent.value, "handler": handler.handler_name},
            )
            return AssistantResponse(
                intent=intent.intent.value,
                parameters=dict(intent.parameters),
                message=GENERIC_FAILURE_MESSAGE,
                confidence=intent.confidence,
            )

        logger.info(
            f"[{request_id}] {intent.intent.value} -> {outcome.result_type.value} "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return self._to_response(intent.intent.value, intent.parameters, intent.confidence, outcome)

    @staticmethod
    def _to_response(intent: str, raw_parameters: dict, confidence: Optional[float], outcome: HandlerResult) -> AssistantResponse:
        parameters = outcome.parameters if outcome.parameters is not None else dict(raw_parameters)
        return AssistantResponse(
            intent=intent,
            parameters=parameters,
            message=outcome.message or None,
            result=outcome.result,
            confidence=confidence,
        )
