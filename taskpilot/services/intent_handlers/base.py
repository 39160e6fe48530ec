"""
Base Intent Handler - Abstract interface for all intent handlers.

This module defines the contract that all intent handlers must follow.
It ensures consistent behavior regardless of which handler processes
the intent.

Design Pattern: Strategy Pattern
================================
The base class defines the interface, and each handler implements it.
AssistantService keeps a registry keyed by intent label and routes to
handlers without conditionals.

Example:
    handler = MathHandler()
    if handler.can_handle(intent, context):
        result = await handler.handle(intent, context)

Every call is terminal: nothing is carried from one request to the next.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from taskpilot.ai.intent.schemas import IntentResult
from taskpilot.ai.monitoring import ai_logger
from taskpilot.core.errors import DownstreamActionError
from taskpilot.services.actions import CalendarEventDraft, DomainActions
from taskpilot.services.intent_result import HandlerResult, HandlerResultType
from taskpilot.services.slots import ParameterNormalizer

logger = logging.getLogger("taskpilot.services.intent_handlers")

# Calendar events created alongside a reminder or a booking last this long
# when nothing else defines their end
FOLLOW_UP_EVENT_LENGTH = timedelta(minutes=30)


@dataclass
class HandlerContext:
    """
    Context shared between all handlers.

    Attributes:
        user_id: The ID of the user making the request
        request_id: Unique identifier for this request (for logging/tracing)
        text: The original sentence
        actions: Domain actions (tasks, reminders, mail, calendar)
        normalizer: Parameter normalizer for this request
        start_time: Request start time for latency tracking

    Usage:
        context = HandlerContext(
            user_id="user-1",
            request_id="a1b2c3d4",
            text="remind me to call Anna tomorrow at 10",
            actions=DatabaseActions(SessionLocal),
            normalizer=ParameterNormalizer(),
            start_time=time.time(),
        )
    """

    user_id: str
    request_id: str
    text: str
    actions: DomainActions
    normalizer: ParameterNormalizer
    start_time: float = field(default_factory=time.time)

    # Optional services (room resolver, ...) and test overrides
    _service_overrides: Dict[str, Any] = field(default_factory=dict)

    def get_service(self, name: str, default_factory: Any = None) -> Any:
        """
        Get a service with optional override for testing.

        Raises:
            ValueError: If service not found and no default provided
        """
        if name in self._service_overrides:
            return self._service_overrides[name]
        if default_factory is not None:
            return default_factory()
        raise ValueError(f"Service '{name}' not found and no default provided")

    @property
    def elapsed_ms(self) -> float:
        return (time.time() - self.start_time) * 1000


class IntentHandler(ABC):
    """
    Abstract base class for intent handlers.

    Responsibilities:
    - Declare the labels it handles (supported_intent_types)
    - Validate the slots it needs and ask for what is missing
    - Call the domain action and compose the message

    NOT Responsible For:
    - Classifying text (FallbackIntentClassifier's job)
    - Routing between handlers (AssistantService's job)
    - HTTP request/response handling (router's job)
    """

    @property
    @abstractmethod
    def handler_name(self) -> str:
        """Unique identifier for logging (e.g. "reminder")."""
        pass

    @property
    @abstractmethod
    def supported_intent_types(self) -> List[str]:
        """IntentLabel values this handler processes."""
        pass

    def can_handle(self, intent: IntentResult, context: HandlerContext) -> bool:
        return intent.intent.value in self.supported_intent_types

    @abstractmethod
    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        """
        Process the intent and return a result.

        Note:
            This method should NOT raise exceptions.
            Errors should be captured in HandlerResult.
        """
        pass

    # -----------------------------------------------------------------------
    # RESULT HELPERS
    # -----------------------------------------------------------------------

    def _completed(
        self,
        context: HandlerContext,
        message: str,
        result: Optional[Dict[str, Any]] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> HandlerResult:
        return self._finish(context, HandlerResult(
            success=True,
            result_type=HandlerResultType.COMPLETED,
            message=message,
            result=result,
            parameters=parameters,
        ))

    def _clarify(
        self,
        context: HandlerContext,
        message: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> HandlerResult:
        logger.info(f"[{context.request_id}] {self.handler_name}: asking for clarification")
        return self._finish(context, HandlerResult(
            success=False,
            result_type=HandlerResultType.CLARIFICATION,
            message=message,
            parameters=parameters,
        ))

    def _failed(
        self,
        context: HandlerContext,
        message: str,
        result_type: HandlerResultType = HandlerResultType.ERROR,
        result: Optional[Dict[str, Any]] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> HandlerResult:
        return self._finish(context, HandlerResult(
            success=False,
            result_type=result_type,
            message=message,
            result=result,
            parameters=parameters,
        ))

    def _finish(self, context: HandlerContext, result: HandlerResult) -> HandlerResult:
        result.processing_time_ms = context.elapsed_ms
        self._log_exit(context, result.success, result.processing_time_ms)
        return result

    # -----------------------------------------------------------------------
    # SECONDARY ACTIONS
    # -----------------------------------------------------------------------

    async def _add_calendar_event(
        self,
        context: HandlerContext,
        title: str,
        start: datetime,
        end: Optional[datetime] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], str]:
        """
        Create a follow-up calendar event after a primary action succeeded.

        Returns (event, message suffix). A DownstreamActionError never
        propagates: it becomes the suffix so the primary result survives.
        """
        draft = CalendarEventDraft(
            title=title,
            start=start,
            end=end or start + FOLLOW_UP_EVENT_LENGTH,
            description=description,
            location=location,
        )
        try:
            event = await context.actions.create_calendar_event(context.user_id, draft)
        except DownstreamActionError as e:
            ai_logger.log_action_failure(
                request_id=context.request_id,
                action=e.action or "create_calendar_event",
                error=str(e),
                intent=self.handler_name,
            )
            return None, f" Calendar event could not be created: {e}."
        return event, " Calendar event added."

    # -----------------------------------------------------------------------
    # LOGGING
    # -----------------------------------------------------------------------

    def _log_entry(self, intent: IntentResult, context: HandlerContext) -> None:
        logger.info(
            f"[{context.request_id}] {self.handler_name}.handle() called",
            extra={
                "handler": self.handler_name,
                "intent": intent.intent.value,
                "user_id": context.user_id,
            },
        )

    def _log_exit(self, context: HandlerContext, success: bool, processing_time_ms: float) -> None:
        logger.info(
            f"[{context.request_id}] {self.handler_name}.handle() completed",
            extra={
                "handler": self.handler_name,
                "success": success,
                "processing_time_ms": processing_time_ms,
            },
        )
