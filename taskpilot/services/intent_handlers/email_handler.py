"""
Email Handler - Handles email.write (draft only) and email.send.

email.write never needs a recipient: it returns the drafted template and
whatever routing was found. email.send needs a primary recipient and
sends either the explicit body from the request or the drafted one.

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

import logging
from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.ai.monitoring import ai_logger
from taskpilot.core.errors import DownstreamActionError
from taskpilot.services.actions import EmailMessage
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult
from taskpilot.services.slots.email_template import outgoing_body

logger = logging.getLogger("taskpilot.services.intent_handlers.email")


class EmailHandler(IntentHandler):
    """Handler for drafting and sending e-mail."""

    @property
    def handler_name(self) -> str:
        return "email"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.EMAIL_WRITE.value, IntentLabel.EMAIL_SEND.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)

        slots = context.normalizer.email(intent.parameters, context.text)
        parameters = slots.routing.to_wire()

        if intent.intent == IntentLabel.EMAIL_WRITE:
            return self._completed(
                context,
                "I drafted an email for you.",
                result={"template": slots.template.to_wire(), "routing": slots.routing.to_wire()},
                parameters=parameters,
            )

        if not slots.routing.to:
            return self._clarify(
                context,
                "I couldn't find a recipient. Who should I send the email to?",
                parameters=parameters,
            )

        message = EmailMessage(
            to=slots.routing.to,
            subject=slots.template.subject,
            body=outgoing_body(intent.parameters, slots.template),
            cc=list(slots.routing.cc),
            bcc=list(slots.routing.bcc),
        )
        try:
            sent = await context.actions.send_email(context.user_id, message)
        except DownstreamActionError as e:
            ai_logger.log_action_failure(
                request_id=context.request_id,
                action=e.action or "send_email",
                error=str(e),
                intent=intent.intent.value,
            )
            return self._failed(context, f"The email could not be sent: {e}.", parameters=parameters)

        logger.info(f"[{context.request_id}] Email sent to {message.to}")
        return self._completed(
            context,
            f"Email sent to {message.to}.",
            result={"email": sent, "subject": message.subject},
            parameters=parameters,
        )
