"""
Misc Handler - Handles the intents without a domain action.

This handler is responsible for:
- grocery.list: Return a shopping list (from the request or a default one)
- file.summarize: Not connected yet; tells the user what to do instead
- unknown: Ask the user to rephrase

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult, HandlerResultType

UNKNOWN_MESSAGE = "I'm not sure what you mean. Could you rephrase?"


class MiscHandler(IntentHandler):

    @property
    def handler_name(self) -> str:
        return "misc"

    @property
    def supported_intent_types(self) -> List[str]:
        return [
            IntentLabel.GROCERY_LIST.value,
            IntentLabel.FILE_SUMMARIZE.value,
            IntentLabel.UNKNOWN.value,
        ]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)

        if intent.intent == IntentLabel.GROCERY_LIST:
            items = context.normalizer.groceries(intent.parameters, context.text)
            return self._completed(
                context,
                "Here is a shopping list you can use.",
                result={"items": [item.to_wire() for item in items]},
            )

        if intent.intent == IntentLabel.FILE_SUMMARIZE:
            return self._failed(
                context,
                "I can't read files yet. Paste the text you want summarized and I'll take it from there.",
                result_type=HandlerResultType.NOT_FOUND,
            )

        return self._clarify(context, UNKNOWN_MESSAGE)
