"""
Math Handler - Handles math.calculate.

Sanitization and evaluation failures are MathEvaluationError; they are
reported to the user, never raised.

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.core.errors import MathEvaluationError
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult
from taskpilot.services.slots.math_eval import evaluate


class MathHandler(IntentHandler):

    @property
    def handler_name(self) -> str:
        return "math"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.MATH_CALCULATE.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)

        expression, precision = context.normalizer.math(intent.parameters, context.text)
        if not expression:
            return self._clarify(context, "Which calculation should I do? For example: 12 * (3 + 4).")

        try:
            evaluation = evaluate(expression, precision)
        except MathEvaluationError as e:
            return self._failed(
                context,
                f"The calculation failed: {e}",
                parameters={"expression": expression},
            )

        return self._completed(
            context,
            f"Result: {evaluation.formatted}",
            result=evaluation.to_wire(),
            parameters={"expression": evaluation.original_expression},
        )
