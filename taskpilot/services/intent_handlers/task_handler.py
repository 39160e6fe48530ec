"""
Task Handler - Handles to-do items.

This handler is responsible for:
- task.create: Add a task from "add X to my todo list" style requests
- task.list: List the user's open tasks

Design Pattern: Strategy Pattern - implements IntentHandler ABC
"""

import logging
from typing import List

from taskpilot.ai.intent.schemas import IntentLabel, IntentResult
from taskpilot.services.actions import TaskDraft
from taskpilot.services.intent_handlers.base import HandlerContext, IntentHandler
from taskpilot.services.intent_result import HandlerResult

logger = logging.getLogger("taskpilot.services.intent_handlers.task")


class TaskHandler(IntentHandler):
    """Handler for task.create and task.list."""

    @property
    def handler_name(self) -> str:
        return "task"

    @property
    def supported_intent_types(self) -> List[str]:
        return [IntentLabel.TASK_CREATE.value, IntentLabel.TASK_LIST.value]

    async def handle(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        self._log_entry(intent, context)
        if intent.intent == IntentLabel.TASK_LIST:
            return await self._list_tasks(context)
        return await self._create_task(intent, context)

    async def _create_task(self, intent: IntentResult, context: HandlerContext) -> HandlerResult:
        slots = context.normalizer.task(intent.parameters, context.text)
        if slots is None:
            return self._clarify(
                context,
                "I couldn't make out a clear task. What should I add to your list?",
            )

        task = await context.actions.create_task(
            context.user_id,
            TaskDraft(title=slots.text, status=slots.status),
        )
        logger.info(f"[{context.request_id}] Task added: {slots.text}")
        return self._completed(
            context,
            "I added your task.",
            result={"task": task},
            parameters=slots.to_wire(),
        )

    async def _list_tasks(self, context: HandlerContext) -> HandlerResult:
        tasks = await context.actions.list_tasks(context.user_id)
        if not tasks:
            message = "You have no tasks yet."
        elif len(tasks) == 1:
            message = "You have 1 open task."
        else:
            message = f"You have {len(tasks)} open tasks."
        return self._completed(context, message, result={"tasks": tasks})
