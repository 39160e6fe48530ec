"""
Recurrence Engine - spawns task instances from repeating templates.

A RecurrenceRule is attached to one or more template tasks. On every tick:
1. Select active rules with next_occurrence <= now
2. Per rule, in its own transaction:
   - claim the occurrence with a compare-and-set UPDATE on next_occurrence
     (step it forward, or deactivate the rule when nothing follows)
   - clone every template task (status "open", due at the next occurrence);
     the templates themselves are not modified
   - commit both together
3. A failing rule is rolled back and logged; the tick continues

Exactly-once: the claim and the clones commit atomically, and the claim
only succeeds while next_occurrence still holds the value that was read.
A second process running the same tick gets rowcount 0 and skips the rule.
RecurrenceScheduler additionally never lets two ticks overlap in-process.

Frequencies (RRULE-like, case-insensitive):
    FREQ=DAILY    +1 day
    FREQ=WEEKLY   +7 days
    FREQ=MONTHLY  +1 calendar month, day clamped to the month's length
Anything else has no next occurrence.
"""

import asyncio
import calendar
import logging
import re
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from taskpilot.core.errors import InvalidRecurrenceRuleError, NotFoundError
from taskpilot.core.timeutils import as_utc, utc_now
from taskpilot.models import RecurrenceRule, Task

logger = logging.getLogger("taskpilot.services.recurrence")

_FREQUENCY = re.compile(r"FREQ=(DAILY|WEEKLY|MONTHLY)\b")

SPAWNED_STATUS = "open"


# ---------------------------------------------------------------------------
# FREQUENCY STEP
# ---------------------------------------------------------------------------

def parse_frequency(rule: Any) -> Optional[str]:
    if not isinstance(rule, str):
        return None
    match = _FREQUENCY.search(rule.upper())
    return match.group(1) if match else None


def add_months(value: datetime, months: int = 1) -> datetime:
    """Same day next month; Jan 31 + 1 month is Feb 28 (or 29)."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_occurrence(rule: Any, from_: datetime) -> Optional[datetime]:
    """The occurrence after from_, or None for an unrecognized rule."""
    frequency = parse_frequency(rule)
    if frequency == "DAILY":
        return from_ + timedelta(days=1)
    if frequency == "WEEKLY":
        return from_ + timedelta(days=7)
    if frequency == "MONTHLY":
        return add_months(from_, 1)
    return None


# ---------------------------------------------------------------------------
# ENGINE
# ---------------------------------------------------------------------------

@dataclass
class RecurrenceTickReport:
    """Counters for one process_due() run."""
    processed: int = 0
    spawned: int = 0
    deactivated: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class RecurrenceEngine:
    """
    Usage:
        engine = RecurrenceEngine(SessionLocal)
        report = engine.process_due()
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or utc_now

    def process_due(self, now: Optional[datetime] = None) -> RecurrenceTickReport:
        """Advance every due rule once and spawn its task instances."""
        now = as_utc(now or self._clock())
        report = RecurrenceTickReport()

        with self._session_factory() as db:
            due_ids = db.scalars(
                select(RecurrenceRule.id)
                .where(
                    RecurrenceRule.active.is_(True),
                    RecurrenceRule.next_occurrence.is_not(None),
                    RecurrenceRule.next_occurrence <= now,
                )
                .order_by(RecurrenceRule.next_occurrence)
            ).all()

        for rule_id in due_ids:
            self._process_rule(rule_id, now, report)

        if due_ids:
            logger.info(f"Recurrence tick: {report.to_dict()}")
        return report

    def _process_rule(self, rule_id: UUID, now: datetime, report: RecurrenceTickReport) -> None:
        with self._session_factory() as db:
            try:
                rule = db.get(RecurrenceRule, rule_id)
                if rule is None or not rule.active or rule.next_occurrence is None:
                    report.skipped += 1
                    return

                stored = rule.next_occurrence
                current = as_utc(stored)
                if current > now:
                    report.skipped += 1
                    return

                following = next_occurrence(rule.rule, current)
                claimed = db.execute(
                    update(RecurrenceRule)
                    .where(
                        RecurrenceRule.id == rule.id,
                        RecurrenceRule.active.is_(True),
                        RecurrenceRule.next_occurrence == stored,
                    )
                    .values(
                        next_occurrence=following if following is not None else stored,
                        active=following is not None,
                    )
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    db.rollback()
                    report.skipped += 1
                    logger.info(f"Recurrence {rule.id} already claimed by another tick")
                    return

                rule_text = rule.rule
                templates = db.scalars(select(Task).where(Task.recurrence_id == rule.id)).all()
                # Templates are read-only here; a clone is due at the next occurrence
                for template in templates:
                    due_date = following if template.due_date is not None else None
                    db.add(self._clone(template, due_date))
                spawned = len(templates)

                db.commit()
            except Exception as e:
                db.rollback()
                report.failed += 1
                logger.warning(f"Could not process recurrence {rule_id}: {e}")
                return

        report.processed += 1
        report.spawned += spawned
        if following is None:
            report.deactivated += 1
            logger.info(f"Recurrence {rule_id} deactivated: rule '{rule_text}' has no next occurrence")

    @staticmethod
    def _clone(template: Task, due_date: Optional[datetime]) -> Task:
        return Task(
            user_id=template.user_id,
            title=template.title,
            description=template.description,
            status=SPAWNED_STATUS,
            due_date=due_date,
            assignee_id=template.assignee_id,
            labels=list(template.labels or []),
            checklist=[dict(item) for item in (template.checklist or [])],
        )

    # -----------------------------------------------------------------------
    # RULE MANAGEMENT
    # -----------------------------------------------------------------------

    def set_recurrence(self, task_id: UUID, rule: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Attach a rule to a template task, or update the one it has.

        Raises:
            NotFoundError: Unknown task
            InvalidRecurrenceRuleError: The rule has no next occurrence
        """
        now = as_utc(now or self._clock())
        first = next_occurrence(rule, now)
        if first is None:
            raise InvalidRecurrenceRuleError(f"Invalid recurrence rule: {rule!r}")

        with self._session_factory() as db:
            task = db.get(Task, task_id)
            if task is None:
                raise NotFoundError(f"Task {task_id} not found")

            recurrence = db.get(RecurrenceRule, task.recurrence_id) if task.recurrence_id else None
            if recurrence is None:
                recurrence = RecurrenceRule(rule=rule, next_occurrence=first, active=True)
                db.add(recurrence)
                db.flush()
                task.recurrence_id = recurrence.id
            else:
                recurrence.rule = rule
                recurrence.next_occurrence = first
                recurrence.active = True

            db.commit()
            logger.info(f"Recurrence {recurrence.id} set on task {task_id}: {rule}")
            return recurrence.to_dict()

    def remove_recurrence(self, rule_id: UUID) -> Dict[str, Any]:
        """
        Detach every template from the rule and deactivate it.

        Raises:
            NotFoundError: Unknown rule
        """
        with self._session_factory() as db:
            recurrence = db.get(RecurrenceRule, rule_id)
            if recurrence is None:
                raise NotFoundError(f"Recurrence {rule_id} not found")

            db.execute(
                update(Task)
                .where(Task.recurrence_id == rule_id)
                .values(recurrence_id=None)
                .execution_options(synchronize_session=False)
            )
            recurrence.active = False
            db.commit()
            logger.info(f"Recurrence {rule_id} removed")
            return {"success": True}


# ---------------------------------------------------------------------------
# SCHEDULER
# ---------------------------------------------------------------------------

class RecurrenceScheduler:
    """
    Runs RecurrenceEngine.process_due() every interval on an asyncio task.

    Usage (FastAPI lifespan):
        scheduler = RecurrenceScheduler(engine, interval_seconds=300)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(self, engine: RecurrenceEngine, interval_seconds: float = 300):
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="recurrence-scheduler")
        logger.info(f"Recurrence scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Recurrence scheduler stopped")

    async def tick(self) -> Optional[RecurrenceTickReport]:
        """Run one tick unless one is already in progress (then None)."""
        if self._lock.locked():
            logger.info("Recurrence tick skipped: previous tick still running")
            return None
        async with self._lock:
            return await asyncio.to_thread(self.engine.process_due)

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Recurrence tick failed: {e}")
            await asyncio.sleep(self.interval_seconds)
