"""
In-process scheduler trigger

Two wall-clock jobs share one daemon thread:

- ``recurring``: daily at ``RECURRING_RUN_TIME``, executes due recurring
  transactions for today.
- ``budgets``: on day 1 of every month at ``BUDGET_RUN_TIME``, materializes
  budgets from active templates for the current month.

The trigger keeps only the next fire instant of each job. A restart near a
boundary can fire a job twice; the engines make the repeat harmless.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.core.config import settings
from finance_analytics.core.database import SessionLocal, session_scope
from finance_analytics.services.budget_materialization_service import BudgetMaterializationService
from finance_analytics.services.recurring_execution_service import RecurringExecutionService
from finance_analytics.services.reports import ExecutionReport, MaterializationReport
from finance_analytics.utils.dates import add_months, month_floor

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def next_daily_fire(now: datetime, at: time) -> datetime:
    """First instant strictly after ``now`` falling at ``at`` on some day."""
    candidate = datetime.combine(now.date(), at)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def next_monthly_fire(now: datetime, at: time) -> datetime:
    """First instant strictly after ``now`` falling at ``at`` on the first day of a month."""
    candidate = datetime.combine(month_floor(now.date()), at)
    if candidate <= now:
        candidate = datetime.combine(add_months(month_floor(now.date()), 1), at)
    return candidate


def run_recurring_job(session_factory: SessionFactory, scan_date: date) -> ExecutionReport:
    with session_scope(session_factory) as db:
        return RecurringExecutionService(db).execute_due(scan_date)


def run_budget_job(session_factory: SessionFactory, target_month: date) -> MaterializationReport:
    with session_scope(session_factory) as db:
        return BudgetMaterializationService(db).materialize_monthly_budgets(target_month)


@dataclass
class ScheduledJob:
    name: str
    next_fire: Callable[[datetime], datetime]
    action: Callable[[datetime], object]
    next_fire_at: Optional[datetime] = None


class SchedulerTrigger:
    def __init__(
        self,
        session_factory: SessionFactory = SessionLocal,
        clock: Clock | None = None,
        *,
        recurring_at: time | None = None,
        budgets_at: time | None = None,
        poll_seconds: float | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock or get_clock()
        self.poll_seconds = poll_seconds if poll_seconds is not None else settings.SCHEDULER_POLL_SECONDS
        recurring_at = recurring_at or settings.RECURRING_RUN_TIME
        budgets_at = budgets_at or settings.BUDGET_RUN_TIME
        self.jobs = [
            ScheduledJob(
                name="recurring",
                next_fire=lambda now: next_daily_fire(now, recurring_at),
                action=lambda fired_at: run_recurring_job(self.session_factory, fired_at.date()),
            ),
            ScheduledJob(
                name="budgets",
                next_fire=lambda now: next_monthly_fire(now, budgets_at),
                action=lambda fired_at: run_budget_job(self.session_factory, month_floor(fired_at.date())),
            ),
        ]
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._schedule_all()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._schedule_all()
        self._thread = threading.Thread(target=self._loop, name="finance-scheduler", daemon=True)
        self._thread.start()
        for job in self.jobs:
            logger.info("Scheduled job %s, next fire at %s", job.name, job.next_fire_at)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_pending(self) -> list[str]:
        """Fire every job whose fire instant has been reached; returns the fired job names."""
        now = self.clock.now()
        fired: list[str] = []
        for job in self.jobs:
            if job.next_fire_at is None or job.next_fire_at > now:
                continue
            fired_at = job.next_fire_at
            # Anchor the job to the clock, not to the missed instant, after a long stall
            run_at = now if now.date() != fired_at.date() else fired_at
            try:
                job.action(run_at)
            except Exception:
                logger.exception("Scheduled job %s failed; retrying at the next fire", job.name)
            job.next_fire_at = job.next_fire(now)
            fired.append(job.name)
        return fired

    def seconds_until_next(self) -> float:
        now = self.clock.now()
        upcoming = [job.next_fire_at for job in self.jobs if job.next_fire_at is not None]
        if not upcoming:
            return self.poll_seconds
        delta = (min(upcoming) - now).total_seconds()
        return max(0.0, min(delta, self.poll_seconds))

    def _schedule_all(self) -> None:
        now = self.clock.now()
        for job in self.jobs:
            job.next_fire_at = job.next_fire(now)

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_pending()
            self._stop.wait(self.seconds_until_next())
