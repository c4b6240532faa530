from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from finance_analytics import models
from finance_analytics.core.clock import FixedClock
from finance_analytics.core.database import session_scope
from finance_analytics.scheduler import SchedulerTrigger


def _trigger(session_factory, clock, **kwargs) -> SchedulerTrigger:
    return SchedulerTrigger(
        session_factory,
        clock,
        recurring_at=time(1, 0),
        budgets_at=time(0, 0),
        poll_seconds=30.0,
        **kwargs,
    )


def _record(trigger, calls):
    for job in trigger.jobs:
        job.action = lambda fired_at, name=job.name: calls.append((name, fired_at))


def test_initial_schedule(session_factory):
    clock = FixedClock(datetime(2025, 3, 31, 12, 0))
    trigger = _trigger(session_factory, clock)

    fires = {job.name: job.next_fire_at for job in trigger.jobs}
    assert fires == {
        "recurring": datetime(2025, 4, 1, 1, 0),
        "budgets": datetime(2025, 4, 1, 0, 0),
    }
    assert trigger.running is False


def test_jobs_fire_when_due_and_reschedule(session_factory):
    clock = FixedClock(datetime(2025, 3, 31, 23, 59))
    trigger = _trigger(session_factory, clock)
    calls: list = []
    _record(trigger, calls)

    assert trigger.run_pending() == []

    clock.set(datetime(2025, 4, 1, 0, 0, 5))
    assert trigger.run_pending() == ["budgets"]
    assert calls == [("budgets", datetime(2025, 4, 1, 0, 0))]

    clock.set(datetime(2025, 4, 1, 1, 0))
    assert trigger.run_pending() == ["recurring"]
    assert calls[-1] == ("recurring", datetime(2025, 4, 1, 1, 0))

    fires = {job.name: job.next_fire_at for job in trigger.jobs}
    assert fires["budgets"] == datetime(2025, 5, 1, 0, 0)
    assert fires["recurring"] == datetime(2025, 4, 2, 1, 0)

    # nothing fires twice for the same instant
    assert trigger.run_pending() == []


def test_stalled_loop_fires_once_on_current_date(session_factory):
    clock = FixedClock(datetime(2025, 3, 14, 12, 0))
    trigger = _trigger(session_factory, clock)
    calls: list = []
    _record(trigger, calls)

    # three missed daily instants collapse into one fire anchored on today
    clock.set(datetime(2025, 3, 17, 8, 0))
    assert trigger.run_pending() == ["recurring"]
    assert calls == [("recurring", datetime(2025, 3, 17, 8, 0))]
    assert trigger.jobs[0].next_fire_at == datetime(2025, 3, 18, 1, 0)


def test_failing_job_does_not_stop_the_trigger(session_factory):
    clock = FixedClock(datetime(2025, 3, 31, 23, 0))
    trigger = _trigger(session_factory, clock)
    calls: list = []

    def boom(fired_at):
        raise RuntimeError("store unavailable")

    trigger.jobs[0].action = lambda fired_at: calls.append(("recurring", fired_at))
    trigger.jobs[1].action = boom

    clock.set(datetime(2025, 4, 1, 2, 0))
    assert sorted(trigger.run_pending()) == ["budgets", "recurring"]
    assert calls == [("recurring", datetime(2025, 4, 1, 1, 0))]
    assert trigger.jobs[1].next_fire_at == datetime(2025, 5, 1, 0, 0)


def test_seconds_until_next_is_capped_by_poll_interval(session_factory):
    clock = FixedClock(datetime(2025, 3, 15, 0, 59, 50))
    trigger = _trigger(session_factory, clock)
    assert trigger.seconds_until_next() == 10.0

    clock.set(datetime(2025, 3, 15, 0, 30))
    assert trigger.seconds_until_next() == 30.0


def test_start_and_stop(session_factory):
    clock = FixedClock(datetime(2025, 3, 15, 12, 0))
    trigger = _trigger(session_factory, clock)
    trigger.start()
    try:
        assert trigger.running is True
    finally:
        trigger.stop(timeout=5.0)
    assert trigger.running is False


def test_jobs_run_engines_in_their_own_session(db_session, session_factory, demo_user, category_id):
    db_session.add(
        models.RecurringTransaction(
            user_id=demo_user.id,
            category_id=category_id("Rent"),
            amount=Decimal("900.00"),
            frequency=models.RecurringFrequency.MONTHLY,
            next_execution_date=date(2025, 4, 1),
        )
    )
    db_session.add(
        models.BudgetTemplate(
            user_id=demo_user.id,
            category_id=category_id("Groceries"),
            amount=Decimal("500.00"),
            start_month=date(2025, 1, 1),
        )
    )
    db_session.commit()

    clock = FixedClock(datetime(2025, 3, 31, 23, 0))
    trigger = _trigger(session_factory, clock)
    clock.set(datetime(2025, 4, 1, 1, 0))
    assert sorted(trigger.run_pending()) == ["budgets", "recurring"]

    db_session.expire_all()
    txns = db_session.query(models.Transaction).all()
    assert [(t.occurred_at, t.amount) for t in txns] == [(date(2025, 4, 1), Decimal("900.00"))]
    budgets = db_session.query(models.Budget).all()
    assert [(b.month, b.limit_amount) for b in budgets] == [(date(2025, 4, 1), Decimal("500.00"))]


def test_session_scope_discards_work_on_error(db_session, session_factory, demo_user):
    with pytest.raises(RuntimeError):
        with session_scope(session_factory) as db:
            db.add(models.Category(user_id=demo_user.id, name="Scratch", type=models.CategoryType.EXPENSE))
            db.flush()
            raise RuntimeError("job crashed")

    assert db_session.query(models.Category).filter_by(name="Scratch").count() == 0
