"""Manual triggers and status for the scheduled jobs."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from finance_analytics.api.budgets import month_query
from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.core.database import get_db
from finance_analytics.schemas import (
    ExecutionReportOut,
    MaterializationReportOut,
    SchedulerJobStatus,
    SchedulerStatusOut,
)
from finance_analytics.services.budget_materialization_service import BudgetMaterializationService
from finance_analytics.services.recurring_execution_service import RecurringExecutionService
from finance_analytics.utils.dates import month_floor


router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.post("/recurring/run", response_model=ExecutionReportOut)
def run_recurring(
    scan_date: Optional[date] = Query(None, description="Defaults to today"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    report = RecurringExecutionService(db).execute_due(scan_date or clock.today())
    return ExecutionReportOut.model_validate(report, from_attributes=True)


@router.post("/budgets/run", response_model=MaterializationReportOut)
def run_budgets(
    month: Optional[date] = Depends(month_query),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    report = BudgetMaterializationService(db).materialize_monthly_budgets(month or month_floor(clock.today()))
    return MaterializationReportOut.model_validate(report, from_attributes=True)


@router.get("/status", response_model=SchedulerStatusOut)
def scheduler_status(request: Request):
    trigger = getattr(request.app.state, "scheduler", None)
    if trigger is None:
        return SchedulerStatusOut(running=False, jobs=[])
    return SchedulerStatusOut(
        running=trigger.running,
        jobs=[SchedulerJobStatus(name=job.name, next_fire_at=job.next_fire_at) for job in trigger.jobs],
    )
