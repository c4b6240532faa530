from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_analytics.api.budgets import month_query
from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import (
    BudgetStatusOut,
    CategoryAmountOut,
    DailyAmountOut,
    MonthlyAmountOut,
    SummaryOut,
)
from finance_analytics.services.analytics_service import AnalyticsService


router = APIRouter(prefix="/analytics", tags=["analytics"])


def month_param(month: str = Query(..., description="YYYY-MM")) -> date:
    return month_query(month)


@router.get("/categories", response_model=list[CategoryAmountOut])
def expenses_by_category(
    month: date = Depends(month_param),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).expenses_by_category(user_id=current_user.id, month=month, account_id=account_id)


@router.get("/categories/top", response_model=list[CategoryAmountOut])
def top_categories(
    month: date = Depends(month_param),
    limit: int = Query(5, ge=1, le=50),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).top_categories(
        user_id=current_user.id, month=month, limit=limit, account_id=account_id
    )


@router.get("/daily", response_model=list[DailyAmountOut])
def daily_expenses(
    month: date = Depends(month_param),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).daily_expenses(user_id=current_user.id, month=month, account_id=account_id)


@router.get("/monthly", response_model=list[MonthlyAmountOut])
def monthly_expenses(
    start: date = Query(...),
    end: date = Query(...),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).monthly_expenses(
        user_id=current_user.id, start=start, end=end, account_id=account_id
    )


@router.get("/summary", response_model=SummaryOut)
def month_summary(
    month: date = Depends(month_param),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).summary(user_id=current_user.id, month=month, account_id=account_id)


@router.get("/budgets", response_model=list[BudgetStatusOut])
def budget_statuses(
    month: date = Depends(month_param),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db).budget_statuses(user_id=current_user.id, month=month)


@router.get("/budgets/{budget_id}", response_model=BudgetStatusOut)
def budget_status(budget_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return AnalyticsService(db).budget_status(user_id=current_user.id, budget_id=budget_id)


@router.get("/upcoming", response_model=list[MonthlyAmountOut])
def upcoming_recurring(
    months: int = Query(3, ge=1, le=24),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user = Depends(get_current_user),
):
    return AnalyticsService(db, clock).upcoming_recurring(user_id=current_user.id, months=months)
