from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.errors import InvalidArgumentError
from finance_analytics.schemas import BudgetCreate, BudgetOut, BudgetUpdate
from finance_analytics.services.budget_service import BudgetService
from finance_analytics.utils.dates import parse_month


router = APIRouter(prefix="/budgets", tags=["budgets"])


def month_query(month: Optional[str] = Query(None, description="YYYY-MM")) -> Optional[date]:
    if month is None:
        return None
    try:
        return parse_month(month)
    except ValueError as exc:
        raise InvalidArgumentError(str(exc))


@router.get("", response_model=list[BudgetOut])
def list_budgets(
    month: Optional[date] = Depends(month_query),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return BudgetService(db).get_all(user_id=current_user.id, month=month)


@router.post("", response_model=BudgetOut, status_code=201)
def create_budget(payload: BudgetCreate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return BudgetService(db).create(payload.model_dump(), user_id=current_user.id)


@router.get("/{budget_id}", response_model=BudgetOut)
def get_budget(budget_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return BudgetService(db).get_by_id(current_user.id, budget_id)


@router.patch("/{budget_id}", response_model=BudgetOut)
def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = BudgetService(db)
    row = svc.get_by_id(current_user.id, budget_id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{budget_id}", status_code=204)
def delete_budget(budget_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = BudgetService(db)
    svc.delete(svc.get_by_id(current_user.id, budget_id))
    return None
