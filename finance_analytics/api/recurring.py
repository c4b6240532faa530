from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import (
    RecurringTransactionCreate,
    RecurringTransactionOut,
    RecurringTransactionUpdate,
)
from finance_analytics.services.recurring_transaction_service import RecurringTransactionService


router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("", response_model=list[RecurringTransactionOut])
def list_recurring_transactions(
    due_on_or_before: Optional[date] = Query(None, alias="date", description="Only obligations due on or before this date"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return RecurringTransactionService(db).get_all(user_id=current_user.id, due_on_or_before=due_on_or_before)


@router.post("", response_model=RecurringTransactionOut, status_code=201)
def create_recurring_transaction(
    payload: RecurringTransactionCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user = Depends(get_current_user),
):
    return RecurringTransactionService(db, clock).create(payload.model_dump(), user_id=current_user.id)


@router.get("/{recurring_id}", response_model=RecurringTransactionOut)
def get_recurring_transaction(recurring_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return RecurringTransactionService(db).get_by_id(current_user.id, recurring_id)


@router.patch("/{recurring_id}", response_model=RecurringTransactionOut)
def update_recurring_transaction(
    recurring_id: int,
    payload: RecurringTransactionUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user = Depends(get_current_user),
):
    svc = RecurringTransactionService(db, clock)
    row = svc.get_by_id(current_user.id, recurring_id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{recurring_id}", status_code=204)
def delete_recurring_transaction(recurring_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = RecurringTransactionService(db)
    svc.delete(svc.get_by_id(current_user.id, recurring_id))
    return None
