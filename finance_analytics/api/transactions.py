from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import TransactionCreate, TransactionOut, TransactionUpdate
from finance_analytics.services.transaction_service import TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionOut])
def list_transactions(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    account_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return TransactionService(db).get_all(user_id=current_user.id, start=start, end=end, account_id=account_id)


@router.post("", response_model=TransactionOut, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user = Depends(get_current_user),
):
    return TransactionService(db, clock).create(current_user, payload.model_dump())


@router.get("/{transaction_id}", response_model=TransactionOut)
def get_transaction(transaction_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return TransactionService(db).get_by_id(current_user.id, transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionOut)
def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = TransactionService(db)
    row = svc.get_by_id(current_user.id, transaction_id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = TransactionService(db)
    svc.delete(svc.get_by_id(current_user.id, transaction_id))
    return None
