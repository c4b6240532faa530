from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import AccountCreate, AccountOut, AccountUpdate
from finance_analytics.services.account_service import AccountService


router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountOut])
def list_accounts(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return AccountService(db).get_all(user_id=current_user.id)


@router.post("", response_model=AccountOut, status_code=201)
def create_account(payload: AccountCreate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return AccountService(db).create(payload.model_dump(), user_id=current_user.id)


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return AccountService(db).find_account(account_id, current_user.id)


@router.patch("/{account_id}", response_model=AccountOut)
def update_account(
    account_id: int,
    payload: AccountUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = AccountService(db)
    row = svc.find_account(account_id, current_user.id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{account_id}", status_code=204)
def delete_account(account_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = AccountService(db)
    svc.delete(svc.find_account(account_id, current_user.id))
    return None
