from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import BudgetTemplateCreate, BudgetTemplateOut, BudgetTemplateUpdate
from finance_analytics.services.budget_template_service import BudgetTemplateService


router = APIRouter(prefix="/budget-templates", tags=["budget-templates"])


@router.get("", response_model=list[BudgetTemplateOut])
def list_budget_templates(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return BudgetTemplateService(db).get_all(user_id=current_user.id)


@router.post("", response_model=BudgetTemplateOut, status_code=201)
def create_budget_template(
    payload: BudgetTemplateCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return BudgetTemplateService(db).create(payload.model_dump(), user_id=current_user.id)


@router.get("/{template_id}", response_model=BudgetTemplateOut)
def get_budget_template(template_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return BudgetTemplateService(db).get_by_id(current_user.id, template_id)


@router.patch("/{template_id}", response_model=BudgetTemplateOut)
def update_budget_template(
    template_id: int,
    payload: BudgetTemplateUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = BudgetTemplateService(db)
    row = svc.get_by_id(current_user.id, template_id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{template_id}", status_code=204)
def delete_budget_template(template_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = BudgetTemplateService(db)
    svc.delete(svc.get_by_id(current_user.id, template_id))
    return None
