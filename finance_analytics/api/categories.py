from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.core.database import get_db
from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import CategoryCreate, CategoryOut, CategoryUpdate
from finance_analytics.services.category_service import CategoryService


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(
    type: Optional[models.CategoryType] = Query(None, description="Filter by category type"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return CategoryService(db).get_all(user_id=current_user.id, type=type)


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return CategoryService(db).create(payload.model_dump(), user_id=current_user.id)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return CategoryService(db).find_category(category_id, current_user.id)


@router.patch("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = CategoryService(db)
    row = svc.find_category(category_id, current_user.id)
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = CategoryService(db)
    row = svc.find_category(category_id, current_user.id)
    svc.delete(row)
    return None
