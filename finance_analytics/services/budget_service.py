from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import exists
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from finance_analytics import models
from finance_analytics.errors import ConflictError, NotFoundError
from finance_analytics.services.category_service import CategoryService
from finance_analytics.utils.dates import month_floor
from finance_analytics.utils.money import to_money

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class BudgetService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.categories = CategoryService(db)

    def create(self, payload: dict, *, user_id: int) -> models.Budget:
        category = self.categories.find_category(payload["category_id"], user_id)
        month = month_floor(payload["month"])
        if self.budget_exists(user_id, category.id, month):
            raise ConflictError("Budget already exists for this category and month")
        row = models.Budget(
            user_id=user_id,
            category_id=category.id,
            month=month,
            limit_amount=to_money(payload["limit_amount"]),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race against a concurrent insert of the same key
            self.db.rollback()
            raise ConflictError("Budget already exists for this category and month")
        self.db.refresh(row)
        logger.debug("Budget %s created for user %s", row.id, user_id)
        return row

    def get_all(self, *, user_id: int, month: Optional[date] = None) -> list[models.Budget]:
        q = (
            self.db.query(models.Budget)
            .options(selectinload(models.Budget.category))
            .filter(models.Budget.user_id == user_id)
        )
        if month is not None:
            q = q.filter(models.Budget.month == month_floor(month))
        return q.order_by(models.Budget.month.desc(), models.Budget.id).all()

    def get_by_id(self, user_id: int, budget_id: int) -> models.Budget:
        row = (
            self.db.query(models.Budget)
            .filter(models.Budget.id == budget_id, models.Budget.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Budget not found")
        return row

    def update(self, row: models.Budget, patch: dict) -> models.Budget:
        category_id = row.category_id
        month = row.month
        if patch.get("category_id") is not None:
            category_id = self.categories.find_category(patch["category_id"], row.user_id).id
        if patch.get("month") is not None:
            month = month_floor(patch["month"])
        if (category_id, month) != (row.category_id, row.month) and self.budget_exists(row.user_id, category_id, month):
            raise ConflictError("Budget already exists for this category and month")
        row.category_id = category_id
        row.month = month
        if patch.get("limit_amount") is not None:
            row.limit_amount = to_money(patch["limit_amount"])
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Budget already exists for this category and month")
        self.db.refresh(row)
        logger.debug("Budget %s updated", row.id)
        return row

    def delete(self, row: models.Budget) -> None:
        budget_id = row.id
        self.db.delete(row)
        self.db.commit()
        logger.debug("Budget %s deleted", budget_id)

    # ---- Materialization collaborators ------------------------------------
    def budget_exists(self, user_id: int, category_id: int, month: date) -> bool:
        return self.db.query(
            exists().where(
                models.Budget.user_id == user_id,
                models.Budget.category_id == category_id,
                models.Budget.month == month_floor(month),
            )
        ).scalar()

    def create_if_absent(self, user_id: int, category_id: int, month: date, limit_amount: Decimal) -> int | None:
        """Insert the budget for (user, category, month) unless one exists.

        A single conditional insert keyed on ``uq_budget_user_category_month``;
        returns the new budget id, or ``None`` when the key was already taken.
        Does not commit.
        """
        values = {
            "user_id": user_id,
            "category_id": category_id,
            "month": month_floor(month),
            "limit_amount": to_money(limit_amount),
        }
        insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
        if insert is not None:
            stmt = (
                insert(models.Budget)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id", "category_id", "month"])
                .returning(models.Budget.id)
            )
            return self.db.execute(stmt).scalar_one_or_none()

        # Other backends: rely on the unique constraint inside a savepoint
        try:
            with self.db.begin_nested():
                row = models.Budget(**values)
                self.db.add(row)
                self.db.flush()
        except IntegrityError:
            return None
        return row.id
