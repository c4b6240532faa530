from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_category(self, category_id: int | None, user_id: int) -> models.Category:
        """Resolve a category owned by ``user_id`` or raise :class:`NotFoundError`."""
        category = None
        if category_id is not None:
            category = (
                self.db.query(models.Category)
                .filter(models.Category.id == category_id, models.Category.user_id == user_id)
                .first()
            )
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def get_all(self, *, user_id: int, type: Optional[models.CategoryType] = None) -> list[models.Category]:
        q = self.db.query(models.Category).filter(models.Category.user_id == user_id)
        if type is not None:
            q = q.filter(models.Category.type == type)
        return q.order_by(models.Category.id).all()

    def create(self, payload: dict, *, user_id: int) -> models.Category:
        self._ensure_unique_name(user_id, payload["name"])
        row = models.Category(user_id=user_id, **payload)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Category %s created for user %s", row.id, user_id)
        return row

    def update(self, row: models.Category, patch: dict) -> models.Category:
        if not patch:
            return row
        if patch.get("name") is not None and patch["name"] != row.name:
            self._ensure_unique_name(row.user_id, patch["name"])
        for key, value in patch.items():
            if value is not None:
                setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Category %s updated", row.id)
        return row

    def delete(self, row: models.Category) -> None:
        """Delete a category together with its budgets and templates.

        Recurring and ledger transactions are detached rather than removed; the
        scheduler reports detached recurring transactions as failures until the
        user assigns a new category.
        """
        user_id, category_id = row.user_id, row.id
        templates_removed = (
            self.db.query(models.BudgetTemplate)
            .filter(models.BudgetTemplate.user_id == user_id, models.BudgetTemplate.category_id == category_id)
            .delete(synchronize_session=False)
        )
        budgets_removed = (
            self.db.query(models.Budget)
            .filter(models.Budget.user_id == user_id, models.Budget.category_id == category_id)
            .delete(synchronize_session=False)
        )
        recurring_detached = (
            self.db.query(models.RecurringTransaction)
            .filter(
                models.RecurringTransaction.user_id == user_id,
                models.RecurringTransaction.category_id == category_id,
            )
            .update({models.RecurringTransaction.category_id: None}, synchronize_session=False)
        )
        transactions_detached = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == user_id, models.Transaction.category_id == category_id)
            .update({models.Transaction.category_id: None}, synchronize_session=False)
        )
        self.db.delete(row)
        self.db.commit()
        logger.debug(
            "Category %s deleted for user %s: %d template(s) and %d budget(s) removed, "
            "%d recurring and %d ledger transaction(s) detached",
            category_id,
            user_id,
            templates_removed,
            budgets_removed,
            recurring_detached,
            transactions_detached,
        )

    def _ensure_unique_name(self, user_id: int, name: str) -> None:
        exists = (
            self.db.query(models.Category.id)
            .filter(models.Category.user_id == user_id, models.Category.name == name)
            .first()
        )
        if exists:
            raise ConflictError("Category with this name already exists")
