from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from finance_analytics import models
from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.errors import InvalidArgumentError, NotFoundError
from finance_analytics.services.category_service import CategoryService
from finance_analytics.utils.money import to_money

logger = logging.getLogger(__name__)


class RecurringTransactionService:
    """User-facing management of recurring obligations plus the scheduler's due-set query."""

    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or get_clock()
        self.categories = CategoryService(db)

    def create(self, payload: dict, *, user_id: int) -> models.RecurringTransaction:
        category = self.categories.find_category(payload["category_id"], user_id)
        self._validate_next_execution_date(payload["next_execution_date"])
        row = models.RecurringTransaction(
            user_id=user_id,
            category_id=category.id,
            amount=to_money(payload["amount"]),
            frequency=payload["frequency"],
            next_execution_date=payload["next_execution_date"],
            description=payload.get("description"),
            is_active=payload.get("is_active", True),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Recurring transaction %s created for user %s", row.id, user_id)
        return row

    def get_all(self, *, user_id: int, due_on_or_before: Optional[date] = None) -> list[models.RecurringTransaction]:
        q = (
            self.db.query(models.RecurringTransaction)
            .options(selectinload(models.RecurringTransaction.category))
            .filter(models.RecurringTransaction.user_id == user_id)
        )
        if due_on_or_before is not None:
            q = q.filter(models.RecurringTransaction.next_execution_date <= due_on_or_before)
        return q.order_by(models.RecurringTransaction.next_execution_date, models.RecurringTransaction.id).all()

    def get_by_id(self, user_id: int, recurring_id: int) -> models.RecurringTransaction:
        row = (
            self.db.query(models.RecurringTransaction)
            .filter(
                models.RecurringTransaction.id == recurring_id,
                models.RecurringTransaction.user_id == user_id,
            )
            .first()
        )
        if not row:
            raise NotFoundError("Recurring transaction not found")
        return row

    def update(self, row: models.RecurringTransaction, patch: dict) -> models.RecurringTransaction:
        if patch.get("category_id") is not None:
            row.category_id = self.categories.find_category(patch["category_id"], row.user_id).id
        if patch.get("amount") is not None:
            row.amount = to_money(patch["amount"])
        if patch.get("frequency") is not None:
            row.frequency = patch["frequency"]
        if patch.get("next_execution_date") is not None:
            self._validate_next_execution_date(patch["next_execution_date"])
            row.next_execution_date = patch["next_execution_date"]
        if "description" in patch:
            row.description = patch["description"]
        if patch.get("is_active") is not None:
            row.is_active = patch["is_active"]
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Recurring transaction %s updated", row.id)
        return row

    def delete(self, row: models.RecurringTransaction) -> None:
        recurring_id = row.id
        self.db.delete(row)
        self.db.commit()
        logger.debug("Recurring transaction %s deleted", recurring_id)

    # ---- Scheduler collaborators -------------------------------------------
    def find_due(self, not_after: date) -> list[models.RecurringTransaction]:
        """Active obligations whose next execution date is on or before ``not_after``, ordered by id."""
        return (
            self.db.query(models.RecurringTransaction)
            .filter(
                models.RecurringTransaction.is_active.is_(True),
                models.RecurringTransaction.next_execution_date <= not_after,
            )
            .order_by(models.RecurringTransaction.id)
            .all()
        )

    def _validate_next_execution_date(self, value: date) -> None:
        if value < self.clock.today():
            raise InvalidArgumentError("Next execution date cannot be before current date")
