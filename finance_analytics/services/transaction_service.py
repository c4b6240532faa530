from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.errors import InvalidArgumentError, NotFoundError
from finance_analytics.services.account_service import AccountService
from finance_analytics.services.category_service import CategoryService
from finance_analytics.utils.money import to_money

logger = logging.getLogger(__name__)


def recurring_external_id(obligation_id: int, scan_date: date) -> str:
    return f"recurring-{obligation_id}-{scan_date.isoformat()}"


class TransactionService:
    """Ledger transactions of a user."""

    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or get_clock()
        self.categories = CategoryService(db)
        self.accounts = AccountService(db)

    def create_for_user(
        self,
        user: models.User,
        *,
        category_id: int | None,
        amount: Decimal,
        occurred_at: Optional[date] = None,
        description: Optional[str] = None,
        is_planned: bool = False,
        external_id: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> models.Transaction:
        """Add a ledger transaction for ``user`` without committing.

        The caller owns the unit of work; the row is flushed so its id is available.
        """
        category = self.categories.find_category(category_id, user.id)
        if account_id is not None:
            account_id = self.accounts.find_account(account_id, user.id).id
        row = models.Transaction(
            user_id=user.id,
            account_id=account_id,
            category_id=category.id,
            amount=to_money(amount),
            occurred_at=occurred_at or self.clock.today(),
            description=description,
            is_planned=is_planned,
            external_id=external_id,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def create(self, user: models.User, payload: dict) -> models.Transaction:
        row = self.create_for_user(user, **payload)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Transaction %s created for user %s", row.id, user.id)
        return row

    def get_all(
        self,
        *,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[models.Transaction]:
        if start and end and start > end:
            raise InvalidArgumentError("start date cannot be after end date")
        q = self.db.query(models.Transaction).filter(models.Transaction.user_id == user_id)
        if start:
            q = q.filter(models.Transaction.occurred_at >= start)
        if end:
            q = q.filter(models.Transaction.occurred_at <= end)
        if account_id is not None:
            q = q.filter(models.Transaction.account_id == account_id)
        return q.order_by(models.Transaction.occurred_at.desc(), models.Transaction.id.desc()).all()

    def get_by_id(self, user_id: int, transaction_id: int) -> models.Transaction:
        row = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.id == transaction_id, models.Transaction.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Transaction not found")
        return row

    def update(self, row: models.Transaction, patch: dict) -> models.Transaction:
        if patch.get("category_id") is not None:
            row.category_id = self.categories.find_category(patch["category_id"], row.user_id).id
        if "account_id" in patch:
            account_id = patch["account_id"]
            row.account_id = self.accounts.find_account(account_id, row.user_id).id if account_id is not None else None
        if patch.get("amount") is not None:
            row.amount = to_money(patch["amount"])
        if patch.get("occurred_at") is not None:
            row.occurred_at = patch["occurred_at"]
        if "description" in patch:
            row.description = patch["description"]
        if patch.get("is_planned") is not None:
            row.is_planned = patch["is_planned"]
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Transaction %s updated", row.id)
        return row

    def delete(self, row: models.Transaction) -> None:
        transaction_id = row.id
        self.db.delete(row)
        self.db.commit()
        logger.debug("Transaction %s deleted", transaction_id)
