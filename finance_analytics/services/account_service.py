from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.errors import NotFoundError

logger = logging.getLogger(__name__)


class AccountService:
    """Money sources (cards, cash, deposits) a user books transactions against."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_account(self, account_id: int, user_id: int) -> models.Account:
        account = (
            self.db.query(models.Account)
            .filter(models.Account.id == account_id, models.Account.user_id == user_id)
            .first()
        )
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def get_all(self, *, user_id: int) -> list[models.Account]:
        return (
            self.db.query(models.Account)
            .filter(models.Account.user_id == user_id)
            .order_by(models.Account.id)
            .all()
        )

    def create(self, payload: dict, *, user_id: int) -> models.Account:
        row = models.Account(user_id=user_id, name=payload["name"], currency=payload["currency"])
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Account %s created for user %s", row.id, user_id)
        return row

    def update(self, row: models.Account, patch: dict) -> models.Account:
        if patch.get("name") is not None:
            row.name = patch["name"]
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Account %s renamed", row.id)
        return row

    def delete(self, row: models.Account) -> None:
        """Delete an account; its ledger transactions stay and lose the account link."""
        user_id, account_id = row.user_id, row.id
        detached = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == user_id, models.Transaction.account_id == account_id)
            .update({models.Transaction.account_id: None}, synchronize_session=False)
        )
        self.db.delete(row)
        self.db.commit()
        logger.debug("Account %s deleted for user %s, %d transaction(s) detached", account_id, user_id, detached)
