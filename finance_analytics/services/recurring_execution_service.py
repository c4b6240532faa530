"""
Recurring execution engine

Turns due recurring obligations into ledger transactions and advances their
schedule. Each obligation is processed in its own unit of work: the ledger
entry and the schedule advance are committed together or not at all, and a
failing obligation does not stop the rest of the run.

The next execution date is computed from the scan date, not from the
obligation's previous next execution date. An obligation that missed several
periods fires once and moves one period past the scan date; missed periods
are not replayed.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.errors import FinanceError
from finance_analytics.services.category_service import CategoryService
from finance_analytics.services.recurring_transaction_service import RecurringTransactionService
from finance_analytics.services.reports import ExecutionReport, ItemOutcome, OutcomeStatus
from finance_analytics.services.schedule import next_occurrence
from finance_analytics.services.transaction_service import TransactionService, recurring_external_id
from finance_analytics.services.user_service import UserService

logger = logging.getLogger(__name__)


class _DueItem(NamedTuple):
    id: int
    user_id: int
    category_id: Optional[int]
    amount: Decimal
    frequency: models.RecurringFrequency
    description: Optional[str]
    next_execution_date: date


class RecurringExecutionService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.recurring = RecurringTransactionService(db)
        self.users = UserService(db)
        self.categories = CategoryService(db)
        self.ledger = TransactionService(db)

    def execute_due(self, scan_date: date) -> ExecutionReport:
        """Materialize every active obligation due on or before ``scan_date``.

        Store failures while loading the due set propagate and abort the run.
        """
        report = ExecutionReport(scan_date=scan_date)
        due = [
            _DueItem(
                id=row.id,
                user_id=row.user_id,
                category_id=row.category_id,
                amount=row.amount,
                frequency=row.frequency,
                description=row.description,
                next_execution_date=row.next_execution_date,
            )
            for row in self.recurring.find_due(scan_date)
        ]
        logger.info("Recurring run for %s: %d due obligation(s)", scan_date.isoformat(), len(due))

        for item in due:
            report.add(self._execute_one(item, scan_date))

        logger.info(
            "Recurring run for %s finished: %d succeeded, %d skipped, %d failed",
            scan_date.isoformat(),
            report.succeeded,
            report.skipped,
            report.failed,
        )
        return report

    def _execute_one(self, item: _DueItem, scan_date: date) -> ItemOutcome:
        try:
            user = self.users.find_user(item.user_id)
            category = self.categories.find_category(item.category_id, user.id)

            # Compare-and-set on the observed next date: a concurrent run that
            # already advanced this obligation leaves nothing to update.
            advanced = self.db.execute(
                update(models.RecurringTransaction)
                .where(
                    models.RecurringTransaction.id == item.id,
                    models.RecurringTransaction.is_active.is_(True),
                    models.RecurringTransaction.next_execution_date == item.next_execution_date,
                )
                .values(
                    last_execution_date=scan_date,
                    next_execution_date=next_occurrence(scan_date, item.frequency),
                )
                .execution_options(synchronize_session=False)
            )
            if advanced.rowcount != 1:
                self.db.rollback()
                logger.info("Recurring transaction %s already advanced, skipping", item.id)
                return ItemOutcome(item.id, OutcomeStatus.SKIPPED, reason="already advanced")

            tx = self.ledger.create_for_user(
                user,
                category_id=category.id,
                amount=item.amount,
                occurred_at=scan_date,
                description=item.description,
                is_planned=False,
                external_id=recurring_external_id(item.id, scan_date),
            )
            created_id = tx.id
            self.db.commit()
        except FinanceError as exc:
            self.db.rollback()
            logger.warning("Recurring transaction %s failed: %s", item.id, exc.detail)
            return ItemOutcome(item.id, OutcomeStatus.FAILED, reason=exc.detail)
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Recurring transaction %s failed on integrity error: %s", item.id, exc.orig)
            return ItemOutcome(item.id, OutcomeStatus.FAILED, reason=f"integrity error: {exc.orig}")
        return ItemOutcome(item.id, OutcomeStatus.SUCCEEDED, created_id=created_id)
