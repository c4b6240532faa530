"""
Budget materialization engine

Fans active budget templates out into concrete monthly budgets. Re-running for
the same month is a no-op for every (user, category) that already has a budget.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_analytics.errors import FinanceError
from finance_analytics.services.budget_service import BudgetService
from finance_analytics.services.budget_template_service import BudgetTemplateService
from finance_analytics.services.category_service import CategoryService
from finance_analytics.services.reports import ItemOutcome, MaterializationReport, OutcomeStatus
from finance_analytics.utils.dates import format_month, month_floor

logger = logging.getLogger(__name__)


class _TemplateItem(NamedTuple):
    id: int
    user_id: int
    category_id: int
    amount: Decimal


class BudgetMaterializationService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.templates = BudgetTemplateService(db)
        self.budgets = BudgetService(db)
        self.categories = CategoryService(db)

    def materialize_monthly_budgets(self, target_month: date) -> MaterializationReport:
        month = month_floor(target_month)
        report = MaterializationReport(target_month=month)
        items = [
            _TemplateItem(id=row.id, user_id=row.user_id, category_id=row.category_id, amount=row.amount)
            for row in self.templates.find_active()
        ]
        logger.info("Budget run for %s: %d active template(s)", format_month(month), len(items))

        for item in items:
            report.add(self._materialize_one(item, month))

        logger.info(
            "Budget run for %s finished: %d created, %d skipped, %d failed",
            format_month(month),
            report.created,
            report.skipped,
            report.failed,
        )
        return report

    def _materialize_one(self, item: _TemplateItem, month: date) -> ItemOutcome:
        try:
            self.categories.find_category(item.category_id, item.user_id)
            budget_id = self.budgets.create_if_absent(item.user_id, item.category_id, month, item.amount)
            self.db.commit()
        except FinanceError as exc:
            self.db.rollback()
            logger.warning("Budget template %s failed: %s", item.id, exc.detail)
            return ItemOutcome(item.id, OutcomeStatus.FAILED, reason=exc.detail)
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Budget template %s failed on integrity error: %s", item.id, exc.orig)
            return ItemOutcome(item.id, OutcomeStatus.FAILED, reason=f"integrity error: {exc.orig}")
        if budget_id is None:
            return ItemOutcome(item.id, OutcomeStatus.SKIPPED, reason="budget already exists")
        return ItemOutcome(item.id, OutcomeStatus.SUCCEEDED, created_id=budget_id)
