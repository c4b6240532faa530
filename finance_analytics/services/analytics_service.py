"""
Spending analytics

Aggregates a user's actual ledger (planned entries excluded) by category, day
and month, compares spending against monthly budgets, and projects upcoming
recurring payments. Expense figures only count transactions whose category is
of type EXPENSE; uncategorized entries are left out of every typed total.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from finance_analytics import models
from finance_analytics.core.clock import Clock, get_clock
from finance_analytics.errors import InvalidArgumentError
from finance_analytics.services.budget_service import BudgetService
from finance_analytics.services.schedule import next_occurrence
from finance_analytics.utils.dates import add_months, month_floor
from finance_analytics.utils.money import CENT, to_money

ZERO = Decimal("0")


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class DailyAmount:
    day: date
    amount: Decimal


@dataclass(frozen=True)
class MonthlyAmount:
    month: date
    amount: Decimal
    count: int = 0


@dataclass(frozen=True)
class Summary:
    month: date
    income: Decimal
    expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    budget_id: int
    category: str
    month: date
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal


def month_end(month: date) -> date:
    return add_months(month_floor(month), 1) - timedelta(days=1)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO.quantize(CENT)
    return (part * 100 / whole).quantize(CENT, rounding=ROUND_HALF_UP)


class AnalyticsService:
    def __init__(self, db: Session, clock: Clock | None = None) -> None:
        self.db = db
        self.clock = clock or get_clock()
        self.budgets = BudgetService(db)

    # ---- Ledger aggregates -------------------------------------------------
    def expenses_by_category(
        self, *, user_id: int, month: date, account_id: Optional[int] = None
    ) -> list[CategoryAmount]:
        """Expense totals per category for ``month``, largest first."""
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in self._expenses(user_id, month_floor(month), month_end(month), account_id):
            totals[txn.category.name] += txn.amount
        items = [CategoryAmount(category=name, amount=to_money(total)) for name, total in totals.items()]
        return sorted(items, key=lambda x: (-x.amount, x.category))

    def top_categories(
        self, *, user_id: int, month: date, limit: int, account_id: Optional[int] = None
    ) -> list[CategoryAmount]:
        if limit < 1:
            raise InvalidArgumentError("limit must be at least 1")
        return self.expenses_by_category(user_id=user_id, month=month, account_id=account_id)[:limit]

    def daily_expenses(self, *, user_id: int, month: date, account_id: Optional[int] = None) -> list[DailyAmount]:
        totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
        for txn in self._expenses(user_id, month_floor(month), month_end(month), account_id):
            totals[txn.occurred_at] += txn.amount
        return [DailyAmount(day=day, amount=to_money(totals[day])) for day in sorted(totals)]

    def monthly_expenses(
        self, *, user_id: int, start: date, end: date, account_id: Optional[int] = None
    ) -> list[MonthlyAmount]:
        """Expense totals per calendar month of ``[start, end]``; months without spending are omitted."""
        if start > end:
            raise InvalidArgumentError("start date cannot be after end date")
        totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[date, int] = defaultdict(int)
        for txn in self._expenses(user_id, start, end, account_id):
            key = month_floor(txn.occurred_at)
            totals[key] += txn.amount
            counts[key] += 1
        return [MonthlyAmount(month=m, amount=to_money(totals[m]), count=counts[m]) for m in sorted(totals)]

    def summary(self, *, user_id: int, month: date, account_id: Optional[int] = None) -> Summary:
        income = expense = ZERO
        for txn in self._actual(user_id, month_floor(month), month_end(month), account_id):
            if txn.category is None:
                continue
            if txn.category.type == models.CategoryType.INCOME:
                income += txn.amount
            elif txn.category.type == models.CategoryType.EXPENSE:
                expense += txn.amount
        return Summary(
            month=month_floor(month),
            income=to_money(income),
            expense=to_money(expense),
            balance=to_money(income - expense),
        )

    # ---- Budgets -----------------------------------------------------------
    def budget_status(self, *, user_id: int, budget_id: int) -> BudgetStatus:
        return self._status_of(self.budgets.get_by_id(user_id, budget_id))

    def budget_statuses(self, *, user_id: int, month: date) -> list[BudgetStatus]:
        return [self._status_of(row) for row in self.budgets.get_all(user_id=user_id, month=month)]

    def _status_of(self, budget: models.Budget) -> BudgetStatus:
        spent = ZERO
        for txn in self._actual(budget.user_id, budget.month, month_end(budget.month), None):
            if txn.category_id == budget.category_id:
                spent += txn.amount
        spent = to_money(spent)
        return BudgetStatus(
            budget_id=budget.id,
            category=budget.category.name,
            month=budget.month,
            limit=budget.limit_amount,
            spent=spent,
            remaining=to_money(budget.limit_amount - spent),
            percent_used=percent_of(spent, budget.limit_amount),
        )

    # ---- Recurring forecast ------------------------------------------------
    def upcoming_recurring(self, *, user_id: int, months: int = 3) -> list[MonthlyAmount]:
        """Projected recurring payments for the current month and the following ``months - 1``.

        Mirrors the scheduler: an overdue obligation fires on today's run and
        continues one period after today; every month of the window is listed.
        """
        if months < 1:
            raise InvalidArgumentError("months must be at least 1")
        today = self.clock.today()
        window_start = month_floor(today)
        window_end = add_months(window_start, months)
        totals: dict[date, Decimal] = {add_months(window_start, i): ZERO for i in range(months)}
        counts: dict[date, int] = defaultdict(int)

        rows = (
            self.db.query(models.RecurringTransaction)
            .filter(
                models.RecurringTransaction.user_id == user_id,
                models.RecurringTransaction.is_active.is_(True),
            )
            .order_by(models.RecurringTransaction.id)
            .all()
        )
        for row in rows:
            occurrence = max(row.next_execution_date, today)
            while occurrence < window_end:
                key = month_floor(occurrence)
                totals[key] += row.amount
                counts[key] += 1
                occurrence = next_occurrence(occurrence, row.frequency)

        return [MonthlyAmount(month=m, amount=to_money(totals[m]), count=counts[m]) for m in sorted(totals)]

    # ---- Queries -----------------------------------------------------------
    def _actual(self, user_id: int, start: date, end: date, account_id: Optional[int]) -> list[models.Transaction]:
        q = (
            self.db.query(models.Transaction)
            .options(selectinload(models.Transaction.category))
            .filter(
                models.Transaction.user_id == user_id,
                models.Transaction.is_planned.is_(False),
                models.Transaction.occurred_at >= start,
                models.Transaction.occurred_at <= end,
            )
        )
        if account_id is not None:
            q = q.filter(models.Transaction.account_id == account_id)
        return q.order_by(models.Transaction.occurred_at, models.Transaction.id).all()

    def _expenses(self, user_id: int, start: date, end: date, account_id: Optional[int]) -> list[models.Transaction]:
        return [
            txn
            for txn in self._actual(user_id, start, end, account_id)
            if txn.category is not None and txn.category.type == models.CategoryType.EXPENSE
        ]
