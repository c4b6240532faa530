from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .models import CategoryType, RecurringFrequency
from .services.reports import OutcomeStatus
from .utils.dates import format_month, parse_month


def _clean_name(value):
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name must not be blank")
    return value


def _coerce_month(value):
    if value is None:
        return value
    return parse_month(value)


# ===== Users and accounts =====

class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    currency: str = Field(..., pattern=r"^[A-Za-z]{3}$")

    @field_validator("name")
    def name_not_blank(cls, v: str):
        return _clean_name(v)

    @field_validator("currency")
    def upper_currency(cls, v: str):
        return v.upper()


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @field_validator("name")
    def name_not_blank(cls, v: Optional[str]):
        return _clean_name(v)


class AccountOut(BaseModel):
    id: int
    name: str
    currency: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== Categories =====

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    color: Optional[str] = Field(default=None, max_length=9)

    @field_validator("name")
    def name_not_blank(cls, v: str):
        return _clean_name(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[CategoryType] = None
    color: Optional[str] = Field(default=None, max_length=9)

    @field_validator("name")
    def name_not_blank(cls, v: Optional[str]):
        return _clean_name(v)


class CategoryOut(BaseModel):
    id: int
    name: str
    type: CategoryType
    color: Optional[str]

    model_config = ConfigDict(from_attributes=True)


# ===== Ledger transactions =====

class TransactionCreate(BaseModel):
    category_id: int
    account_id: Optional[int] = None
    amount: Decimal = Field(..., gt=0)
    occurred_at: Optional[date] = None
    description: Optional[str] = None
    is_planned: bool = False


class TransactionUpdate(BaseModel):
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    occurred_at: Optional[date] = None
    description: Optional[str] = None
    is_planned: Optional[bool] = None


class TransactionOut(BaseModel):
    id: int
    user_id: int
    account_id: Optional[int]
    category_id: Optional[int]
    amount: Decimal
    occurred_at: date
    description: Optional[str]
    is_planned: bool
    external_id: Optional[str]

    model_config = ConfigDict(from_attributes=True)


# ===== Recurring transactions =====

class RecurringTransactionCreate(BaseModel):
    category_id: int
    amount: Decimal = Field(..., gt=0)
    frequency: RecurringFrequency
    next_execution_date: date
    description: Optional[str] = None
    is_active: bool = True


class RecurringTransactionUpdate(BaseModel):
    category_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    frequency: Optional[RecurringFrequency] = None
    next_execution_date: Optional[date] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class RecurringTransactionOut(BaseModel):
    id: int
    category_id: Optional[int]
    category_name: Optional[str] = None
    amount: Decimal
    frequency: RecurringFrequency
    description: Optional[str]
    next_execution_date: date
    last_execution_date: Optional[date]
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# ===== Budgets =====

class BudgetCreate(BaseModel):
    category_id: int
    month: date
    limit_amount: Decimal = Field(..., gt=0)

    @field_validator("month", mode="before")
    def coerce_month(cls, v):
        return _coerce_month(v)


class BudgetUpdate(BaseModel):
    category_id: Optional[int] = None
    month: Optional[date] = None
    limit_amount: Optional[Decimal] = Field(default=None, gt=0)

    @field_validator("month", mode="before")
    def coerce_month(cls, v):
        return _coerce_month(v)


class BudgetOut(BaseModel):
    id: int
    category_id: int
    category_name: Optional[str] = None
    month: date
    limit_amount: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("month")
    def serialize_month(self, value: date) -> str:
        return format_month(value)


# ===== Budget templates =====

class BudgetTemplateCreate(BaseModel):
    category_id: int
    amount: Decimal = Field(..., gt=0)
    is_active: bool = True
    start_month: date

    @field_validator("start_month", mode="before")
    def coerce_start_month(cls, v):
        return _coerce_month(v)


class BudgetTemplateUpdate(BaseModel):
    category_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    start_month: Optional[date] = None

    @field_validator("start_month", mode="before")
    def coerce_start_month(cls, v):
        return _coerce_month(v)


class BudgetTemplateOut(BaseModel):
    id: int
    category_id: int
    category_name: Optional[str] = None
    amount: Decimal
    is_active: bool
    start_month: date

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_month")
    def serialize_start_month(self, value: date) -> str:
        return format_month(value)


# ===== Scheduler =====

class ItemOutcomeOut(BaseModel):
    item_id: int
    status: OutcomeStatus
    reason: Optional[str] = None
    created_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ExecutionReportOut(BaseModel):
    scan_date: date
    processed: int
    succeeded: int
    skipped: int
    failed: int
    items: list[ItemOutcomeOut]

    model_config = ConfigDict(from_attributes=True)


class MaterializationReportOut(BaseModel):
    target_month: date
    created: int
    skipped: int
    failed: int
    items: list[ItemOutcomeOut]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("target_month")
    def serialize_target_month(self, value: date) -> str:
        return format_month(value)


class SchedulerJobStatus(BaseModel):
    name: str
    next_fire_at: Optional[datetime]


class SchedulerStatusOut(BaseModel):
    running: bool
    jobs: list[SchedulerJobStatus]


# ===== Analytics =====

class CategoryAmountOut(BaseModel):
    category: str
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class DailyAmountOut(BaseModel):
    day: date
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class MonthlyAmountOut(BaseModel):
    month: date
    amount: Decimal
    count: int = 0

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("month")
    def serialize_month(self, value: date) -> str:
        return format_month(value)


class SummaryOut(BaseModel):
    month: date
    income: Decimal
    expense: Decimal
    balance: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("month")
    def serialize_month(self, value: date) -> str:
        return format_month(value)


class BudgetStatusOut(BaseModel):
    budget_id: int
    category: str
    month: date
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("month")
    def serialize_month(self, value: date) -> str:
        return format_month(value)
