"""
Service layer

Business logic for the API routers and the scheduler jobs.
"""

from .account_service import AccountService
from .analytics_service import AnalyticsService
from .budget_materialization_service import BudgetMaterializationService
from .budget_service import BudgetService
from .budget_template_service import BudgetTemplateService
from .category_service import CategoryService
from .recurring_execution_service import RecurringExecutionService
from .recurring_transaction_service import RecurringTransactionService
from .transaction_service import TransactionService
from .user_service import UserService

__all__ = [
    "AccountService",
    "AnalyticsService",
    "BudgetMaterializationService",
    "BudgetService",
    "BudgetTemplateService",
    "CategoryService",
    "RecurringExecutionService",
    "RecurringTransactionService",
    "TransactionService",
    "UserService",
]
