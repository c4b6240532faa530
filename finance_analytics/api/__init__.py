"""Router aggregation for the feature API modules."""

from fastapi import FastAPI

from . import (
    accounts,
    analytics,
    budget_templates,
    budgets,
    categories,
    recurring,
    scheduler,
    transactions,
    users,
)


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    for module in (
        users,
        accounts,
        categories,
        transactions,
        recurring,
        budgets,
        budget_templates,
        analytics,
        scheduler,
    ):
        app.include_router(module.router, prefix="/api")
