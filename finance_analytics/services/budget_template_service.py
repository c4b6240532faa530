from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from finance_analytics import models
from finance_analytics.errors import ConflictError, NotFoundError
from finance_analytics.services.category_service import CategoryService
from finance_analytics.utils.dates import month_floor
from finance_analytics.utils.money import to_money

logger = logging.getLogger(__name__)


class BudgetTemplateService:
    """Rules that produce a monthly budget per (user, category)."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.categories = CategoryService(db)

    def create(self, payload: dict, *, user_id: int) -> models.BudgetTemplate:
        category = self.categories.find_category(payload["category_id"], user_id)
        if self._template_exists(user_id, category.id):
            logger.warning("Duplicate budget template for user %s, category %s", user_id, category.id)
            raise ConflictError("Budget template already exists for this category")
        row = models.BudgetTemplate(
            user_id=user_id,
            category_id=category.id,
            amount=to_money(payload["amount"]),
            is_active=payload.get("is_active", True),
            start_month=month_floor(payload["start_month"]),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Budget template already exists for this category")
        self.db.refresh(row)
        logger.debug("Budget template %s created for user %s", row.id, user_id)
        return row

    def get_all(self, *, user_id: int) -> list[models.BudgetTemplate]:
        return (
            self.db.query(models.BudgetTemplate)
            .options(selectinload(models.BudgetTemplate.category))
            .filter(models.BudgetTemplate.user_id == user_id)
            .order_by(models.BudgetTemplate.id)
            .all()
        )

    def get_by_id(self, user_id: int, template_id: int) -> models.BudgetTemplate:
        row = (
            self.db.query(models.BudgetTemplate)
            .filter(models.BudgetTemplate.id == template_id, models.BudgetTemplate.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Budget template not found")
        return row

    def update(self, row: models.BudgetTemplate, patch: dict) -> models.BudgetTemplate:
        if patch.get("category_id") is not None and patch["category_id"] != row.category_id:
            category = self.categories.find_category(patch["category_id"], row.user_id)
            if self._template_exists(row.user_id, category.id):
                raise ConflictError("Budget template already exists for this category")
            row.category_id = category.id
        if patch.get("amount") is not None:
            row.amount = to_money(patch["amount"])
        if patch.get("start_month") is not None:
            row.start_month = month_floor(patch["start_month"])
        if patch.get("is_active") is not None:
            row.is_active = patch["is_active"]
        self.db.commit()
        self.db.refresh(row)
        logger.debug("Budget template %s updated", row.id)
        return row

    def delete(self, row: models.BudgetTemplate) -> None:
        template_id = row.id
        self.db.delete(row)
        self.db.commit()
        logger.debug("Budget template %s deleted", template_id)

    def find_active(self) -> list[models.BudgetTemplate]:
        """All active templates across users, ordered by id."""
        return (
            self.db.query(models.BudgetTemplate)
            .filter(models.BudgetTemplate.is_active.is_(True))
            .order_by(models.BudgetTemplate.id)
            .all()
        )

    def _template_exists(self, user_id: int, category_id: int) -> bool:
        return (
            self.db.query(models.BudgetTemplate.id)
            .filter(models.BudgetTemplate.user_id == user_id, models.BudgetTemplate.category_id == category_id)
            .first()
            is not None
        )
