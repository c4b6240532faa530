from __future__ import annotations

from sqlalchemy.orm import Session

from finance_analytics import models
from finance_analytics.errors import NotFoundError


class UserService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_user(self, user_id: int) -> models.User:
        user = self.db.get(models.User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_or_create_demo(self) -> models.User:
        """Return the first user, creating the demo account when the table is empty."""
        user = self.db.query(models.User).order_by(models.User.id).first()
        if not user:
            user = models.User(email="demo@example.com", name="Demo", is_active=True)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user
