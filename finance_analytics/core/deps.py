from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from finance_analytics.core.database import get_db
from finance_analytics import models
from finance_analytics.services.user_service import UserService


def get_current_user(db: Session = Depends(get_db)) -> models.User:
    """Very lightweight current user resolver.

    For now, returns the first user (creates a demo if none). Tests may override
    this dependency to simulate different users.
    """
    return UserService(db).get_or_create_demo()
