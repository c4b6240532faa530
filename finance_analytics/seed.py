from __future__ import annotations

from sqlalchemy.orm import Session

from .core.database import session_scope
from .models import Category, CategoryType, User

DEFAULT_CATEGORIES: tuple[tuple[str, CategoryType], ...] = (
    ("Salary", CategoryType.INCOME),
    ("Other income", CategoryType.INCOME),
    ("Groceries", CategoryType.EXPENSE),
    ("Rent", CategoryType.EXPENSE),
    ("Utilities", CategoryType.EXPENSE),
    ("Transport", CategoryType.EXPENSE),
    ("Subscriptions", CategoryType.EXPENSE),
)


def seed_user(db: Session, email: str = "demo@example.com", name: str = "Demo") -> User:
    """Create the user and its default categories if missing. Idempotent; does not commit."""
    user = db.query(User).filter_by(email=email).first()
    if not user:
        user = User(email=email, name=name, is_active=True)
        db.add(user)
        db.flush()
    for cat_name, cat_type in DEFAULT_CATEGORIES:
        exists = db.query(Category).filter_by(user_id=user.id, name=cat_name).first()
        if not exists:
            db.add(Category(user_id=user.id, name=cat_name, type=cat_type))
    db.flush()
    return user


def seed() -> None:
    with session_scope() as db:
        seed_user(db)
        db.commit()


if __name__ == "__main__":
    seed()
