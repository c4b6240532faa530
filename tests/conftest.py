from __future__ import annotations

import os
import tempfile
from datetime import datetime
from typing import Any, Generator

# The in-process scheduler must not start inside the test client
os.environ["FA_SCHEDULER_ENABLED"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finance_analytics import models
from finance_analytics.core.clock import FixedClock, get_clock
from finance_analytics.core.database import Base, get_db
from finance_analytics.main import app
from finance_analytics.seed import seed_user


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # Temporary SQLite file so the developer database is never touched
    fd, path = tempfile.mkstemp(prefix="fa_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def db_session(engine, session_factory) -> Generator[Any, Any, Any]:
    session = session_factory()
    # demo user with the default categories
    seed_user(session)
    session.commit()

    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture()
def demo_user(db_session) -> models.User:
    return db_session.query(models.User).filter_by(email="demo@example.com").one()


@pytest.fixture()
def category_id(db_session, demo_user):
    """Returns a lookup of the demo user's category ids by name."""

    def _lookup(name: str) -> int:
        return db_session.query(models.Category).filter_by(user_id=demo_user.id, name=name).one().id

    return _lookup


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 15, 9, 0))


@pytest.fixture(autouse=True)
def override_dependency(db_session, clock):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_clock] = lambda: clock
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
