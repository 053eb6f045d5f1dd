"""
Shared test fixtures for Kairos.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode)
- Database session (in-memory SQLite)
- A user with an inbox-free workspace and a repository scoped to them
- A pinned reference clock and a TaskSnapshot factory for pure tests

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("KAIROS_DEV_MODE", "1")

# ---------------------------------------------------------------------------
# Application imports (after env vars are set)
# ---------------------------------------------------------------------------

from kairos.core.task_types import (  # noqa: E402
    HabitDetails,
    OneOffDetails,
    Priority,
    RecurringDetails,
    TaskSnapshot,
    TaskType,
)
from kairos.models import Base, Context, User  # noqa: E402
from kairos.services.repository import SqlAlchemyRepository  # noqa: E402

# Friday, mid-morning
NOW = datetime(2024, 3, 15, 10, 0, 0)


# ---------------------------------------------------------------------------
# 2. db_session -- in-memory SQLite session for unit tests
# ---------------------------------------------------------------------------

@pytest.fixture()
def db_session():
    """
    Provide a SQLAlchemy session backed by an in-memory SQLite database.

    A fresh database is created for every test that requests this fixture.
    All tables registered with Base.metadata are created automatically.
    The session is closed and the engine disposed after the test finishes.
    """
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    TestingSession = sessionmaker(bind=engine)
    session = TestingSession()

    yield session

    session.close()
    engine.dispose()


# ---------------------------------------------------------------------------
# 3. user / repo / context -- a persisted owner and their repository
# ---------------------------------------------------------------------------

@pytest.fixture()
def user(db_session):
    """A free-plan user."""
    row = User(email="ada@example.com", name="Ada")
    db_session.add(row)
    db_session.flush()
    return row


@pytest.fixture()
def repo(db_session, user):
    """Repository scoped to ``user``."""
    return SqlAlchemyRepository(db_session, user_id=user.id)


@pytest.fixture()
def context(db_session, user):
    """A plain, non-inbox context owned by ``user``."""
    row = Context(user_id=user.id, name="Home", icon="Home", color="bg-gray-500", coefficient=0.0)
    db_session.add(row)
    db_session.flush()
    return row


# ---------------------------------------------------------------------------
# 4. now / make_task -- pinned clock and snapshot factory
# ---------------------------------------------------------------------------

@pytest.fixture()
def now() -> datetime:
    """Reference instant shared by time-dependent tests."""
    return NOW


@pytest.fixture()
def make_task():
    """
    Build a TaskSnapshot without touching the database.

    The details payload follows ``task_type`` unless one is passed in.
    """

    def _make(
        task_type: TaskType = TaskType.TASK,
        details=None,
        **fields,
    ) -> TaskSnapshot:
        if details is None:
            details = {
                TaskType.TASK: OneOffDetails(),
                TaskType.HABIT: HabitDetails(),
                TaskType.RECURRING: RecurringDetails(frequency=7),
            }[task_type]
        defaults = {
            "id": 1,
            "user_id": 1,
            "title": "Water the plants",
            "priority": Priority.MEDIUM,
            "context_id": 1,
            "created_at": NOW,
        }
        defaults.update(fields)
        return TaskSnapshot(type=task_type, details=details, **defaults)

    return _make
