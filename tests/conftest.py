"""Pytest configuration and fixtures for tests."""
import pytest
from datetime import datetime, time
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator
from contextlib import contextmanager

from app.clock import FixedClock
from app.database import Base
from app.models.reminder import ReminderFrequency, ReminderType
from app.schemas.reminder import ReminderCreate
from app.services.reminder_scheduler import ReminderScheduler
from app.store.sql_store import SQLReminderStore
import app.models  # noqa: F401


# Wednesday
DEFAULT_NOW = datetime(2024, 1, 3, 10, 0)


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a test database session for each test.
    Uses an in-memory SQLite database for fast testing.
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@contextmanager
def get_test_db_session():
    """
    Context manager for creating test database sessions.
    Used for property-based tests where fixtures don't work well.
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(DEFAULT_NOW)


@pytest.fixture
def store(test_db: Session) -> SQLReminderStore:
    return SQLReminderStore(test_db)


@pytest.fixture
def reminder_scheduler(store: SQLReminderStore, clock: FixedClock) -> ReminderScheduler:
    return ReminderScheduler(store, clock)


def make_create(**overrides) -> ReminderCreate:
    """Build a ReminderCreate with daily 08:00 defaults."""
    fields = {
        "subject_id": "pet-1",
        "type": ReminderType.FEEDING,
        "title": "Breakfast",
        "description": "Half a cup of kibble",
        "frequency": ReminderFrequency.DAILY,
        "time_of_day": time(8, 0),
    }
    fields.update(overrides)
    return ReminderCreate(**fields)
