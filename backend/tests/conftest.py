from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from servicebooking.core import booking_lock
from servicebooking.core.clock import FixedClock
from servicebooking.core.config import settings
from servicebooking.database import Base
from tests.factories import NOW

# Import models so Base.metadata is populated for create_all.
import servicebooking.models  # noqa: F401


@pytest.fixture(autouse=True)
def _local_locks_only(monkeypatch):
    """Keep tests off Redis and start every test with an empty lock registry."""
    monkeypatch.setattr(settings, "redis_url", None)
    monkeypatch.setattr(settings, "booking_lock_wait_seconds", 2.0)
    booking_lock.reset_local_locks()
    yield
    booking_lock.reset_local_locks()


@pytest.fixture(scope="function")
def _unit_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def unit_db(_unit_engine) -> Session:
    """Session on a fresh in-memory database; services commit freely."""
    SessionLocal = sessionmaker(bind=_unit_engine, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def notifier() -> Mock:
    """Stand-in for BookingNotificationService."""
    return Mock()
