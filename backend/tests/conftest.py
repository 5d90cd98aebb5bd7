# backend/tests/conftest.py
"""
Shared pytest fixtures.

Environment overrides are applied BEFORE any seatbook import so the settings
singleton and the module-level engine never point at a real database.
"""

import os

os.environ["IS_TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["TIMEZONE"] = "Asia/Taipei"
os.environ["LOCK_WAIT_SECONDS"] = "5"

from datetime import datetime, timedelta  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
import pytz  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from seatbook.database import Base, get_db, make_engine  # noqa: E402
import seatbook.models  # noqa: E402,F401
from seatbook.services.seat_service import SeatService  # noqa: E402

TZ = pytz.timezone("Asia/Taipei")

# Monday 2024-06-03 10:00 local; +1h..+4h stays on the same local day
FIXED_NOW = TZ.localize(datetime(2024, 6, 3, 10, 0))

TEST_SEAT_COUNT = 10


class FakeClock:
    """Settable clock injected into services."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


def local(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return TZ.localize(datetime(year, month, day, hour, minute))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several threads can use separate connections."""
    engine = make_engine(f"sqlite:///{tmp_path / 'seatbook-test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seats(db):
    """Provision a small seat pool (ids 1..TEST_SEAT_COUNT)."""
    SeatService(db).provision(TEST_SEAT_COUNT)
    return list(range(1, TEST_SEAT_COUNT + 1))


@pytest.fixture
def client(session_factory, seats):
    from seatbook.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
