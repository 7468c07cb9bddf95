"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests. Tables are
created once per session; tests isolate themselves with unique diner emails
and restaurant ids.
"""
import os
import uuid

SQLITE_URL = "sqlite:///./test_dishdisplay.db"
os.environ["DATABASE_URL"] = SQLITE_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from dishdisplay.db.base import Base, get_db, make_engine  # noqa: E402
from dishdisplay.main import app  # noqa: E402
from dishdisplay.models.period import LeaderboardPeriod, PeriodStatus  # noqa: E402
from dishdisplay.services.cache import TTLCache, get_leaderboard_cache  # noqa: E402
from dishdisplay.services.leaderboard import get_active_period  # noqa: E402
from dishdisplay.services.periods import manage_periods  # noqa: E402

engine = make_engine(SQLITE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def cache():
    return TTLCache(default_ttl=60)


@pytest.fixture()
def client(db, cache):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_leaderboard_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def active_period(db) -> LeaderboardPeriod:
    """Make sure the current week is open for points."""
    manage_periods(db)
    period = get_active_period(db)
    assert period is not None
    # Detach and end the read transaction so API requests can write
    db.expunge(period)
    db.commit()
    return period


@pytest.fixture()
def no_active_period(db):
    """Close every active period for the duration of a test, then reopen."""
    closed_ids = []
    for period in db.query(LeaderboardPeriod).filter(
        LeaderboardPeriod.status == PeriodStatus.active
    ).all():
        period.status = PeriodStatus.closed
        closed_ids.append(period.id)
    db.commit()
    yield
    db.expire_all()
    if closed_ids and get_active_period(db) is None:
        db.get(LeaderboardPeriod, closed_ids[0]).status = PeriodStatus.active
        db.commit()


@pytest.fixture()
def email():
    return f"diner-{uuid.uuid4().hex[:10]}@example.com"


@pytest.fixture()
def restaurant_id():
    return f"rest-{uuid.uuid4().hex[:10]}"


class BrokenSession:
    """Stands in for a session whose database connection is gone."""

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))


@pytest.fixture()
def broken_session():
    return BrokenSession()
