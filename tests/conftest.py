"""Pytest configuration: in-memory database, seeded messes and an API client."""

import os
from datetime import date

# Set test environment BEFORE any imports from messmate
# The module-level engine and settings read these on first import
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ADMIN_SUBJECTS"] = "admin-1"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from messmate.config import reset_settings  # noqa: E402
from messmate.models import (  # noqa: E402
    Base,
    Member,
    Mess,
    MessStatus,
    PlanType,
    Subscription,
    SubscriptionStatus,
)
from messmate.services import get_db  # noqa: E402

ADMIN_SUBJECT = "admin-1"
MANAGER_SUBJECT = "manager-1"
MEMBER_SUBJECT = "member-1"

# Closed month used by the fixtures; entries dated here are never "in the future"
OPEN_MONTH = "2025-01"
NEXT_MONTH = "2025-02"

# Fixture subscriptions run from here until far in the future
SUBSCRIPTION_START = date(2024, 1, 1)


def day(n: int) -> date:
    """Day ``n`` of OPEN_MONTH."""
    return date(2025, 1, n)


def add_subscription(
    db, mess: Mess, start: date = SUBSCRIPTION_START, end: date = date(2099, 1, 1)
) -> Subscription:
    """Give ``mess`` a subscription so its manager may write."""
    subscription = Subscription(
        mess_id=mess.id,
        plan_type=PlanType.YEARLY,
        status=SubscriptionStatus.ACTIVE,
        start_date=start,
        end_date=end,
    )
    db.add(subscription)
    db.commit()
    return subscription


@pytest.fixture
def db_session():
    """Fresh in-memory database per test.

    StaticPool keeps one connection so the TestClient worker thread sees the
    same database as the test body.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def mess(db_session):
    """Active, subscribed mess on OPEN_MONTH managed by MANAGER_SUBJECT."""
    mess = Mess(
        name="Green House",
        manager_id=MANAGER_SUBJECT,
        current_month=OPEN_MONTH,
        status=MessStatus.ACTIVE,
    )
    db_session.add(mess)
    db_session.commit()
    add_subscription(db_session, mess)
    return mess


@pytest.fixture
def members(db_session, mess):
    """Two active members; the first one has portal access as MEMBER_SUBJECT."""
    alice = Member(
        mess_id=mess.id,
        name="Alice",
        email="alice@example.com",
        phone="01700000001",
        user_id=MEMBER_SUBJECT,
        is_active=True,
    )
    bob = Member(
        mess_id=mess.id,
        name="Bob",
        email="bob@example.com",
        phone="01700000002",
        is_active=True,
    )
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob


@pytest.fixture
def client(db_session):
    """FastAPI test client bound to the test database."""
    from messmate.api.app import app

    reset_settings()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(subject: str) -> dict[str, str]:
    """Headers carrying a verified identity subject."""
    return {"X-Auth-Subject": subject}
