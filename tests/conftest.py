"""Pytest fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("NOTIFICATION_PROVIDER", "console")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.deps import get_notifier
from app.core.errors import NotificationError
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Alert, AlertRecipient, HelpRequest, Volunteer  # noqa: F401 - register for create_all

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 15},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeNotifier:
    """Records every email/SMS; fails for configured destinations."""

    def __init__(self) -> None:
        self.emails: list[tuple[str, str, str]] = []
        self.sms: list[tuple[str, str]] = []
        self.fail_email_to: set[str] = set()
        self.fail_sms_to: set[str] = set()
        self.fail_all_sms = False

    def send_email(self, to: str, subject: str, body: str) -> None:
        if to in self.fail_email_to:
            raise NotificationError(f"mail server rejected {to}")
        self.emails.append((to, subject, body))

    def send_sms(self, to: str, body: str) -> None:
        if self.fail_all_sms or to in self.fail_sms_to:
            raise NotificationError(f"gateway rejected {to}")
        self.sms.append((to, body))

    def close(self) -> None:
        pass


@pytest.fixture
def setup_db():
    """Fresh tables for every test; proximity queries see only this test's volunteers."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(setup_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_factory(setup_db):
    """Independent sessions, one per simulated request handler."""
    return TestingSessionLocal


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(setup_db, notifier):
    """Test client with overridden DB and notifier."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register_volunteer(client):
    """Register + login a volunteer. Returns (volunteer_id, auth headers)."""

    def _register(contact, name=None, latitude=None, longitude=None):
        r = client.post(
            "/auth/register",
            json={"name": name or contact, "contact": contact, "password": "pass", "skills": "first aid"},
        )
        assert r.status_code == 201, r.text
        login = {"contact": contact, "password": "pass"}
        if latitude is not None:
            login.update(latitude=latitude, longitude=longitude)
        token = client.post("/auth/login", json=login).json()["access_token"]
        return r.json()["id"], {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
def submit_request(client):
    """Submit a pending help request. Returns its JSON."""

    def _submit(latitude, longitude, contact="555-123-4567", urgency="High", category="Medical"):
        r = client.post(
            "/requests",
            json={
                "name": "Asha",
                "contact": contact,
                "category": category,
                "urgency": urgency,
                "description": "Injured person near the station",
                "latitude": latitude,
                "longitude": longitude,
            },
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _submit
