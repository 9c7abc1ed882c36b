"""Pytest fixtures: throw-away SQLite database for fast, isolated tests."""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from eventflow.database import Base, get_db
from eventflow.main import app
from eventflow.services import notification_service
from eventflow.services.policy import Actor

# Import all models so they register with Base.metadata
from eventflow.models.user import User, UserRole             # noqa: F401
from eventflow.models.venue import Venue                     # noqa: F401
from eventflow.models.event import Event                     # noqa: F401
from eventflow.models.event_version import EventVersion      # noqa: F401
from eventflow.models.approval import Approval               # noqa: F401
from eventflow.models.audit_log import AuditLogEntry         # noqa: F401
from eventflow.models.debrief import Debrief                 # noqa: F401
from eventflow.models.ai_content_version import AiContentVersion  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

QUIZ_START = datetime(2025, 5, 1, 18, 0, tzinfo=timezone.utc)
QUIZ_END = datetime(2025, 5, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # WAL lets the elevated session write while the actor session holds a read snapshot
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class RecordingEmailClient(notification_service.EmailClient):
    """Captures notifications instead of delivering them."""

    def __init__(self):
        self.sent: list[notification_service.Notification] = []

    def send(self, notification):
        self.sent.append(notification)

    def kinds(self) -> list[str]:
        return [n.kind for n in self.sent]

    def recipients(self, kind: str) -> list[str]:
        return [n.recipient_email for n in self.sent if n.kind == kind]


@pytest.fixture(scope="function")
def outbox():
    """Install a recording email client for the duration of a test."""
    recorder = RecordingEmailClient()
    notification_service.set_email_client(recorder)
    yield recorder
    notification_service.set_email_client(None)


# ---------------------------------------------------------------------------
# Helpers: direct database setup for service-level tests
# ---------------------------------------------------------------------------
def make_user(db, role: UserRole = UserRole.venue_manager, name: str = "Test User") -> User:
    user = User(
        email=f"{uuid.uuid4().hex[:8]}@barons.example",
        full_name=name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_venue(db, name: str = "The Star", default_reviewer_id: str = None) -> Venue:
    venue = Venue(name=name, address="1 High Street", default_reviewer_id=default_reviewer_id)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def actor_for(user: User) -> Actor:
    return Actor.from_user(user)


def draft_fields(venue_id: str, **overrides) -> dict:
    fields = {
        "venue_id": venue_id,
        "title": "Quiz Night",
        "start_at": QUIZ_START,
        "end_at": QUIZ_END,
        "venue_space": "Main Bar",
    }
    fields.update(overrides)
    return fields


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", role: str = "venue_manager") -> dict:
    """Helper: POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "email": f"{uuid.uuid4().hex[:8]}@barons.example",
        "full_name": name,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_venue(client: TestClient, name: str = "The Star", default_reviewer_id: str = None) -> dict:
    """Helper: POST /api/venues and return response JSON."""
    resp = client.post("/api/venues/", json={
        "name": name,
        "default_reviewer_id": default_reviewer_id,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()
