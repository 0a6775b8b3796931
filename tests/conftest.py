"""
Shared fixtures: in-memory database, test client, signed-in users and a
captured SMTP outbox.
"""
import smtplib

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core import config
from app.core.auth_dependency import get_db
from app.core.security import create_access_token
from app.db.base import Base
from app.db.models import AuthUser, AppUser, Role, RecruitingEvent, Student
from app.services import email_service, storage_service


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the database dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(autouse=True)
def settings(monkeypatch, tmp_path):
    """Storage under tmp_path and a configured (fake) mail server."""
    monkeypatch.setattr(config, "STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.test.local")
    monkeypatch.setattr(config, "SMTP_USERNAME", None)
    monkeypatch.setattr(config, "REPORT_RECEIVER_EMAIL", "reports@company.com")
    monkeypatch.setattr(config, "SECRET_KEY", "test-secret-key")
    monkeypatch.setattr(config, "APP_URL", "http://localhost:3000")
    monkeypatch.setattr(config, "API_URL", "http://localhost:8000")


class FakeSMTP:
    """Stands in for smtplib.SMTP and records every sent message."""

    outbox = None
    error = None

    def __init__(self, host, port=0, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, msg):
        if self.error is not None:
            raise self.error
        self.outbox.append(msg)


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Messages 'sent' during the test."""
    sent = []
    smtp = type("CapturingSMTP", (FakeSMTP,), {"outbox": sent, "error": None})
    monkeypatch.setattr(email_service.smtplib, "SMTP", smtp)
    return sent


@pytest.fixture
def smtp_down(monkeypatch):
    """Every send fails as if the mail server refused the message."""
    smtp = type(
        "FailingSMTP",
        (FakeSMTP,),
        {"outbox": [], "error": smtplib.SMTPServerDisconnected("Connection unexpectedly closed")},
    )
    monkeypatch.setattr(email_service.smtplib, "SMTP", smtp)


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def create_user(db, email: str, role: Role = Role.STUDENT) -> AppUser:
    auth_user = AuthUser(email=email)
    db.add(auth_user)
    db.flush()
    app_user = AppUser(auth_user_id=auth_user.id, role=role)
    db.add(app_user)
    db.commit()
    db.refresh(app_user)
    return app_user


def auth_headers(app_user: AppUser) -> dict:
    token = create_access_token({"sub": app_user.auth_user_id})
    return {"Authorization": f"Bearer {token}"}


def create_application(db, app_user: AppUser, event: RecruitingEvent, **fields) -> Student:
    values = {
        "full_name": "Jane Doe",
        "email": "jane.doe@university.edu",
        "university": "State University",
        "degree": "BSc Computer Science",
        "gpa": 3.8,
    }
    values.update(fields)
    student = Student(id=app_user.id, event_id=event.id, **values)
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def store_resume(app_user: AppUser, content: bytes = b"%PDF-1.4 resume") -> str:
    path = storage_service.build_resume_path(app_user.id, "resume.pdf")
    storage_service.write_object(path, content)
    return path


@pytest.fixture
def admin(db_session):
    return create_user(db_session, "admin@company.com", Role.ADMIN)


@pytest.fixture
def recruiter(db_session):
    return create_user(db_session, "recruiter@company.com", Role.RECRUITER)


@pytest.fixture
def student_user(db_session):
    return create_user(db_session, "jane.doe@university.edu", Role.STUDENT)


@pytest.fixture
def active_event(db_session):
    event = RecruitingEvent(name="Fall 2025", is_active=True)
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event
