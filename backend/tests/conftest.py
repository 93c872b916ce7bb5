import os
from datetime import datetime, timezone

import pytest

# Configure the app for tests before anything imports the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["API_KEY"] = "static-test-key-0123456789"
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from clinicacrm.core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from clinicacrm.core.security import create_access_token, hash_password  # noqa: E402
from clinicacrm.main import app  # noqa: E402
from clinicacrm.models import Case, CaseChannel, User  # noqa: E402
from clinicacrm.services.api_keys import issue_api_key  # noqa: E402


STATIC_API_KEY = "static-test-key-0123456789"
USER_PASSWORD = "s3cret-pass"


@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """FastAPI test client sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db, email, full_name, is_active=True):
    user = User(
        email=email,
        password_hash=hash_password(USER_PASSWORD),
        full_name=full_name,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "giulia.bianchi@clinic.it", "Giulia Bianchi")


@pytest.fixture
def other_user(db):
    return _make_user(db, "luca.verdi@clinic.it", "Luca Verdi")


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def auth_headers(user):
    """Dashboard session for ``user``."""
    return bearer(user)


@pytest.fixture
def make_api_key(db, user):
    """Factory: persist a key owned by ``user`` and return (secret, record)."""
    def _make(owner=None, **kwargs):
        kwargs.setdefault("name", "Call center")
        secret, record = issue_api_key(owner_id=(owner or user).id, **kwargs)
        db.add(record)
        db.commit()
        return secret, record

    return _make


@pytest.fixture
def make_case(db):
    """Factory: persist a case with sensible defaults."""
    def _make(**overrides):
        values = {
            "first_name": "Mario",
            "last_name": "Rossi",
            "channel": CaseChannel.WEB,
            "origin": "Landing page",
            "clinic": "Roma Centro",
        }
        values.update(overrides)
        case = Case(**values)
        db.add(case)
        db.commit()
        return case

    return _make


def at(day: int, hour: int = 9) -> datetime:
    """Fixed UTC timestamps for ordering tests."""
    return datetime(2024, 3, day, hour, 0, tzinfo=timezone.utc)
