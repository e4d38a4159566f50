"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, rebuilt for every test
- JWT token minting for authenticated tests
- HTTPX AsyncClient with bearer auth
- Factories for clients, appointments and notes
"""
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncGenerator, Generator

# Must be set before lawdesk modules read settings
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lawdesk.core.config import settings
from lawdesk.core.deps import get_db
from lawdesk.core.security import create_access_token
from lawdesk.db.base import Base
from lawdesk.db.models import Appointment, Client, Note, User
from lawdesk.main import app


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test; StaticPool shares one connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    """Session bound to the per-test database."""
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep local uploads inside the test's tmp dir."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(path))
    return path


# =============================================================================
# Users
# =============================================================================

def _make_user(db: Session, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{name.lower()}-{uuid.uuid4().hex[:8]}@test.com",
        display_name=f"{name} User",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    """The acting user."""
    return _make_user(db, "Test")


@pytest.fixture(scope="function")
def other_user(db: Session) -> User:
    """A second tenant, for isolation checks."""
    return _make_user(db, "Other")


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    """Create JWT token for test user."""
    token = create_access_token(test_user.id, test_user.token_version)
    return TestAuth(user=test_user, token=token)


@pytest.fixture(scope="function")
def auth_headers(test_auth: TestAuth) -> dict[str, str]:
    return test_auth.headers


@pytest.fixture(scope="function")
def other_auth_headers(other_user: User) -> dict[str, str]:
    token = create_access_token(other_user.id, other_user.token_version)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient carrying the test user's bearer token."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=auth_headers,
    ) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_client(db: Session, test_user: User):
    """Factory for persisted clients (owned by test_user unless given)."""
    def _make(owner: User | None = None, **overrides) -> Client:
        values = {
            "name": "Asha Rao",
            "phone": "+91 98765 43210",
            "case_type": "civil",
            "notes": [],
            "documents": [],
        }
        values.update(overrides)
        client = Client(owner_id=(owner or test_user).id, **values)
        db.add(client)
        db.commit()
        return client

    return _make


@pytest.fixture
def make_appointment(db: Session, test_user: User, make_client):
    """Factory for persisted appointments; bypasses the conflict check."""
    def _make(
        start: datetime,
        end: datetime,
        owner: User | None = None,
        client: Client | None = None,
        **overrides,
    ) -> Appointment:
        owner = owner or test_user
        client = client or make_client(owner=owner)
        values = {
            "title": "Consultation",
            "attendees": [],
            "notes": [],
            "documents": [],
        }
        values.update(overrides)
        appointment = Appointment(
            owner_id=owner.id,
            client_id=client.id,
            start_time=start,
            end_time=end,
            **values,
        )
        db.add(appointment)
        db.commit()
        return appointment

    return _make


@pytest.fixture
def make_note(db: Session, test_user: User):
    """Factory for persisted notes."""
    def _make(owner: User | None = None, tags: list[str] | None = None, **overrides) -> Note:
        values = {
            "title": "Research",
            "content": "Precedent on tenancy disputes",
            "attachments": [],
        }
        values.update(overrides)
        note = Note(owner_id=(owner or test_user).id, **values)
        note.set_tags(tags or [])
        db.add(note)
        db.commit()
        return note

    return _make
