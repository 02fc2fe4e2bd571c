"""
Pytest configuration and fixtures for Snippet Vault tests.
"""

import os

# Settings and the engine are built at import time
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEBUG", "true")

import pytest
from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.core.database import Base, get_db
from app.core.auth import create_user_token
from app.core.errors import register_exception_handlers
from app.core.federated import (
    FederatedIdentity,
    FederatedIdentityError,
    get_identity_verifier,
)
from app.core.security import get_password_hash
from app.models.user import User, ADMIN_ROLE, USER_ROLE
from app.models.tag import Tag
from app.models.snippet import Snippet


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_PASSWORD = "pw1"


class FakeIdentityVerifier:
    """Accepts assertions registered in `identities`, rejects everything else."""

    def __init__(self):
        self.identities = {}

    def verify(self, assertion: str) -> FederatedIdentity:
        if assertion not in self.identities:
            raise FederatedIdentityError("Token signature could not be verified")
        return self.identities[assertion]


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture(scope="function")
def test_app(db_session, identity_verifier):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from app.main import include_routers

    test_app = FastAPI(title="Snippet Vault - Test", version="1.0.0")
    register_exception_handlers(test_app)
    include_routers(test_app)

    @test_app.get("/health")
    def health():
        return {"status": "ok"}

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(scope="function")
def make_user(db_session):
    """Factory for persisted users with password TEST_PASSWORD."""

    def _make_user(
        user_name: str,
        email: Optional[str] = None,
        role: str = USER_ROLE,
        password: Optional[str] = TEST_PASSWORD,
    ) -> User:
        user = User(
            user_name=user_name,
            email=email or f"{user_name}@example.com",
            password_hash=get_password_hash(password) if password else None,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def test_user(make_user) -> User:
    return make_user("alice", "alice@example.com")


@pytest.fixture(scope="function")
def other_user(make_user) -> User:
    return make_user("bob", "bob@example.com")


@pytest.fixture(scope="function")
def admin_user(make_user) -> User:
    return make_user("root", "root@example.com", role=ADMIN_ROLE)


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture(scope="function")
def headers_for():
    """Build Authorization headers for any user."""
    return bearer


@pytest.fixture(scope="function")
def auth_headers(test_user) -> dict:
    """Create authentication headers for test requests."""
    return bearer(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user) -> dict:
    return bearer(other_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user) -> dict:
    return bearer(admin_user)


@pytest.fixture(scope="function")
def make_tag(db_session):
    def _make_tag(user: User, name: str) -> Tag:
        tag = Tag(user_id=user.id, name=name)
        db_session.add(tag)
        db_session.commit()
        db_session.refresh(tag)
        return tag

    return _make_tag


@pytest.fixture(scope="function")
def make_snippet(db_session):
    def _make_snippet(user: User, title: str = "Hello", tags=None) -> Snippet:
        snippet = Snippet(
            user_id=user.id,
            title=title,
            description=f"{title} description",
            code='print("hello")',
            language="python",
            tags=list(tags or []),
        )
        db_session.add(snippet)
        db_session.commit()
        db_session.refresh(snippet)
        return snippet

    return _make_snippet


@pytest.fixture(scope="function")
def test_tag(make_tag, test_user) -> Tag:
    return make_tag(test_user, "python")


@pytest.fixture(scope="function")
def test_snippet(make_snippet, test_user, test_tag) -> Snippet:
    return make_snippet(test_user, "Hello world", tags=[test_tag])
