"""
Shared pytest fixtures for the Ship or Sink: Change test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_token / auth_headers: bearer tokens as the hosted auth provider issues them
    - user_id, other_user_id: two owners for isolation tests
    - project: Pre-created Project owned by ``user_id``
"""

import pytest
import jwt

from app import create_app
from app.models import db as _db
from app.services import project_service

TEST_JWT_SECRET = "test-auth-secret"
TEST_AUDIENCE = "authenticated"

USER_ID = "user-0001"
USER_EMAIL = "owner@example.com"
OTHER_USER_ID = "user-0002"
OTHER_USER_EMAIL = "other@example.com"


def mint_token(sub: str, email: str, **claims) -> str:
    payload = {"sub": sub, "email": email, "aud": TEST_AUDIENCE}
    payload.update(claims)
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


def bearer(sub: str, email: str) -> dict:
    return {"Authorization": f"Bearer {mint_token(sub, email)}"}


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Auth fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def user_id():
    return USER_ID


@pytest.fixture()
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture()
def auth_headers():
    return bearer(USER_ID, USER_EMAIL)


@pytest.fixture()
def other_headers():
    return bearer(OTHER_USER_ID, OTHER_USER_EMAIL)


@pytest.fixture()
def make_token():
    """Factory: ``make_token(sub, email, **claims)`` → signed bearer token string."""
    return mint_token


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def project(user_id):
    """Project owned by ``user_id``; there is no HTTP route for projects."""
    return project_service.create_project(user_id, {"name": "ERP Rollout"})


@pytest.fixture()
def other_project(other_user_id):
    return project_service.create_project(other_user_id, {"name": "Someone Else's Project"})
