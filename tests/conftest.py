"""
Shared pytest fixtures for the TrackBoard test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_user: factory that signs up and logs in an account via the API
    - admin: the first account of the test (admin by the first-signup rule)
"""

import pytest

from trackboard import create_app
from trackboard.models import db as _db

DEFAULT_PASSWORD = "Pass1234!"


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, username, email, password=DEFAULT_PASSWORD):
    return client.post(
        "/api/auth/signup",
        json={"username": username, "email": email, "password": password},
    )


def login(client, email, password=DEFAULT_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


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


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def make_user(client):
    """Sign up + log in through the API.

    Returns a dict with ``id``, ``username``, ``email``, ``role``, ``token``
    and ready-made ``headers``.
    """

    def _make(username, email=None, password=DEFAULT_PASSWORD):
        email = email or f"{username}@acme.io"
        res = signup(client, username, email, password)
        assert res.status_code == 201, res.get_json()
        res = login(client, email, password)
        assert res.status_code == 200, res.get_json()
        body = res.get_json()
        return {
            **body["user"],
            "token": body["token"],
            "headers": auth_headers(body["token"]),
        }

    return _make


@pytest.fixture()
def admin(make_user):
    """First account created in the test, therefore an admin."""
    user = make_user("root")
    assert user["role"] == "admin"
    return user


@pytest.fixture()
def alice(admin, make_user):
    return make_user("alice")


@pytest.fixture()
def bob(admin, make_user):
    return make_user("bob")


@pytest.fixture()
def carol(admin, make_user):
    return make_user("carol")


@pytest.fixture()
def project(client, alice):
    """Project "Infra" created by alice."""
    res = client.post(
        "/api/projects",
        json={"name": "Infra", "description": "Infrastructure work"},
        headers=alice["headers"],
    )
    assert res.status_code == 201
    return res.get_json()
