"""
tests/integration/conftest.py: Fixtures and helpers for all integration tests.

Design:
  - Tests run against in-memory SQLite by default (TEST_DATABASE_URL overrides
    it, e.g. a local PostgreSQL vidtube_test database).
  - The app is created once per session using create_app("testing").
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Clients:
  - client     : the usual test client. It keeps cookies, so after login()
                  it is authenticated by the accessToken cookie as well.
  - anon_client: a second, independent client with an empty cookie jar, for
                  requests that must arrive with no session at all.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)      → sanitized user dict
  - login(client, ...)         → {"user": {...}, "accessToken": ..., "refreshToken": ...}
  - signup(client, ...)        → register + login in one call
  - auth_headers(token)        → {"Authorization": "Bearer <token>"}
  - make_video(client, ...)    → video dict
  - make_tweet(client, ...)    → tweet dict
  - make_playlist(client, ...) → playlist dict
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from vidtube.app import create_app
from vidtube.app.extensions import db as _db

PASSWORD = "Secret1!"

# Children before parents.
_TABLES_IN_DELETE_ORDER = (
    "watch_history",
    "playlist_videos",
    "playlists",
    "subscriptions",
    "likes",
    "comments",
    "tweets",
    "videos",
    "users",
)


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the whole run."""
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes all rows after every test in FK-safe order."""
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test
        for table in _TABLES_IN_DELETE_ORDER:
            _db.session.execute(text(f"DELETE FROM {table}"))
        _db.session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


@pytest.fixture
def anon_client(app):
    """A client that never shares cookies with `client`."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def register(
    client,
    username: str = "jane",
    email: str | None = None,
    password: str = PASSWORD,
    full_name: str | None = None,
) -> dict:
    """Registers a new user and returns the sanitized user dict."""
    if email is None:
        email = f"{username}@gmail.com"
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": email,
            "full_name": full_name or username.title(),
            "password": password,
        },
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]


def login(client, identifier: str, password: str = PASSWORD) -> dict:
    """
    Logs in and returns the response data dict.
    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    resp = client.post(
        "/api/v1/auth/login",
        json={"identifier": identifier, "password": password},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]


def signup(client, username: str = "jane") -> dict:
    """Registers and logs in `username`; returns the login data dict."""
    register(client, username)
    return login(client, username)


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def set_cookie_headers(resp) -> list[str]:
    return resp.headers.getlist("Set-Cookie")


def make_video(
    client,
    token: str,
    title: str = "Test Video",
    description: str = "A test upload",
    duration: int = 120,
    is_public: bool = True,
) -> dict:
    resp = client.post(
        "/api/v1/videos/",
        json={
            "title": title,
            "description": description,
            "video_file": "https://media.example.com/v/test.mp4",
            "thumbnail": "https://media.example.com/t/test.jpg",
            "duration": duration,
            "is_public": is_public,
        },
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_video failed: {resp.get_json()}"
    return resp.get_json()["data"]


def make_tweet(client, token: str, content: str = "hello world") -> dict:
    resp = client.post(
        "/api/v1/tweets/",
        json={"content": content},
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_tweet failed: {resp.get_json()}"
    return resp.get_json()["data"]


def make_playlist(client, token: str, name: str = "Favourites") -> dict:
    resp = client.post(
        "/api/v1/playlists/",
        json={"name": name, "description": "Things worth rewatching"},
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_playlist failed: {resp.get_json()}"
    return resp.get_json()["data"]
