"""Shared fixtures for tracker_server tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator

import pytest
from litestar.testing import TestClient

from tracker_server.app import create_app
from tracker_server.clients.google_oauth_client import GoogleOAuthClient, GoogleProfile
from tracker_server.config import Settings
from tracker_server.dao.user_dao import UserDAO
from tracker_server.services.user_service import UserService
from tracker_server.utils.db import Database
from tracker_server.utils.session import SessionStore

BASE_URL = "http://testserver.local"


@pytest.fixture()
def settings() -> Settings:
    """Test settings with in-memory SQLite and dummy Google credentials."""
    return Settings(
        secret_key="test-secret-key",
        database_url="sqlite+aiosqlite://",
        base_url=BASE_URL,
        google_client_id="cid-123",
        google_client_secret="csecret",
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:  # type: ignore[type-arg]
    """Sync test client wired to the app with lifespan managed."""
    app = create_app(settings)
    with TestClient(app=app, base_url=BASE_URL) as test_client:
        yield test_client


@pytest.fixture()
def oauth_client(client: TestClient) -> GoogleOAuthClient:  # type: ignore[type-arg]
    """The GoogleOAuthClient inside the app's AuthResource."""
    oauth: GoogleOAuthClient = client.app.state.auth._oauth_client
    return oauth


@pytest.fixture()
async def database() -> AsyncIterator[Database]:
    """Fresh in-memory database with tables created."""
    database = Database("sqlite+aiosqlite://")
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture()
def user_service(database: Database) -> UserService:
    """UserService over the in-memory database."""
    return UserService(UserDAO(database.pool))


@pytest.fixture()
def session_store() -> SessionStore:
    """SessionStore with a fixed test key."""
    return SessionStore(secret_key="test-secret-key")


@pytest.fixture()
def make_profile() -> Callable[..., GoogleProfile]:
    """Factory for verified Google profiles."""

    def _make(email: str = "a@x.com", **fields: object) -> GoogleProfile:
        values: dict[str, object] = {
            "subject": f"sub-{email}",
            "email": email,
            "email_verified": True,
            "name": "Ada Lovelace",
            "given_name": "Ada",
            "family_name": "Lovelace",
            "picture": "https://example.com/ada.jpg",
        }
        values.update(fields)
        return GoogleProfile(**values)  # type: ignore[arg-type]

    return _make
