"""Shared test fixtures."""

import json
import time

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.auth.store import get_user_by_email, upsert_user
from app.core.database import get_session
from app.core.http import get_http_client
from app.core.security import SESSION_COOKIE, sign_session
from app.main import app
from app.models import User

USER_EMAIL = "ada@example.com"


class MockUpstream:
    """Stands in for every outbound HTTP service during a test.

    Tests assign ``handler`` (request -> httpx.Response); every request that
    reaches the transport is recorded in ``requests``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(404)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))

    def requests_to(self, url_fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if url_fragment in str(r.url)]


def chat_completion(content: str | None) -> httpx.Response:
    """A chat-completions response whose first choice carries ``content``."""
    return httpx.Response(
        200,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
    )


def event_json(**overrides) -> str:
    event = {
        "summary": "Lunch",
        "start": {"dateTime": "2026-10-23T12:00:00Z", "timeZone": "UTC"},
        "end": {"dateTime": "2026-10-23T13:00:00Z", "timeZone": "UTC"},
    }
    event.update(overrides)
    return json.dumps(event)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="upstream")
def upstream_fixture() -> MockUpstream:
    return MockUpstream()


@pytest.fixture(name="client")
def client_fixture(session: Session, upstream: MockUpstream):
    """Create a test client with the test database and mocked upstreams."""

    def get_session_override():
        return session

    async def get_http_client_override():
        async with upstream.client() as http_client:
            yield http_client

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_http_client] = get_http_client_override
    client = TestClient(app, follow_redirects=False)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="stored_user")
def stored_user_fixture(session: Session) -> User:
    """A user whose cached access token is good for another hour."""
    upsert_user(
        session,
        USER_EMAIL,
        refresh_token="refresh-1",
        access_token="access-1",
        expires_in=3600,
        now=int(time.time()),
    )
    return get_user_by_email(session, USER_EMAIL)


@pytest.fixture(name="signed_in")
def signed_in_fixture(client: TestClient) -> TestClient:
    """The test client carrying a valid session cookie for USER_EMAIL."""
    client.cookies.set(SESSION_COOKIE, sign_session(USER_EMAIL))
    return client
