"""Test fixtures — a fresh in-memory database per test, fake collaborators.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server:

1. Each test gets its own SQLite engine (aiosqlite, in memory). StaticPool
   keeps the single connection alive so every session sees the same
   database; Base.metadata.create_all builds the schema in one call.
2. The app's get_db is overridden to hand out sessions from that engine,
   so the real auth pipeline and services run end to end.
3. reCAPTCHA and email are external collaborators: get_human_verifier and
   get_notifier are overridden with fakes that record what they were
   asked to do.

Env vars are set before anything from gamegauge is imported because
Settings are read once, at import time.
"""

import os

os.environ.setdefault("GAMEGAUGE_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GAMEGAUGE_JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("GAMEGAUGE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("GAMEGAUGE_SMTP_HOST", "")

from typing import Optional  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from gamegauge.auth.recaptcha import get_human_verifier  # noqa: E402
from gamegauge.db.engine import get_db  # noqa: E402
from gamegauge.db.models import Base  # noqa: E402
from gamegauge.main import app  # noqa: E402
from gamegauge.services.email_service import get_notifier  # noqa: E402

PASSWORD = "password123"


class FakeVerifier:
    """Human-verification oracle with a fixed answer."""

    def __init__(self, result: bool = True):
        self.result = result
        self.tokens: list[Optional[str]] = []

    async def check(self, token: Optional[str]) -> bool:
        self.tokens.append(token)
        return self.result


class FakeNotifier:
    """Records reset links instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def send_reset_link(self, to_email: str, token: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append((to_email, token))


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def verifier():
    return FakeVerifier()


@pytest_asyncio.fixture()
async def notifier():
    return FakeNotifier()


@pytest_asyncio.fixture()
async def client(session_factory, verifier, notifier):
    """HTTP client running the real app against the test database.

    Learn: Nothing auth-related is overridden. Tests that need an
    authenticated caller register + log in through the API (see the
    `auth_headers` fixture), exactly like the frontend does.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_human_verifier] = lambda: verifier
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register_and_login(
    client: AsyncClient, username: str, email: str, password: str = PASSWORD
) -> dict[str, str]:
    """Create an account through the API and return its bearer header."""
    r = await client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": email,
            "password": password,
            "recaptcha_token": "human",
        },
    )
    assert r.status_code == 201, r.text

    r = await client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "recaptcha_token": "human"},
    )
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest_asyncio.fixture()
async def auth_headers(client):
    """Bearer header for a logged-in "alice"."""
    return await register_and_login(client, "alice", "a@x.com")


@pytest_asyncio.fixture()
async def other_headers(client):
    """Bearer header for a second account, "bob"."""
    return await register_and_login(client, "bob", "b@x.com")
