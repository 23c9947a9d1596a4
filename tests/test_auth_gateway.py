"""Authentication gateway tests — bearer header → identity (or not).

Learn: The gateway never rejects on its own; get_current_user does.
So every bad-token case below ends as the same 401 from a protected
route, while the gateway unit tests check what it returns.
"""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request

from conftest import register_and_login
from gamegauge.auth.credentials import CredentialStore
from gamegauge.auth.dependencies import AuthenticationGateway, CurrentIdentity
from gamegauge.auth.jwt import TokenService
from gamegauge.auth.password import hash_password
from gamegauge.db.models import User
from gamegauge.errors import AuthenticationError


def _request() -> Request:
    return Request({"type": "http", "headers": []})


async def _make_user(db, email="a@x.com", username="alice") -> User:
    user = User(username=username, email=email, password_hash=hash_password("password123"))
    return await CredentialStore(db).save(user)


# ═══════════════════════════════════════════════════════════
# Gateway unit tests
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "Token abc", "Basic YTpi", "bearer lowercase"])
async def test_no_bearer_header_is_anonymous(db_session, header):
    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))
    assert await gateway.authenticate(_request(), header) is None


@pytest.mark.asyncio
async def test_valid_token_sets_identity(db_session):
    await _make_user(db_session)
    tokens = TokenService()
    request = _request()
    gateway = AuthenticationGateway(tokens, CredentialStore(db_session))

    identity = await gateway.authenticate(request, f"Bearer {tokens.issue('a@x.com')}")

    assert identity == CurrentIdentity(subject="a@x.com")
    assert identity.authorities == ()
    assert request.state.identity is identity


@pytest.mark.asyncio
async def test_existing_identity_is_reused(db_session):
    request = _request()
    request.state.identity = CurrentIdentity(subject="cached@x.com")
    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))

    identity = await gateway.authenticate(request, "Bearer whatever")
    assert identity.subject == "cached@x.com"


@pytest.mark.asyncio
async def test_unreadable_token_is_anonymous(db_session):
    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))
    assert await gateway.authenticate(_request(), "Bearer not.a.jwt") is None


@pytest.mark.asyncio
async def test_expired_token_is_anonymous(db_session):
    await _make_user(db_session)
    past = datetime.now(timezone.utc) - timedelta(days=2)
    token = TokenService(clock=lambda: past).issue("a@x.com")
    request = _request()

    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))
    assert await gateway.authenticate(request, f"Bearer {token}") is None
    assert getattr(request.state, "identity", None) is None


@pytest.mark.asyncio
async def test_expired_token_of_missing_user_is_anonymous(db_session):
    past = datetime.now(timezone.utc) - timedelta(days=2)
    token = TokenService(clock=lambda: past).issue("ghost@x.com")

    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))
    assert await gateway.authenticate(_request(), f"Bearer {token}") is None


@pytest.mark.asyncio
async def test_token_for_missing_user_raises(db_session):
    token = TokenService().issue("ghost@x.com")
    gateway = AuthenticationGateway(TokenService(), CredentialStore(db_session))
    with pytest.raises(AuthenticationError):
        await gateway.authenticate(_request(), f"Bearer {token}")


# ═══════════════════════════════════════════════════════════
# Through the HTTP stack
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_requires_token(client):
    r = await client.get("/api/users/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_token(client):
    headers = await register_and_login(client, "alice", "a@x.com")
    r = await client.get("/api/users/me", headers=headers)
    assert r.status_code == 200
    me = r.json()
    assert me["username"] == "alice"
    assert me["email"] == "a@x.com"
    assert me["email_verified"] is False
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_me_with_garbage_token(client):
    r = await client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(client):
    await register_and_login(client, "alice", "a@x.com")
    past = datetime.now(timezone.utc) - timedelta(hours=25)
    token = TokenService(clock=lambda: past).issue("a@x.com")

    r = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_token_of_deleted_account_is_401(client, session_factory):
    headers = await register_and_login(client, "alice", "a@x.com")
    async with session_factory() as s:
        store = CredentialStore(s)
        await store.delete(await store.find_by_email("a@x.com"))

    r = await client.get("/api/boards", headers=headers)
    assert r.status_code == 401
