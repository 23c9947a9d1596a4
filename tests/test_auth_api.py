"""Auth API tests — register, login, forgot/reset password over HTTP.

Learn: Tests cover:
1. Registration + duplicate prevention (409 with the colliding field)
2. Body validation → 400 with a {field: message} map
3. Login → bearer token, uniform 401 on failure
4. Forgot password answers the same whether or not the email exists
5. Reset password with a token captured by the fake notifier
"""

import pytest
from sqlalchemy import func, select

from gamegauge.db.models import User

FORGOT_MESSAGE = "If the email exists, a reset link has been sent."


def _register_body(**overrides):
    body = {
        "username": "alice",
        "email": "a@x.com",
        "password": "password123",
        "recaptcha_token": "human",
    }
    body.update(overrides)
    return body


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    r = await client.post("/api/auth/register", json=_register_body())
    assert r.status_code == 201
    assert r.json() == {"message": "User registered successfully!"}


@pytest.mark.asyncio
async def test_register_duplicate_username(client, session_factory):
    r1 = await client.post("/api/auth/register", json=_register_body())
    assert r1.status_code == 201

    r2 = await client.post("/api/auth/register", json=_register_body(email="other@x.com"))
    assert r2.status_code == 409
    assert r2.json()["field"] == "username"

    async with session_factory() as s:
        count = (await s.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await client.post("/api/auth/register", json=_register_body())
    r = await client.post("/api/auth/register", json=_register_body(username="alice2"))
    assert r.status_code == 409
    assert r.json() == {"detail": "Email is already in use", "field": "email"}


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post("/api/auth/register", json=_register_body(password="abc"))
    assert r.status_code == 400
    assert "password" in r.json()["errors"]


@pytest.mark.asyncio
async def test_register_invalid_fields_reported_together(client):
    r = await client.post(
        "/api/auth/register",
        json=_register_body(username="al", email="not-an-email"),
    )
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert set(errors) >= {"username", "email"}


@pytest.mark.asyncio
async def test_register_failed_human_check(client, verifier):
    verifier.result = False
    r = await client.post("/api/auth/register", json=_register_body())
    assert r.status_code == 400
    assert r.json()["detail"] == "Human verification failed"


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    await client.post("/api/auth/register", json=_register_body())
    r = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": "password123", "recaptcha_token": "human"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["token"]
    assert data["token_type"] == "bearer"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("a@x.com", "wrong-password"), ("nobody@x.com", "password123")],
)
async def test_login_failures_look_the_same(client, email, password):
    await client.post("/api/auth/register", json=_register_body())
    r = await client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "recaptcha_token": "human"},
    )
    assert r.status_code == 401
    assert r.json() == {"detail": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_failed_human_check_is_401(client, verifier):
    await client.post("/api/auth/register", json=_register_body())
    verifier.result = False
    r = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": "password123", "recaptcha_token": "bot"},
    )
    assert r.status_code == 401
    assert r.json() == {"detail": "Invalid credentials"}


# ═══════════════════════════════════════════════════════════
# Forgot / reset password
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_forgot_password_is_uniform(client, notifier):
    await client.post("/api/auth/register", json=_register_body())

    known = await client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    unknown = await client.post("/api/auth/forgot-password", json={"email": "nobody@x.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json() == {"message": FORGOT_MESSAGE}
    assert [to for to, _ in notifier.sent] == ["a@x.com"]


@pytest.mark.asyncio
async def test_reset_password_flow(client, notifier):
    await client.post("/api/auth/register", json=_register_body())
    await client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
    token = notifier.sent[0][1]

    r = await client.post(
        "/api/auth/reset-password",
        json={"token": token, "new_password": "brand-new-pass"},
    )
    assert r.status_code == 200

    old = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": "password123", "recaptcha_token": "human"},
    )
    new = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": "brand-new-pass", "recaptcha_token": "human"},
    )
    assert old.status_code == 401
    assert new.status_code == 200

    reused = await client.post(
        "/api/auth/reset-password",
        json={"token": token, "new_password": "another-pass-1"},
    )
    assert reused.status_code == 400


@pytest.mark.asyncio
async def test_reset_password_bad_token(client):
    r = await client.post(
        "/api/auth/reset-password",
        json={"token": "nope", "new_password": "brand-new-pass"},
    )
    assert r.status_code == 400
    assert r.json() == {"detail": "Invalid reset token"}
