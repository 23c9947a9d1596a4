"""Exception handler tests — each domain error class → status + body.

Learn: A throwaway FastAPI app with routes that just raise lets us pin
the HTTP shape of every error class without going through a service.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from gamegauge.api.errors import register_exception_handlers
from gamegauge.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/validation")
    async def validation():
        raise ValidationError({"round_number": "Round already closed"})

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("email", "Email already in use")

    @app.get("/foreign")
    async def foreign():
        raise AuthorizationError("Board not found")

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Board not found")

    @app.get("/unexpected")
    async def unexpected():
        raise UnexpectedError("connection pool exhausted")

    @app.get("/typed/{item_id}")
    async def typed(item_id: int):
        return {"item_id": item_id}

    return app


@pytest.fixture
def errors_client():
    return AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test")


@pytest.mark.asyncio
async def test_validation_error_is_field_map(errors_client):
    async with errors_client as client:
        r = await client.get("/validation")
    assert r.status_code == 400
    assert r.json() == {"errors": {"round_number": "Round already closed"}}


@pytest.mark.asyncio
async def test_request_validation_uses_same_shape(errors_client):
    async with errors_client as client:
        r = await client.get("/typed/abc")
    assert r.status_code == 400
    assert list(r.json()["errors"]) == ["item_id"]


@pytest.mark.asyncio
async def test_conflict_names_the_field(errors_client):
    async with errors_client as client:
        r = await client.get("/conflict")
    assert r.status_code == 409
    assert r.json() == {"detail": "Email already in use", "field": "email"}


@pytest.mark.asyncio
async def test_authorization_looks_like_not_found(errors_client):
    async with errors_client as client:
        foreign = await client.get("/foreign")
        missing = await client.get("/missing")
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json() == {"detail": "Board not found"}


@pytest.mark.asyncio
async def test_unexpected_error_is_opaque(errors_client):
    async with errors_client as client:
        r = await client.get("/unexpected")
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
