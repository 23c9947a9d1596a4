"""Health endpoint tests."""

import pytest

from gamegauge import cache


@pytest.mark.asyncio
async def test_health_without_redis_is_degraded(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    data = r.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["redis"] == "not configured"
    assert data["status"] == "degraded"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_with_redis_is_healthy(client):
    class PingOnly:
        async def ping(self):
            return True

    cache.set_redis(PingOnly())
    try:
        r = await client.get("/api/health")
    finally:
        cache.set_redis(None)
    assert r.json()["status"] == "healthy"
