"""Testes de /health e /ready."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.app import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "media_relay"


def test_ready_without_redis(client: TestClient) -> None:
    client.app.state.redis_client = None

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["redis"]["error"] == "not_configured"


def test_ready_with_redis(client: TestClient) -> None:
    redis = AsyncMock()
    redis.ping.return_value = True
    client.app.state.redis_client = redis

    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "ready"
    assert response.json()["checks"]["redis"]["status"] == "ok"


def test_ready_redis_error(client: TestClient) -> None:
    redis = AsyncMock()
    redis.ping.side_effect = ConnectionError("refused")
    client.app.state.redis_client = redis

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["redis"]["error"] == "ConnectionError"


def test_ready_redis_timeout(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def slow_ping() -> bool:
        await asyncio.sleep(1)
        return True

    redis = AsyncMock()
    redis.ping.side_effect = slow_ping
    client.app.state.redis_client = redis
    monkeypatch.setattr("api.routes.health.router.REDIS_PING_TIMEOUT_SECONDS", 0.01)

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["redis"]["error"] == "timeout"
