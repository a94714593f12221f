"""Testes do HttpClient com httpx.MockTransport."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.infra.http import HttpClient, HttpClientConfig, HttpError


def _client(handler, max_retries: int = 2) -> HttpClient:
    return HttpClient(
        config=HttpClientConfig(max_retries=max_retries, backoff_base_seconds=0.0),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_retries_retryable_status_then_succeeds() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    with patch("app.infra.http.client.asyncio.sleep", new=AsyncMock()) as sleep:
        response = await _client(handler).get("https://api.example.com/x")

    assert response.status_code == 200
    assert len(calls) == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_exhausted_retries_raise() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429)

    with patch("app.infra.http.client.asyncio.sleep", new=AsyncMock()):
        with pytest.raises(HttpError) as exc_info:
            await _client(handler, max_retries=1).get("https://api.example.com/x")

    assert exc_info.value.status_code == 429
    assert exc_info.value.is_retryable is True


@pytest.mark.asyncio
async def test_client_errors_are_returned() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    response = await _client(handler).get("https://api.example.com/x")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_connect_error_becomes_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(HttpError, match="http_connection_error"):
        await _client(handler, max_retries=0).get("https://api.example.com/x")


@pytest.mark.asyncio
async def test_default_headers_merged() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200)

    client = HttpClient(
        config=HttpClientConfig(default_headers={"X-Base": "1"}),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    await client.get("https://api.example.com/x", headers={"X-Call": "2"})

    assert seen["x-base"] == "1"
    assert seen["x-call"] == "2"


@pytest.mark.asyncio
async def test_send_stream_requires_shared_client() -> None:
    with pytest.raises(RuntimeError):
        await HttpClient().send_stream("GET", "https://api.example.com/x")
