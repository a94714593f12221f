"""Testes HTTP de GET /proxy/{version}/{token}."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from app.app import create_app
from app.bootstrap.dependencies import get_proxy_resolver
from app.infra.http import HttpClient, HttpClientConfig
from app.infra.origin import OriginFetcher
from app.services.proxy_address import ProxyAddressCodec
from app.services.proxy_resolver import ProxyResolver
from config.settings import ProxySettings, get_proxy_settings

ORIGINAL = "https://sns-video-bd.xhscdn.com/stream/abc.mp4"
MINTED_AT = 1_700_000_000.0


def _origin(request: httpx.Request) -> httpx.Response:
    if "dead" in request.url.host:
        return httpx.Response(404)
    if request.method == "HEAD":
        return httpx.Response(200, headers={"content-length": "5"})
    return httpx.Response(200, content=b"video", headers={"content-type": "video/mp4"})


def _client(settings: ProxySettings, now: float) -> TestClient:
    http = HttpClient(
        config=HttpClientConfig(max_retries=0),
        client=httpx.AsyncClient(transport=httpx.MockTransport(_origin)),
    )
    resolver = ProxyResolver(ProxyAddressCodec(settings, clock=lambda: now), OriginFetcher(http))
    app = create_app()
    app.dependency_overrides[get_proxy_resolver] = lambda: resolver
    return TestClient(app)


@pytest.fixture
def codec(proxy_settings: ProxySettings) -> ProxyAddressCodec:
    return ProxyAddressCodec(proxy_settings, clock=lambda: MINTED_AT)


@pytest.fixture
def prefix() -> str:
    return f"/proxy/{get_proxy_settings().version}"


def test_streams_media_as_download(
    codec: ProxyAddressCodec, proxy_settings: ProxySettings, prefix: str
) -> None:
    token = codec.mint(ORIGINAL, "abc.mp4", "xiaohongshu")
    client = _client(proxy_settings, MINTED_AT + 60)

    response = client.get(f"{prefix}/{token}.mp4")

    assert response.status_code == 200
    assert response.content == b"video"
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.headers["content-disposition"] == 'attachment; filename="abc.mp4"'
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["x-proxy-source"] == "xiaohongshu"


def test_minted_url_matches_route(
    codec: ProxyAddressCodec, proxy_settings: ProxySettings, prefix: str
) -> None:
    url = codec.mint_url(ORIGINAL, "abc.mp4", "xiaohongshu")
    path = url.removeprefix(proxy_settings.base_url)
    client = _client(proxy_settings, MINTED_AT)

    assert path.startswith(f"{prefix}/")
    assert client.get(path).status_code == 200


def test_malformed_token(proxy_settings: ProxySettings, prefix: str) -> None:
    response = _client(proxy_settings, MINTED_AT).get(f"{prefix}/not-a-token")

    assert response.status_code == 400
    assert response.json()["reason"] == "malformed"


def test_tampered_token(proxy_settings: ProxySettings, prefix: str) -> None:
    other = ProxyAddressCodec(
        ProxySettings(base_url=proxy_settings.base_url, signing_secret="wrong"),
        clock=lambda: MINTED_AT,
    )
    token = other.mint(ORIGINAL, "abc.mp4", "xiaohongshu")

    response = _client(proxy_settings, MINTED_AT).get(f"{prefix}/{token}")

    assert response.status_code == 403
    assert response.json()["reason"] == "tampered"


def test_expired_token(
    codec: ProxyAddressCodec, proxy_settings: ProxySettings, prefix: str
) -> None:
    token = codec.mint(ORIGINAL, "abc.mp4", "xiaohongshu")
    later = MINTED_AT + proxy_settings.max_age_seconds + 1

    response = _client(proxy_settings, later).get(f"{prefix}/{token}")

    assert response.status_code == 403
    assert response.json()["reason"] == "expired"


def test_no_source_available(
    codec: ProxyAddressCodec, proxy_settings: ProxySettings, prefix: str
) -> None:
    token = codec.mint(
        "https://dead.xhscdn.com/a.mp4", "a.mp4", "xiaohongshu", ["https://dead2.xhscdn.com/a.mp4"]
    )

    response = _client(proxy_settings, MINTED_AT).get(f"{prefix}/{token}")

    assert response.status_code == 503
