"""Testes do decodificador de respostas de upload."""

from __future__ import annotations

import pytest

from app.domain.errors import UploadFailedError
from app.infra.image_host import decode_upload_response

DOMAIN = "https://img.example.com"


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ([{"src": "/file/abc.jpg"}], "https://img.example.com/file/abc.jpg"),
        ([{"url": "https://cdn.img.example.com/abc.jpg"}], "https://cdn.img.example.com/abc.jpg"),
        ([{"path": "file/abc.jpg"}], "https://img.example.com/file/abc.jpg"),
        ({"src": "/file/a.mp4"}, "https://img.example.com/file/a.mp4"),
        ({"url": "/file/b.mp4"}, "https://img.example.com/file/b.mp4"),
        ({"path": "/file/c.mp4"}, "https://img.example.com/file/c.mp4"),
        ({"data": {"url": "/file/d.jpg"}}, "https://img.example.com/file/d.jpg"),
        ({"fileId": "e.jpg"}, "https://img.example.com/file/e.jpg"),
    ],
)
def test_known_variants(payload: object, expected: str) -> None:
    assert decode_upload_response(payload, DOMAIN) == expected


def test_priority_src_over_url() -> None:
    payload = {"src": "/file/first.jpg", "url": "/file/second.jpg", "fileId": "third"}
    assert decode_upload_response(payload, DOMAIN).endswith("/file/first.jpg")


@pytest.mark.parametrize(
    "payload",
    [
        {"error": "quota exceeded"},
        {"success": True},
        [],
        "ok",
        {"src": 123},
        [{"name": "x"}],
    ],
)
def test_unusable_responses_fail(payload: object) -> None:
    with pytest.raises(UploadFailedError):
        decode_upload_response(payload, DOMAIN)
