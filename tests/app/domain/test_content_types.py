"""Testes de inferência de tipo de conteúdo."""

from __future__ import annotations

import pytest

from app.domain.content_types import (
    DEFAULT_CONTENT_TYPE,
    extension_for,
    extension_from_url,
    normalize_content_type,
    resolve_content_type,
    sniff_content_type,
)

JPEG_HEAD = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"
PNG_HEAD = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
MP4_HEAD = b"\x00\x00\x00\x20ftypisom\x00\x00\x02\x00"
MOV_HEAD = b"\x00\x00\x00\x14ftypqt  \x00\x00\x00\x00"
HEIC_HEAD = b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00"
WEBP_HEAD = b"RIFF\x24\x00\x00\x00WEBPVP8 "


class TestSniffContentType:
    @pytest.mark.parametrize(
        ("head", "expected"),
        [
            (JPEG_HEAD, "image/jpeg"),
            (PNG_HEAD, "image/png"),
            (b"GIF89a\x01\x00", "image/gif"),
            (WEBP_HEAD, "image/webp"),
            (MP4_HEAD, "video/mp4"),
            (MOV_HEAD, "video/quicktime"),
            (HEIC_HEAD, "image/heic"),
            (b"\x1a\x45\xdf\xa3\x01\x00", "video/webm"),
        ],
    )
    def test_known_signatures(self, head: bytes, expected: str) -> None:
        assert sniff_content_type(head) == expected

    def test_unknown_bytes(self) -> None:
        assert sniff_content_type(b"hello world") is None


class TestExtensionFromUrl:
    def test_path_extension(self) -> None:
        assert extension_from_url("https://cdn.example.com/a/b.PNG?x=1") == ".png"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://sns-webpic-qc.xhscdn.com/1/abc!nd_dft_wgth_webp_3", ".webp"),
            ("https://sns-webpic-qc.xhscdn.com/1/abc!nd_dft_wgth_jpg_3", ".jpg"),
            ("https://sns-webpic-qc.xhscdn.com/1/abc", ".jpg"),
        ],
    )
    def test_xiaohongshu_markers(self, url: str, expected: str) -> None:
        assert extension_from_url(url) == expected

    def test_video_hint(self) -> None:
        assert extension_from_url("https://aweme.snssdk.com/aweme/v1/play/?id=1") == ".mp4"

    def test_no_hint(self) -> None:
        assert extension_from_url("https://cdn.example.com/blob") is None


class TestResolveContentType:
    def test_bytes_win_over_header(self) -> None:
        assert resolve_content_type("https://x.com/a", "image/png", JPEG_HEAD) == "image/jpeg"

    def test_media_header_wins_over_url(self) -> None:
        assert resolve_content_type("https://x.com/a.jpg", "video/mp4; codecs=avc1") == "video/mp4"

    def test_generic_header_falls_back_to_url(self) -> None:
        assert (
            resolve_content_type("https://x.com/a.webp", "application/octet-stream")
            == "image/webp"
        )

    def test_nothing_known(self) -> None:
        assert resolve_content_type("https://x.com/blob", None) == DEFAULT_CONTENT_TYPE


def test_normalize_content_type() -> None:
    assert normalize_content_type("Image/JPEG; charset=binary") == "image/jpeg"
    assert normalize_content_type(DEFAULT_CONTENT_TYPE) is None
    assert normalize_content_type(None) is None


def test_extension_for() -> None:
    assert extension_for("video/mp4") == ".mp4"
    assert extension_for("application/x-unknown") == ".bin"
    assert extension_for("application/x-unknown", ".jpg") == ".jpg"
