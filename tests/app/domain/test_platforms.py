"""Testes de detecção de plataforma e perfis de acesso."""

from __future__ import annotations

import re

import pytest

from app.domain.platforms import (
    PROXY_PLATFORMS,
    detect_platform,
    generate_file_name,
    get_platform_profile,
    is_origin_address,
)


class TestDetectPlatform:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://sns-webpic-qc.xhscdn.com/abc/123!nd_dft_wgth_jpg_3", "xiaohongshu"),
            ("https://www.xiaohongshu.com/explore/1", "xiaohongshu"),
            ("https://v26-web.douyinvod.zjcdn.com/video.mp4", "douyin"),
            ("https://aweme.snssdk.com/aweme/v1/play/?video_id=1", "douyin"),
            ("https://www.douyin.com/aweme/v1/play/?video_id=1", "douyin"),
            ("https://cdn.example.com/photo.jpg", "unknown"),
            ("not a url", "unknown"),
        ],
    )
    def test_detects_by_host(self, url: str, expected: str) -> None:
        assert detect_platform(url) == expected

    def test_host_suffix_must_match_domain_boundary(self) -> None:
        """Host que apenas termina com o texto do domínio não conta."""
        assert detect_platform("https://evilxhscdn.com/a.jpg") == "unknown"

    def test_proxy_platforms(self) -> None:
        assert {"xiaohongshu", "douyin"} == PROXY_PLATFORMS


class TestPlatformProfile:
    def test_profiles_carry_referer(self) -> None:
        assert get_platform_profile("xiaohongshu").headers["Referer"] == (
            "https://www.xiaohongshu.com/"
        )
        assert get_platform_profile("douyin").headers["Referer"] == "https://www.douyin.com/"

    def test_range_support(self) -> None:
        assert get_platform_profile("douyin").supports_range is True
        assert get_platform_profile("xiaohongshu").supports_range is False

    def test_unknown_platform_falls_back(self) -> None:
        profile = get_platform_profile("instagram")
        assert profile.name == "unknown"
        assert "Referer" not in profile.headers

    def test_douyin_web_play_rewritten(self) -> None:
        profile = get_platform_profile("douyin")
        url = "https://www.douyin.com/aweme/v1/play/?video_id=v0200&ratio=1080p"
        assert profile.transform_url(url) == (
            "https://aweme.snssdk.com/aweme/v1/play/?video_id=v0200&ratio=1080p"
        )

    def test_other_urls_untouched(self) -> None:
        url = "https://v26-web.douyinvod.zjcdn.com/video.mp4"
        assert get_platform_profile("douyin").transform_url(url) == url
        xhs = "https://www.douyin.com/aweme/v1/play/?x=1"
        assert get_platform_profile("xiaohongshu").transform_url(xhs) == xhs


class TestIsOriginAddress:
    def test_identical_url(self) -> None:
        url = "https://cdn.example.com/a.jpg"
        assert is_origin_address(url, url) is True

    def test_platform_host_is_origin(self) -> None:
        assert is_origin_address(
            "https://ci.xiaohongshu.com/other.jpg",
            "https://sns-webpic-qc.xhscdn.com/abc",
        )

    def test_same_host_is_origin(self) -> None:
        assert is_origin_address(
            "https://cdn.example.com/copy.jpg", "https://cdn.example.com/a.jpg"
        )

    def test_image_host_address_is_not_origin(self) -> None:
        assert not is_origin_address(
            "https://img.example.com/file/abc.jpg",
            "https://sns-webpic-qc.xhscdn.com/abc",
        )


class TestGenerateFileName:
    def test_keeps_path_segment_with_extension(self) -> None:
        name = generate_file_name("https://cdn.example.com/dir/clip.mp4?x=1", "douyin", "video", ".mp4")
        assert name == "clip.mp4"

    def test_generates_name_for_markers(self) -> None:
        name = generate_file_name(
            "https://sns-webpic-qc.xhscdn.com/abc/123!nd_dft_wgth_jpg_3",
            "xiaohongshu",
            "image",
            ".jpg",
        )
        assert re.fullmatch(r"xiaohongshu_image_\d+_[0-9a-f]{8}\.jpg", name)

    def test_generated_names_are_unique(self) -> None:
        url = "https://www.douyin.com/aweme/v1/play/?video_id=1"
        names = {generate_file_name(url, "douyin", "video", ".mp4") for _ in range(20)}
        assert len(names) == 20
