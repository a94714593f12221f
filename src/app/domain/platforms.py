"""Detecção de plataforma de origem e perfis de acesso.

Plataforma é inferida apenas pelo host da URL. Cada plataforma
suportada tem headers de navegador (Referer obrigatório), política
de Range e eventual reescrita de URL.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

Platform = Literal["xiaohongshu", "douyin", "unknown"]

PLATFORM_DOMAINS: dict[str, tuple[str, ...]] = {
    "xiaohongshu": ("xhscdn.com", "xiaohongshu.com"),
    "douyin": ("douyin.com", "aweme.snssdk.com", "zjcdn.com", "bytecdn.com", "365yg.com"),
}

# Plataformas com resolução via proxy
PROXY_PLATFORMS: frozenset[str] = frozenset(PLATFORM_DOMAINS)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_DOUYIN_WEB_PLAY = "https://www.douyin.com/aweme/v1/play/"
_DOUYIN_API_PLAY = "https://aweme.snssdk.com/aweme/v1/play/"


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Como acessar a origem de uma plataforma.

    Atributos:
        name: Nome da plataforma
        headers: Headers enviados em toda requisição à origem
        supports_range: Repassa Range do cliente na resolução de proxy
        cache_seconds: max-age para respostas do proxy
    """

    name: Platform
    headers: dict[str, str] = field(default_factory=dict)
    supports_range: bool = False
    cache_seconds: int = 3600

    def transform_url(self, url: str) -> str:
        """Reescreve URLs web do Douyin para o endpoint de API."""
        if self.name == "douyin" and url.startswith(_DOUYIN_WEB_PLAY):
            return _DOUYIN_API_PLAY + url[len(_DOUYIN_WEB_PLAY) :]
        return url


_PROFILES: dict[str, PlatformProfile] = {
    "xiaohongshu": PlatformProfile(
        name="xiaohongshu",
        headers={
            "User-Agent": BROWSER_USER_AGENT,
            "Referer": "https://www.xiaohongshu.com/",
            "Accept": "*/*",
        },
        supports_range=False,
        cache_seconds=7200,
    ),
    "douyin": PlatformProfile(
        name="douyin",
        headers={
            "User-Agent": BROWSER_USER_AGENT,
            "Referer": "https://www.douyin.com/",
            "Accept": "*/*",
        },
        supports_range=True,
        cache_seconds=3600,
    ),
    "unknown": PlatformProfile(
        name="unknown",
        headers={"User-Agent": BROWSER_USER_AGENT, "Accept": "*/*"},
    ),
}


def detect_platform(url: str) -> Platform:
    """Identifica a plataforma pelo host da URL."""
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return "unknown"
    for platform, domains in PLATFORM_DOMAINS.items():
        if any(host == domain or host.endswith("." + domain) for domain in domains):
            return platform  # type: ignore[return-value]
    return "unknown"


def get_platform_profile(platform: str) -> PlatformProfile:
    return _PROFILES.get(platform, _PROFILES["unknown"])


def is_origin_address(address: str, origin_url: str) -> bool:
    """True quando `address` ainda aponta para a origem.

    Considera igualdade literal e qualquer host de plataforma conhecida
    (o image host nunca serve a partir desses domínios).
    """
    if address == origin_url:
        return True
    if detect_platform(address) != "unknown":
        return True
    origin_host = (urlparse(origin_url).hostname or "").lower()
    address_host = (urlparse(address).hostname or "").lower()
    return bool(origin_host) and origin_host == address_host


def generate_file_name(url: str, platform: str, kind: str, extension: str) -> str:
    """Nome de arquivo para upload/proxy.

    Usa o último segmento do path quando ele já tem extensão;
    caso contrário gera `{platform}_{kind}_{ms}_{rand}{ext}`.
    """
    last_segment = urlparse(url).path.rsplit("/", 1)[-1]
    if "." in last_segment and "!" not in last_segment:
        return last_segment
    millis = int(time.time() * 1000)
    return f"{platform}_{kind}_{millis}_{secrets.token_hex(4)}{extension}"
