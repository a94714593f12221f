"""Acesso à origem (CDNs de plataforma com proteção anti-hotlink).

Toda requisição leva os headers do perfil da plataforma.
URLs de backup são tentadas em ordem quando a principal falha.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from app.domain.content_types import extension_for, resolve_content_type
from app.domain.errors import OriginFetchError
from app.domain.media import MediaPayload, OriginProbe
from app.domain.platforms import detect_platform, generate_file_name, get_platform_profile
from app.infra.http.client import HttpError

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from app.infra.http.client import HttpClient

logger = logging.getLogger(__name__)

_CONTENT_RANGE_TOTAL = re.compile(r"bytes\s+\d+-\d+/(\d+)")
_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
# Bytes lidos para detectar assinatura
_SNIFF_BYTES = 16


def parse_content_length(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        size = int(value)
    except ValueError:
        return None
    return size if size >= 0 else None


def parse_content_range_total(value: str | None) -> int | None:
    """Extrai o total de `Content-Range: bytes 0-0/12345`."""
    if not value:
        return None
    match = _CONTENT_RANGE_TOTAL.search(value)
    return int(match.group(1)) if match else None


def fix_redirect_location(location: str) -> str:
    """Douyin às vezes devolve `url1;;url2`; vale a última."""
    if ";;" in location:
        return location.split(";;")[-1]
    return location


class OriginFetcher:
    """Sonda tamanho, baixa bytes e abre streams na origem.

    Args:
        http_client: Cliente HTTP com retry
        timeout_seconds: Limite por requisição à origem
    """

    def __init__(self, http_client: HttpClient, timeout_seconds: float = 45.0) -> None:
        self._http = http_client
        self._timeout = timeout_seconds

    async def probe(self, url: str, backup_urls: Sequence[str] = ()) -> OriginProbe:
        """Descobre o tamanho sem baixar o corpo.

        HEAD primeiro; sem Content-Length, tenta GET com `Range: bytes=0-0`.
        Retorna size=None se a origem responde mas não informa tamanho.
        """
        last_status: int | None = None
        for candidate in (url, *backup_urls):
            try:
                result = await self._probe_one(candidate)
            except HttpError as exc:
                last_status = exc.status_code
                logger.warning(
                    "origin_probe_failed",
                    extra={"url": candidate[:100], "status_code": exc.status_code},
                )
                continue
            if isinstance(result, OriginProbe):
                return result
            last_status = result
        raise OriginFetchError(url, "Origem indisponível para sondagem", last_status)

    async def _probe_one(self, url: str) -> OriginProbe | int:
        profile = get_platform_profile(detect_platform(url))
        target = profile.transform_url(url)

        head = await self._http.head(target, headers=profile.headers, timeout=self._timeout)
        content_type = head.headers.get("content-type")
        if head.status_code < 400:
            size = parse_content_length(head.headers.get("content-length"))
            if size:
                return OriginProbe(url=url, size=size, content_type=content_type)

        ranged = await self._http.send_stream(
            "GET",
            target,
            headers={**profile.headers, "Range": "bytes=0-0"},
            follow_redirects=True,
            timeout=self._timeout,
        )
        # Corpo nunca é lido, mesmo quando a origem ignora o Range
        await ranged.aclose()
        if ranged.status_code == 206:
            size = parse_content_range_total(ranged.headers.get("content-range"))
            return OriginProbe(
                url=url, size=size, content_type=ranged.headers.get("content-type", content_type)
            )
        if ranged.status_code == 200:
            # Range ignorado: Content-Length é o total
            size = parse_content_length(ranged.headers.get("content-length"))
            return OriginProbe(
                url=url, size=size, content_type=ranged.headers.get("content-type", content_type)
            )
        if head.status_code < 400:
            return OriginProbe(url=url, size=None, content_type=content_type)
        return ranged.status_code

    async def fetch(self, url: str, backup_urls: Sequence[str] = ()) -> MediaPayload:
        """Baixa o corpo inteiro (usado apenas abaixo do limite inline)."""
        last_status: int | None = None
        for candidate in (url, *backup_urls):
            platform = detect_platform(candidate)
            profile = get_platform_profile(platform)
            try:
                response = await self._http.get(
                    profile.transform_url(candidate),
                    headers=profile.headers,
                    timeout=self._timeout,
                )
            except HttpError as exc:
                last_status = exc.status_code
                logger.warning(
                    "origin_fetch_failed",
                    extra={"url": candidate[:100], "status_code": exc.status_code},
                )
                continue
            if not response.is_success:
                last_status = response.status_code
                logger.warning(
                    "origin_fetch_rejected",
                    extra={"url": candidate[:100], "status_code": response.status_code},
                )
                continue

            data = response.content
            content_type = resolve_content_type(
                candidate, response.headers.get("content-type"), data[:_SNIFF_BYTES]
            )
            kind = "video" if content_type.startswith("video/") else "image"
            file_name = generate_file_name(
                candidate, platform, kind, extension_for(content_type)
            )
            return MediaPayload(data=data, file_name=file_name, content_type=content_type)
        raise OriginFetchError(url, "Falha ao baixar mídia da origem", last_status)

    async def find_available(self, urls: Sequence[str]) -> str | None:
        """Primeira URL que responde HEAD < 400, na ordem dada."""
        for candidate in urls:
            profile = get_platform_profile(detect_platform(candidate))
            try:
                response = await self._http.head(
                    candidate, headers=profile.headers, timeout=self._timeout
                )
            except HttpError as exc:
                logger.warning(
                    "origin_unavailable",
                    extra={"url": candidate[:100], "status_code": exc.status_code},
                )
                continue
            if response.status_code < 400:
                return candidate
            logger.warning(
                "origin_unavailable",
                extra={"url": candidate[:100], "status_code": response.status_code},
            )
        return None

    async def open_stream(self, url: str, range_header: str | None = None) -> httpx.Response:
        """Abre stream na origem seguindo um redirect manualmente.

        O chamador fecha a resposta.
        """
        profile = get_platform_profile(detect_platform(url))
        headers = dict(profile.headers)
        if range_header and profile.supports_range:
            headers["Range"] = range_header

        try:
            response = await self._http.send_stream("GET", url, headers=headers)
            if response.status_code in _REDIRECT_STATUSES:
                location = response.headers.get("location")
                await response.aclose()
                if not location:
                    raise OriginFetchError(url, "Redirect sem Location", response.status_code)
                target = fix_redirect_location(location)
                logger.info("origin_redirect_followed", extra={"url": target[:100]})
                response = await self._http.send_stream(
                    "GET", target, headers=headers, follow_redirects=True
                )
        except HttpError as exc:
            raise OriginFetchError(url, "Falha de conexão com a origem", exc.status_code) from exc

        if response.status_code >= 400:
            status = response.status_code
            await response.aclose()
            raise OriginFetchError(url, "Origem recusou o stream", status)
        return response
