"""Resolução de endereços de proxy.

Verifica o token, escolhe a primeira fonte disponível (original
reescrita, depois backups em ordem) e abre o stream na origem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.domain.errors import OriginFetchError
from app.domain.platforms import PlatformProfile, get_platform_profile

if TYPE_CHECKING:
    import httpx

    from app.infra.origin.fetcher import OriginFetcher
    from app.services.proxy_address import ProxyAddress, ProxyAddressCodec

logger = logging.getLogger(__name__)

# Headers da origem repassados ao cliente
FORWARDED_HEADERS = (
    "content-length",
    "content-range",
    "accept-ranges",
    "etag",
    "last-modified",
)


@dataclass(slots=True)
class ResolvedStream:
    """Stream aberto na origem; o chamador fecha `response`."""

    address: ProxyAddress
    source_url: str
    profile: PlatformProfile
    response: httpx.Response

    def response_headers(self) -> dict[str, str]:
        headers = {
            name: self.response.headers[name]
            for name in FORWARDED_HEADERS
            if name in self.response.headers
        }
        headers.update(
            {
                # Destinos de embed só aceitam o arquivo como download genérico
                "Content-Type": "application/octet-stream",
                "Content-Disposition": f'attachment; filename="{self.address.filename}"',
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
                "Access-Control-Allow-Headers": "Range",
                "Access-Control-Expose-Headers": "Content-Length, Content-Range, Content-Type",
                "Cache-Control": f"public, max-age={self.profile.cache_seconds}",
                "X-Proxy-Source": self.address.source,
                "X-Proxy-Timestamp": str(self.address.created_at),
            }
        )
        return headers


class ProxyResolver:
    """Resolve token de proxy em stream da origem.

    Args:
        codec: Verificação de assinatura/idade do token
        origin: Acesso à origem
    """

    def __init__(self, codec: ProxyAddressCodec, origin: OriginFetcher) -> None:
        self._codec = codec
        self._origin = origin

    async def resolve(self, token: str, range_header: str | None = None) -> ResolvedStream:
        """Abre o stream da primeira fonte disponível.

        Raises:
            ProxyTokenError: token malformado, adulterado ou expirado
            OriginFetchError: nenhuma fonte disponível
        """
        address = self._codec.decode(token)
        profile = get_platform_profile(address.source)
        candidates = [profile.transform_url(address.original), *address.backup_urls]

        source_url = await self._origin.find_available(candidates)
        if source_url is None:
            logger.warning(
                "proxy_no_source_available",
                extra={"source": address.source, "candidates": len(candidates)},
            )
            raise OriginFetchError(address.original, "Nenhuma fonte de mídia disponível")

        response = await self._origin.open_stream(source_url, range_header)
        logger.info(
            "proxy_stream_opened",
            extra={
                "source": address.source,
                "status_code": response.status_code,
                "used_backup": source_url not in candidates[:1],
            },
        )
        return ResolvedStream(
            address=address, source_url=source_url, profile=profile, response=response
        )
