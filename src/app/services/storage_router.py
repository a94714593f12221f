"""Roteador de armazenamento: decide upload direto ou endereço de proxy.

Algoritmo (por item):
1. Tamanho: exato se o payload já está em memória; senão sondagem na
   origem. Tamanho desconhecido interrompe o roteamento (SizeUnknownError).
2. Vídeo de live photo: sempre upload direto.
3. Abaixo do limite inline: baixa os bytes e envia ao image host.
4. Acima do limite em plataforma com proxy: cunha endereço, sem baixar bytes.
5. Acima do limite em plataforma sem proxy: UnsupportedLargeFileError.

Após upload direto, o endereço devolvido não pode apontar para a origem.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from app.domain.content_types import extension_for, extension_from_url
from app.domain.errors import (
    PassthroughDetectedError,
    ProxyMintFailedError,
    SizeUnknownError,
    UnsupportedLargeFileError,
)
from app.domain.media import MediaReference, RouteDecision, RouteResult
from app.domain.platforms import (
    PROXY_PLATFORMS,
    detect_platform,
    generate_file_name,
    is_origin_address,
)
from app.observability import record_latency, record_route_decision
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.domain.media import MediaPayload
    from app.protocols.media_ports import ImageHostProtocol, OriginFetcherProtocol
    from app.services.proxy_address import ProxyAddressCodec
    from config.settings.media import StorageSettings

logger = logging.getLogger(__name__)


class StorageRouter:
    """Escolhe e executa o caminho de armazenamento de cada item.

    Args:
        origin: Acesso à origem (sondagem e download)
        image_host: Backend de hospedagem
        proxy_codec: Cunhagem de endereços de proxy
        settings: Limites de tamanho
    """

    def __init__(
        self,
        origin: OriginFetcherProtocol,
        image_host: ImageHostProtocol,
        proxy_codec: ProxyAddressCodec,
        settings: StorageSettings,
    ) -> None:
        self._origin = origin
        self._image_host = image_host
        self._proxy_codec = proxy_codec
        self._settings = settings

    async def route(
        self,
        item: MediaReference,
        payload: MediaPayload | None = None,
    ) -> RouteResult:
        """Roteia um item e retorna o endereço final.

        Args:
            item: Referência de mídia
            payload: Bytes já em memória (merge de partes); dispensa sondagem

        Raises:
            SizeUnknownError: origem não informa tamanho
            UnsupportedLargeFileError: acima do limite em plataforma sem proxy
            UploadFailedError: image host recusou ou devolveu endereço da origem
            OriginFetchError: origem inacessível
        """
        start = time.perf_counter()
        platform = detect_platform(item.url)

        if payload is not None:
            size = payload.size
            content_type = payload.content_type
            # Payload local não tem origem para adiar; vale o teto de upload em partes
            inline_limit = max(
                self._settings.inline_upload_max_bytes,
                self._settings.chunk_upload_max_bytes,
            )
        else:
            probe = await self._origin.probe(item.url, item.backup_urls)
            if probe.size is None:
                logger.warning("route_size_unknown", extra={"url": item.url[:100]})
                raise SizeUnknownError(item.url)
            size = probe.size
            content_type = probe.content_type or "application/octet-stream"
            inline_limit = self._settings.inline_upload_max_bytes

        if item.is_live_photo_video or size < inline_limit:
            result = await self._upload_direct(item, payload, size)
        elif platform in PROXY_PLATFORMS:
            result = self._mint_proxy(item, platform, size, content_type)
        else:
            reason = (
                "oversized"
                if size >= self._settings.oversized_max_bytes
                else "unsupported_platform"
            )
            logger.warning(
                "route_unsupported_large_file",
                extra={"size_bytes": size, "platform": platform, "reason": reason},
            )
            raise UnsupportedLargeFileError(item.url, size, platform, reason)

        record_route_decision(result.decision.value, platform, size)
        record_latency("storage_router", "route", (time.perf_counter() - start) * 1000)
        return result

    async def _upload_direct(
        self,
        item: MediaReference,
        payload: MediaPayload | None,
        size: int,
    ) -> RouteResult:
        if payload is None:
            payload = await self._origin.fetch(item.url, item.backup_urls)
        address = await self._image_host.upload(
            payload.data, payload.file_name, payload.content_type
        )
        if is_origin_address(address, item.url):
            logger.error(
                "route_passthrough_detected",
                extra={"url": item.url[:100], "address": address[:100]},
            )
            raise PassthroughDetectedError(item.url, address)
        return RouteResult(
            address=address,
            decision=RouteDecision.DIRECT,
            size_bytes=payload.size or size,
            content_type=payload.content_type,
            file_name=payload.file_name,
        )

    def _mint_proxy(
        self,
        item: MediaReference,
        platform: str,
        size: int,
        content_type: str,
    ) -> RouteResult:
        default_ext = ".mp4" if item.kind == "video" else ".jpg"
        extension = extension_from_url(item.url) or extension_for(content_type, default_ext)
        file_name = generate_file_name(item.url, platform, item.kind, extension)
        try:
            address = self._proxy_codec.mint_url(item.url, file_name, platform, item.backup_urls)
        except ProxyMintFailedError as exc:
            log_fallback(logger, "proxy_address", reason=str(exc))
            return RouteResult(
                address=item.url,
                decision=RouteDecision.DEGRADED,
                size_bytes=size,
                content_type=content_type,
                file_name=file_name,
            )
        return RouteResult(
            address=address,
            decision=RouteDecision.PROXY,
            size_bytes=size,
            content_type=content_type,
            file_name=file_name,
        )
