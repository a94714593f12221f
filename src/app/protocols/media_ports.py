"""Protocolos dos adaptadores externos do pipeline de mídia.

Evita dependência direta de app/services em app/infra.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.media import MediaPayload, OriginProbe


class CredentialProviderProtocol(Protocol):
    """Fornece token do image host; refresh força novo login."""

    async def get_token(self) -> str: ...

    async def refresh(self) -> str: ...


class ImageHostProtocol(Protocol):
    """Upload de bytes para o image host; retorna URL pública."""

    async def upload(self, data: bytes, file_name: str, content_type: str) -> str: ...


class OriginFetcherProtocol(Protocol):
    """Acesso à origem com headers de plataforma.

    probe retorna size=None quando a origem não informa tamanho.
    """

    async def probe(self, url: str, backup_urls: Sequence[str] = ()) -> OriginProbe: ...

    async def fetch(self, url: str, backup_urls: Sequence[str] = ()) -> MediaPayload: ...
