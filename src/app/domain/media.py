"""Referências de mídia e resultados de roteamento.

MediaReference é produzida pelo parser externo e imutável a partir daqui.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

MediaKind = Literal["image", "video"]


class MediaRole(Enum):
    """Papel da mídia no conteúdo de origem."""

    IMAGE = "image"
    VIDEO = "video"
    COVER = "cover"


class RouteDecision(Enum):
    """Caminho escolhido pelo roteador para um item."""

    DIRECT = "direct"
    PROXY = "proxy"
    DEGRADED = "degraded"


@dataclass(frozen=True, slots=True)
class MediaReference:
    """Item aguardando processamento.

    Atributos:
        url: URL na origem (hotlink bloqueado)
        role: Papel do item (image|video|cover)
        is_live_photo_video: Vídeo componente de uma live photo
        backup_urls: URLs alternativas fornecidas pelo parser
    """

    url: str
    role: MediaRole = MediaRole.IMAGE
    is_live_photo_video: bool = False
    backup_urls: tuple[str, ...] = ()

    @property
    def kind(self) -> MediaKind:
        """Tipo usado para particionar lotes (capas contam como imagem)."""
        return "video" if self.role is MediaRole.VIDEO else "image"

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência."""
        return {
            "url": self.url,
            "role": self.role.value,
            "is_live_photo_video": self.is_live_photo_video,
            "backup_urls": list(self.backup_urls),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MediaReference:
        """Deserializa de persistência."""
        return cls(
            url=data["url"],
            role=MediaRole(data.get("role", "image")),
            is_live_photo_video=bool(data.get("is_live_photo_video", False)),
            backup_urls=tuple(data.get("backup_urls") or ()),
        )


@dataclass(frozen=True, slots=True)
class MediaPayload:
    """Bytes já em memória (ex: resultado de merge de partes)."""

    data: bytes
    file_name: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class RouteResult:
    """Endereço final de um item roteado.

    Atributos:
        address: URL direta no image host ou endereço de proxy
        decision: Caminho escolhido (direct|proxy)
        size_bytes: Tamanho usado na decisão
        content_type: Tipo de conteúdo conhecido no momento da decisão
        file_name: Nome de arquivo usado no upload/proxy
    """

    address: str
    decision: RouteDecision
    size_bytes: int
    content_type: str = "application/octet-stream"
    file_name: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OriginProbe:
    """Resultado da sondagem de tamanho na origem.

    Atributos:
        url: URL que respondeu (original ou backup)
        size: Tamanho em bytes (None quando a origem não informa)
        content_type: Tipo de conteúdo anunciado
    """

    url: str
    size: int | None
    content_type: str | None = None
