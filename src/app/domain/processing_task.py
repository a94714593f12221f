"""Task de processamento de backlog de mídia.

Uma task divide itens pendentes em lotes por tipo (vídeo/imagem).
Cada chamada de avanço consome no máximo um lote de cada tipo.
Itens saem de `pending_*` exatamente uma vez: para `processed_*`
(sucesso) ou para `failed_items` (falha).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from app.domain.media import MediaReference


class TaskStatus(Enum):
    """Status da task."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProcessedItem:
    """Item concluído: URL de origem e endereço final."""

    source_url: str
    address: str

    def to_dict(self) -> dict[str, Any]:
        return {"source_url": self.source_url, "address": self.address}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProcessedItem:
        return cls(source_url=data["source_url"], address=data["address"])


@dataclass(frozen=True, slots=True)
class FailedItem:
    """Item que falhou durante um lote. Não é reprocessado."""

    url: str
    role: str
    error_kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "role": self.role,
            "error_kind": self.error_kind,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailedItem:
        return cls(
            url=data["url"],
            role=data.get("role", "image"),
            error_kind=data.get("error_kind", "pipeline_error"),
            message=data.get("message", ""),
        )


def compute_total_batches(
    video_count: int,
    image_count: int,
    batch_size_videos: int,
    batch_size_images: int,
) -> int:
    """max(ceil(V/bv), ceil(I/bi)); lotes de vídeo e imagem andam juntos."""
    return max(
        math.ceil(video_count / batch_size_videos),
        math.ceil(image_count / batch_size_images),
    )


@dataclass(slots=True)
class ProcessingTask:
    """Estado persistido de uma task de lote.

    Atributos:
        task_id: Identificador opaco
        pending_videos / pending_images: Itens ainda não tentados
        processed_videos / processed_images: Itens concluídos (em ordem)
        failed_items: Itens que falharam (não reprocessados)
        completed_batches / total_batches: Progresso em lotes
        external_linkage: Identificadores externos (ex: registro no destino)
    """

    task_id: str
    pending_videos: list[MediaReference] = field(default_factory=list)
    pending_images: list[MediaReference] = field(default_factory=list)
    processed_videos: list[ProcessedItem] = field(default_factory=list)
    processed_images: list[ProcessedItem] = field(default_factory=list)
    failed_items: list[FailedItem] = field(default_factory=list)
    batch_size_videos: int = 8
    batch_size_images: int = 12
    completed_batches: int = 0
    total_batches: int = 0
    status: TaskStatus = TaskStatus.PROCESSING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime = field(default_factory=lambda: datetime.now(UTC) + timedelta(hours=1))
    last_updated: datetime = field(default_factory=lambda: datetime.now(UTC))
    external_linkage: dict[str, Any] | None = None

    @property
    def is_complete(self) -> bool:
        """Pendências vazias, ou todos os lotes previstos já executados."""
        if not self.pending_videos and not self.pending_images:
            return True
        return self.total_batches > 0 and self.completed_batches >= self.total_batches

    @property
    def batch_capacity(self) -> int:
        """Itens por lote: vídeos primeiro, imagens completam o restante."""
        return max(self.batch_size_videos, self.batch_size_images)

    @property
    def total_items(self) -> int:
        return (
            len(self.pending_videos)
            + len(self.pending_images)
            + len(self.processed_videos)
            + len(self.processed_images)
            + len(self.failed_items)
        )

    @property
    def processed_count(self) -> int:
        return len(self.processed_videos) + len(self.processed_images)

    @property
    def progress_percent(self) -> int:
        """Percentual de lotes concluídos (0-100)."""
        if self.total_batches <= 0:
            return 100
        return min(100, round(self.completed_batches * 100 / self.total_batches))

    def is_expired(self, now: datetime | None = None) -> bool:
        reference = now or datetime.now(UTC)
        return reference >= self.expires_at

    def touch(self) -> None:
        self.last_updated = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        """Serializa task para persistência."""
        return {
            "task_id": self.task_id,
            "pending_videos": [item.to_dict() for item in self.pending_videos],
            "pending_images": [item.to_dict() for item in self.pending_images],
            "processed_videos": [item.to_dict() for item in self.processed_videos],
            "processed_images": [item.to_dict() for item in self.processed_images],
            "failed_items": [item.to_dict() for item in self.failed_items],
            "batch_size_videos": self.batch_size_videos,
            "batch_size_images": self.batch_size_images,
            "completed_batches": self.completed_batches,
            "total_batches": self.total_batches,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "external_linkage": self.external_linkage,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProcessingTask:
        """Deserializa task de persistência."""
        now = datetime.now(UTC)
        return cls(
            task_id=data["task_id"],
            pending_videos=[MediaReference.from_dict(d) for d in data.get("pending_videos", [])],
            pending_images=[MediaReference.from_dict(d) for d in data.get("pending_images", [])],
            processed_videos=[
                ProcessedItem.from_dict(d) for d in data.get("processed_videos", [])
            ],
            processed_images=[
                ProcessedItem.from_dict(d) for d in data.get("processed_images", [])
            ],
            failed_items=[FailedItem.from_dict(d) for d in data.get("failed_items", [])],
            batch_size_videos=int(data.get("batch_size_videos", 8)),
            batch_size_images=int(data.get("batch_size_images", 12)),
            completed_batches=int(data.get("completed_batches", 0)),
            total_batches=int(data.get("total_batches", 0)),
            status=TaskStatus(data.get("status", "processing")),
            created_at=_parse_dt(data.get("created_at"), now),
            expires_at=_parse_dt(data.get("expires_at"), now + timedelta(hours=1)),
            last_updated=_parse_dt(data.get("last_updated"), now),
            external_linkage=data.get("external_linkage"),
        )


def _parse_dt(value: str | None, default: datetime) -> datetime:
    return datetime.fromisoformat(value) if value else default
