"""Settings do agendador de lotes e continuação.

Tamanhos de lote, orçamento de subrequests por invocação e TTL das tasks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

TaskStoreBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class BatchSettings:
    """Configurações do agendador de lotes.

    Attributes:
        batch_size_videos: Vídeos por lote (prioritários)
        batch_size_images: Imagens por lote
        task_ttl_seconds: TTL da task persistida
        batch_interval_ms: Pausa entre lotes no modo síncrono
        subrequest_budget: Orçamento de requisições externas por invocação
        subrequests_per_item: Estimativa de requisições por item (HEAD + GET + POST)
        small_batch_max_items: Acima disso o backlog vira continuação
        required_phase_per_item_seconds: Prazo por item na fase obrigatória
        required_phase_max_seconds: Prazo máximo da fase obrigatória
        task_store_backend: Backend das tasks (memory|redis)
    """

    batch_size_videos: int = 8
    batch_size_images: int = 12
    task_ttl_seconds: int = 3600
    batch_interval_ms: int = 300
    subrequest_budget: int = 45
    subrequests_per_item: int = 3
    small_batch_max_items: int = 24
    required_phase_per_item_seconds: float = 30.0
    required_phase_max_seconds: float = 300.0
    task_store_backend: TaskStoreBackend = "memory"

    @property
    def batch_capacity(self) -> int:
        return max(self.batch_size_videos, self.batch_size_images)

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações do agendador.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.batch_size_videos < 1:
            errors.append("BATCH_SIZE_VIDEOS deve ser >= 1")

        if self.batch_size_images < 1:
            errors.append("BATCH_SIZE_IMAGES deve ser >= 1")

        if self.task_ttl_seconds <= 0:
            errors.append("TASK_TTL_SECONDS deve ser > 0")

        if self.batch_interval_ms < 0:
            errors.append("BATCH_INTERVAL_MS deve ser >= 0")

        if self.subrequests_per_item < 1:
            errors.append("SUBREQUESTS_PER_ITEM deve ser >= 1")
        elif self.subrequest_budget < self.subrequests_per_item:
            errors.append("SUBREQUEST_BUDGET deve comportar ao menos um item")
        elif self.batch_capacity * self.subrequests_per_item > self.subrequest_budget:
            errors.append(
                "max(BATCH_SIZE_VIDEOS, BATCH_SIZE_IMAGES) excede o SUBREQUEST_BUDGET "
                "de uma invocação"
            )

        if self.task_store_backend not in ("memory", "redis"):
            errors.append(f"TASK_STORE_BACKEND inválido: {self.task_store_backend}")

        if self.task_store_backend == "memory" and not base.is_development:
            errors.append("TASK_STORE_BACKEND=memory proibido em staging/production")

        return errors


def _load_batch_from_env() -> BatchSettings:
    """Carrega BatchSettings de variáveis de ambiente."""
    backend_str = os.getenv("TASK_STORE_BACKEND", "memory").lower()
    backend: TaskStoreBackend = "redis" if backend_str == "redis" else "memory"
    return BatchSettings(
        batch_size_videos=int(os.getenv("BATCH_SIZE_VIDEOS", "8")),
        batch_size_images=int(os.getenv("BATCH_SIZE_IMAGES", "12")),
        task_ttl_seconds=int(os.getenv("TASK_TTL_SECONDS", "3600")),
        batch_interval_ms=int(os.getenv("BATCH_INTERVAL_MS", "300")),
        subrequest_budget=int(os.getenv("SUBREQUEST_BUDGET", "45")),
        subrequests_per_item=int(os.getenv("SUBREQUESTS_PER_ITEM", "3")),
        small_batch_max_items=int(os.getenv("SMALL_BATCH_MAX_ITEMS", "24")),
        required_phase_per_item_seconds=float(
            os.getenv("REQUIRED_PHASE_PER_ITEM_SECONDS", "30")
        ),
        required_phase_max_seconds=float(os.getenv("REQUIRED_PHASE_MAX_SECONDS", "300")),
        task_store_backend=backend,
    )


@lru_cache(maxsize=1)
def get_batch_settings() -> BatchSettings:
    """Retorna instância cacheada de BatchSettings."""
    return _load_batch_from_env()
