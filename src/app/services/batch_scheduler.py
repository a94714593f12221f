"""Agendador de lotes com continuação.

Um backlog grande vira uma ProcessingTask persistida; cada `advance`
processa até `batch_capacity` itens em paralelo: vídeos primeiro (até o
lote de vídeos), imagens completam o espaço restante. Depois grava o
novo estado. Handlers de item são funções puras
item -> resultado; só o passo do lote altera a task, sem locks.

Itens que falham vão para `failed_items` e não são reprocessados.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.domain.errors import MediaPipelineError, TaskNotFoundError
from app.domain.processing_task import (
    FailedItem,
    ProcessedItem,
    ProcessingTask,
    TaskStatus,
    compute_total_batches,
)
from app.observability import record_batch_outcome, record_latency

if TYPE_CHECKING:
    from app.domain.media import MediaReference
    from app.protocols.task_store import AsyncTaskStoreProtocol
    from app.services.storage_router import StorageRouter
    from config.settings.media import BatchSettings

logger = logging.getLogger(__name__)

# Tipo de erro para itens descartados pelo limite de lotes
BATCH_LIMIT_KIND = "batch_limit_reached"


@dataclass(frozen=True, slots=True)
class ItemOutcome:
    """Resultado de um item, amarrado ao índice de origem no lote."""

    index: int
    item: MediaReference
    address: str | None = None
    error_kind: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.address is not None


@dataclass(slots=True)
class BatchResult:
    """Resultado de um `advance`."""

    task_id: str
    processed_videos: list[str] = field(default_factory=list)
    processed_images: list[str] = field(default_factory=list)
    is_complete: bool = False
    current_batch: int = 0
    total_batches: int = 0
    completed_batches: int = 0
    batch_size: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "processed_this_batch": {
                "videos": self.processed_videos,
                "images": self.processed_images,
            },
            "is_complete": self.is_complete,
            "batch_info": {
                "current_batch": self.current_batch,
                "total_batches": self.total_batches,
                "completed_batches": self.completed_batches,
                "batch_size": self.batch_size,
            },
            "details": {
                "success_count": len(self.processed_videos) + len(self.processed_images),
                "failed_count": len(self.errors),
                "errors": self.errors,
            },
        }


class BatchScheduler:
    """Cria, avança e consulta tasks de lote.

    Args:
        store: Persistência das tasks
        router: Roteador aplicado a cada item
        settings: Tamanhos de lote, TTL e orçamento de subrequests
        item_timeout_seconds: Limite por item dentro do lote
        id_factory: Gerador de task_id (injetável em testes)
    """

    def __init__(
        self,
        store: AsyncTaskStoreProtocol,
        router: StorageRouter,
        settings: BatchSettings,
        item_timeout_seconds: float = 45.0,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._store = store
        self._router = router
        self._settings = settings
        self._item_timeout = item_timeout_seconds
        self._id_factory = id_factory

    # ──────────────────────────────────────────────────────────────
    # Regra de uso (small-batch vs continuação)
    # ──────────────────────────────────────────────────────────────

    def estimate_subrequests(self, item_count: int) -> int:
        """Requisições de saída estimadas (sondagem + download + upload por item)."""
        return item_count * self._settings.subrequests_per_item

    def should_use_batch_processing(self, item_count: int) -> bool:
        return self.estimate_subrequests(item_count) > self._settings.subrequest_budget

    def batch_capacity(self, task: ProcessingTask) -> int:
        """Itens por `advance`, limitado ao orçamento de subrequests da invocação."""
        per_invocation = self._settings.subrequest_budget // self._settings.subrequests_per_item
        return max(1, min(task.batch_capacity, per_invocation))

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida da task
    # ──────────────────────────────────────────────────────────────

    async def create_task(
        self,
        items: Sequence[MediaReference],
        batch_size_videos: int | None = None,
        batch_size_images: int | None = None,
    ) -> str:
        """Particiona itens por tipo e persiste nova task."""
        size_videos = batch_size_videos or self._settings.batch_size_videos
        size_images = batch_size_images or self._settings.batch_size_images
        videos = [item for item in items if item.kind == "video"]
        images = [item for item in items if item.kind == "image"]
        now = datetime.now(UTC)

        task = ProcessingTask(
            task_id=self._id_factory(),
            pending_videos=videos,
            pending_images=images,
            batch_size_videos=size_videos,
            batch_size_images=size_images,
            total_batches=compute_total_batches(
                len(videos), len(images), size_videos, size_images
            ),
            created_at=now,
            expires_at=now + timedelta(seconds=self._settings.task_ttl_seconds),
            last_updated=now,
        )
        if task.is_complete:
            task.status = TaskStatus.COMPLETED
        await self._store.save_async(task, self._settings.task_ttl_seconds)
        logger.info(
            "batch_task_created",
            extra={
                "task_id": task.task_id,
                "videos": len(videos),
                "images": len(images),
                "total_batches": task.total_batches,
            },
        )
        return task.task_id

    async def load_task(self, task_id: str) -> ProcessingTask:
        task = await self._store.load_async(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def delete_task(self, task_id: str) -> bool:
        deleted = await self._store.delete_async(task_id)
        logger.info("batch_task_deleted", extra={"task_id": task_id, "deleted": deleted})
        return deleted

    async def attach_linkage(self, task_id: str, linkage: dict[str, Any]) -> None:
        """Associa identificadores externos (ex: registro no destino) à task."""
        task = await self.load_task(task_id)
        task.external_linkage = {**(task.external_linkage or {}), **linkage}
        await self._save(task)

    async def progress(self, task_id: str) -> dict[str, Any]:
        task = await self.load_task(task_id)
        return {
            "task_id": task.task_id,
            "status": task.status.value,
            "completed_batches": task.completed_batches,
            "total_batches": task.total_batches,
            "percentage": task.progress_percent,
            "processed_counts": {
                "videos": len(task.processed_videos),
                "images": len(task.processed_images),
            },
            "remaining_counts": {
                "videos": len(task.pending_videos),
                "images": len(task.pending_images),
            },
            "total_items": task.total_items,
            "failed_count": len(task.failed_items),
            "created_at": task.created_at.isoformat(),
            "last_updated": task.last_updated.isoformat(),
            "expires_at": task.expires_at.isoformat(),
        }

    # ──────────────────────────────────────────────────────────────
    # Avanço
    # ──────────────────────────────────────────────────────────────

    async def advance(self, task_id: str) -> BatchResult:
        """Processa o próximo lote da task.

        Raises:
            TaskNotFoundError: task inexistente ou expirada
        """
        start = time.perf_counter()
        task = await self.load_task(task_id)

        if task.status is not TaskStatus.PROCESSING:
            return self._result(task, batch_size=0)
        if task.is_complete:
            self._finalize(task)
            await self._save(task)
            return self._result(task, batch_size=0)

        capacity = self.batch_capacity(task)
        videos = task.pending_videos[: min(task.batch_size_videos, capacity)]
        images = task.pending_images[: min(task.batch_size_images, capacity - len(videos))]
        selected = [*videos, *images]

        outcomes = await self._run_batch(selected, capacity)

        for outcome in outcomes:
            self._apply_outcome(task, outcome)

        task.completed_batches += 1
        if task.is_complete:
            self._finalize(task)
        await self._save(task)

        result = self._result(task, batch_size=len(selected))
        for outcome in outcomes:
            if outcome.ok:
                target = (
                    result.processed_videos
                    if outcome.item.kind == "video"
                    else result.processed_images
                )
                target.append(outcome.address or "")
            else:
                result.errors.append(
                    {
                        "url": outcome.item.url,
                        "kind": outcome.error_kind or "",
                        "message": outcome.message or "",
                    }
                )

        record_batch_outcome(task.task_id, len(selected) - len(result.errors), len(result.errors))
        record_latency("batch_scheduler", "advance", (time.perf_counter() - start) * 1000)
        return result

    async def _run_batch(
        self, items: Sequence[MediaReference], limit: int
    ) -> list[ItemOutcome]:
        """Executa o lote concorrentemente; saída na ordem dos índices."""
        semaphore = asyncio.Semaphore(max(limit, 1))

        async def bounded(index: int, item: MediaReference) -> ItemOutcome:
            async with semaphore:
                return await self._route_item(index, item)

        results = await asyncio.gather(
            *(bounded(i, item) for i, item in enumerate(items)),
            return_exceptions=True,
        )
        outcomes: list[ItemOutcome] = []
        for index, (item, result) in enumerate(zip(items, results, strict=True)):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.exception(
                    "batch_item_unexpected_error",
                    exc_info=result,
                    extra={"url": item.url[:100]},
                )
                outcomes.append(
                    ItemOutcome(
                        index=index,
                        item=item,
                        error_kind="unexpected_error",
                        message=str(result),
                    )
                )
            else:
                outcomes.append(result)
        return outcomes

    async def _route_item(self, index: int, item: MediaReference) -> ItemOutcome:
        try:
            routed = await asyncio.wait_for(self._router.route(item), self._item_timeout)
        except TimeoutError:
            logger.warning("batch_item_timeout", extra={"url": item.url[:100]})
            return ItemOutcome(
                index=index,
                item=item,
                error_kind="item_timeout",
                message=f"Tempo limite de {self._item_timeout:.0f}s excedido",
            )
        except MediaPipelineError as exc:
            logger.warning(
                "batch_item_failed",
                extra={"url": item.url[:100], "kind": exc.kind},
            )
            return ItemOutcome(index=index, item=item, error_kind=exc.kind, message=str(exc))
        return ItemOutcome(index=index, item=item, address=routed.address)

    def _apply_outcome(self, task: ProcessingTask, outcome: ItemOutcome) -> None:
        item = outcome.item
        pending = task.pending_videos if item.kind == "video" else task.pending_images
        pending.remove(item)
        if outcome.ok:
            processed = task.processed_videos if item.kind == "video" else task.processed_images
            processed.append(ProcessedItem(source_url=item.url, address=outcome.address or ""))
        else:
            task.failed_items.append(
                FailedItem(
                    url=item.url,
                    role=item.role.value,
                    error_kind=outcome.error_kind or "pipeline_error",
                    message=outcome.message or "",
                )
            )

    def _finalize(self, task: ProcessingTask) -> None:
        """Marca conclusão; pendências restantes (backlog alterado) viram falhas."""
        for item in [*task.pending_videos, *task.pending_images]:
            task.failed_items.append(
                FailedItem(
                    url=item.url,
                    role=item.role.value,
                    error_kind=BATCH_LIMIT_KIND,
                    message="Limite de lotes da task atingido",
                )
            )
        task.pending_videos.clear()
        task.pending_images.clear()
        if task.processed_count == 0 and task.failed_items:
            task.status = TaskStatus.FAILED
        else:
            task.status = TaskStatus.COMPLETED
        logger.info(
            "batch_task_completed",
            extra={
                "task_id": task.task_id,
                "processed": task.processed_count,
                "failed": len(task.failed_items),
            },
        )

    async def _save(self, task: ProcessingTask) -> None:
        task.touch()
        await self._store.save_async(task, self._settings.task_ttl_seconds)

    def _result(self, task: ProcessingTask, batch_size: int) -> BatchResult:
        return BatchResult(
            task_id=task.task_id,
            is_complete=task.status is not TaskStatus.PROCESSING,
            current_batch=task.completed_batches,
            total_batches=task.total_batches,
            completed_batches=task.completed_batches,
            batch_size=batch_size,
        )
