"""Use case de processamento de backlog de mídia.

Modos:
    small_batch: cabe no orçamento da invocação; avança a task até o fim
        (com intervalo entre lotes) e devolve o conjunto final.
    large_batch: processa um lote e devolve o handle de continuação.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from app.domain.processing_task import TaskStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.media import MediaReference
    from app.domain.processing_task import ProcessingTask
    from app.services.batch_scheduler import BatchResult, BatchScheduler
    from config.settings.media import BatchSettings

logger = logging.getLogger(__name__)

BacklogMode = Literal["small_batch", "large_batch"]


@dataclass(slots=True)
class BacklogOutcome:
    """Resultado devolvido ao chamador.

    Quando `is_complete`, `videos`/`images` trazem o conjunto final e
    `failed_items` os itens que não serão publicados.
    """

    task_id: str
    mode: BacklogMode
    is_complete: bool
    status: str
    videos: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    failed_items: list[dict[str, str]] = field(default_factory=list)
    last_batch: dict[str, Any] | None = None
    progress: dict[str, Any] | None = None
    external_linkage: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "task_id": self.task_id,
            "mode": self.mode,
            "is_complete": self.is_complete,
            "status": self.status,
            "videos": self.videos,
            "images": self.images,
            "failed_items": self.failed_items,
        }
        if self.last_batch is not None:
            data["last_batch"] = self.last_batch
        if self.progress is not None:
            data["progress"] = self.progress
        if self.external_linkage is not None:
            data["external_linkage"] = self.external_linkage
        if not self.is_complete:
            data["continue_path"] = f"/continue-processing/{self.task_id}"
            data["status_path"] = f"/task-status/{self.task_id}"
        return data


class ProcessBacklogUseCase:
    """Orquestra criação e avanço de tasks conforme o orçamento.

    Args:
        scheduler: Agendador de lotes
        settings: Limites de small-batch e intervalo entre lotes
        sleep: Função de espera (injetável em testes)
    """

    def __init__(
        self,
        scheduler: BatchScheduler,
        settings: BatchSettings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._scheduler = scheduler
        self._settings = settings
        self._sleep = sleep

    def choose_mode(self, item_count: int) -> BacklogMode:
        if not self._scheduler.should_use_batch_processing(item_count):
            return "small_batch"
        if item_count <= self._settings.small_batch_max_items:
            return "small_batch"
        return "large_batch"

    async def execute(
        self,
        items: Sequence[MediaReference],
        external_linkage: dict[str, Any] | None = None,
    ) -> BacklogOutcome:
        """Cria task e processa conforme o modo escolhido."""
        mode = self.choose_mode(len(items))
        task_id = await self._scheduler.create_task(items)
        if external_linkage:
            await self._scheduler.attach_linkage(task_id, external_linkage)
        logger.info(
            "backlog_processing_started",
            extra={"task_id": task_id, "mode": mode, "items": len(items)},
        )

        if mode == "small_batch":
            last = await self._advance_to_completion(task_id)
            return await self._complete(task_id, mode, last)

        last = await self._scheduler.advance(task_id)
        if last.is_complete:
            return await self._complete(task_id, mode, last)
        return BacklogOutcome(
            task_id=task_id,
            mode=mode,
            is_complete=False,
            status=TaskStatus.PROCESSING.value,
            last_batch=last.to_dict(),
            progress=await self._scheduler.progress(task_id),
        )

    async def continue_task(self, task_id: str) -> BacklogOutcome:
        """Avança um lote de uma task existente (continuação)."""
        last = await self._scheduler.advance(task_id)
        if last.is_complete:
            return await self._complete(task_id, "large_batch", last)
        return BacklogOutcome(
            task_id=task_id,
            mode="large_batch",
            is_complete=False,
            status=TaskStatus.PROCESSING.value,
            last_batch=last.to_dict(),
            progress=await self._scheduler.progress(task_id),
        )

    async def _advance_to_completion(self, task_id: str) -> BatchResult:
        interval = self._settings.batch_interval_ms / 1000
        result = await self._scheduler.advance(task_id)
        while not result.is_complete:
            await self._sleep(interval)
            result = await self._scheduler.advance(task_id)
        return result

    async def _complete(
        self, task_id: str, mode: BacklogMode, last: BatchResult
    ) -> BacklogOutcome:
        task = await self._scheduler.load_task(task_id)
        outcome = _final_outcome(task, mode)
        outcome.last_batch = last.to_dict()
        await self._scheduler.delete_task(task_id)
        logger.info(
            "backlog_processing_completed",
            extra={
                "task_id": task_id,
                "videos": len(outcome.videos),
                "images": len(outcome.images),
                "failed": len(outcome.failed_items),
            },
        )
        return outcome


def _final_outcome(task: ProcessingTask, mode: BacklogMode) -> BacklogOutcome:
    return BacklogOutcome(
        task_id=task.task_id,
        mode=mode,
        is_complete=True,
        status=task.status.value,
        videos=[item.address for item in task.processed_videos],
        images=[item.address for item in task.processed_images],
        failed_items=[item.to_dict() for item in task.failed_items],
        external_linkage=task.external_linkage,
    )
