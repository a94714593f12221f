"""Protocolo de persistência de tasks de lote."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.processing_task import ProcessingTask


class AsyncTaskStoreProtocol(ABC):
    """Contrato assíncrono para ProcessingTask.

    load_async retorna None para task inexistente ou expirada.
    """

    @abstractmethod
    async def save_async(self, task: ProcessingTask, ttl_seconds: int = 3600) -> None: ...

    @abstractmethod
    async def load_async(self, task_id: str) -> ProcessingTask | None: ...

    @abstractmethod
    async def delete_async(self, task_id: str) -> bool: ...
