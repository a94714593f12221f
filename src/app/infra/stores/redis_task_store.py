"""Redis Task Store: tasks de lote com TTL.

Cada task é um JSON em `batch_task:{task_id}` gravado com SETEX.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.domain.processing_task import ProcessingTask
from app.protocols.task_store import AsyncTaskStoreProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace de tasks
TASK_PREFIX = "batch_task:"


class RedisTaskStore(AsyncTaskStoreProtocol):
    """Store de tasks usando Redis.

    Args:
        async_redis_client: Cliente Redis assíncrono
    """

    def __init__(self, async_redis_client: AsyncRedis[bytes]) -> None:
        self._redis = async_redis_client

    def _key(self, task_id: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{TASK_PREFIX}{task_id}"

    async def save_async(self, task: ProcessingTask, ttl_seconds: int = 3600) -> None:
        data = json.dumps(task.to_dict(), ensure_ascii=False)
        try:
            await self._redis.setex(self._key(task.task_id), ttl_seconds, data)
        except Exception as exc:
            raise RedisConnectionError("Falha ao salvar task no Redis") from exc
        logger.debug("task_saved", extra={"task_id": task.task_id, "ttl": ttl_seconds})

    async def load_async(self, task_id: str) -> ProcessingTask | None:
        try:
            data = await self._redis.get(self._key(task_id))
        except Exception as exc:
            raise RedisConnectionError("Falha ao carregar task do Redis") from exc
        if data is None:
            return None
        try:
            return ProcessingTask.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning("task_load_error", extra={"task_id": task_id, "error": str(e)})
            return None

    async def delete_async(self, task_id: str) -> bool:
        try:
            result = await self._redis.delete(self._key(task_id))
        except Exception as exc:
            raise RedisConnectionError("Falha ao remover task do Redis") from exc
        return bool(result)
