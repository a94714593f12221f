"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - redis_task_store: Tasks de lote no Redis
    - redis_upload_session_store: Sessões de upload em partes no Redis
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryTaskStore, MemoryUploadSessionStore
from app.infra.stores.redis_task_store import RedisTaskStore
from app.infra.stores.redis_upload_session_store import RedisUploadSessionStore

__all__ = [
    # Memory (dev/test)
    "MemoryTaskStore",
    "MemoryUploadSessionStore",
    # Redis
    "RedisTaskStore",
    "RedisUploadSessionStore",
]
