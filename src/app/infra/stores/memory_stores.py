"""Stores em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios
e sem compartilhamento entre processos.
"""

from __future__ import annotations

import json
import time

from app.domain.processing_task import ProcessingTask
from app.domain.upload_session import UploadSession
from app.protocols.task_store import AsyncTaskStoreProtocol
from app.protocols.upload_session_store import AsyncUploadSessionStoreProtocol


class MemoryTaskStore(AsyncTaskStoreProtocol):
    """Store de tasks em memória: apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, float]] = {}  # task_id -> (json, expires_at)

    async def save_async(self, task: ProcessingTask, ttl_seconds: int = 3600) -> None:
        self._store[task.task_id] = (json.dumps(task.to_dict()), time.time() + ttl_seconds)

    async def load_async(self, task_id: str) -> ProcessingTask | None:
        entry = self._store.get(task_id)
        if entry is None:
            return None
        data, expires_at = entry
        if time.time() > expires_at:
            del self._store[task_id]
            return None
        return ProcessingTask.from_dict(json.loads(data))

    async def delete_async(self, task_id: str) -> bool:
        return self._store.pop(task_id, None) is not None


class MemoryUploadSessionStore(AsyncUploadSessionStoreProtocol):
    """Store de sessões de upload em memória: apenas para dev/test."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[str, float]] = {}
        self._chunks: dict[str, dict[int, bytes]] = {}

    def _expired(self, session_id: str) -> bool:
        entry = self._sessions.get(session_id)
        if entry is None:
            return True
        if time.time() > entry[1]:
            self._sessions.pop(session_id, None)
            self._chunks.pop(session_id, None)
            return True
        return False

    def _sizes(self, session_id: str) -> dict[int, int]:
        return {index: len(data) for index, data in self._chunks.get(session_id, {}).items()}

    async def save_async(self, session: UploadSession, ttl_seconds: int = 3600) -> None:
        self._sessions[session.session_id] = (
            json.dumps(session.to_dict()),
            time.time() + ttl_seconds,
        )

    async def load_async(self, session_id: str) -> UploadSession | None:
        if self._expired(session_id):
            return None
        session = UploadSession.from_dict(json.loads(self._sessions[session_id][0]))
        session.received_chunks = self._sizes(session_id)
        return session

    async def put_chunk_async(
        self, session_id: str, index: int, data: bytes, ttl_seconds: int = 3600
    ) -> dict[int, int]:
        if not self._expired(session_id):
            data_json = self._sessions[session_id][0]
            self._sessions[session_id] = (data_json, time.time() + ttl_seconds)
        self._chunks.setdefault(session_id, {})[index] = bytes(data)
        return self._sizes(session_id)

    async def discard_chunk_async(self, session_id: str, index: int) -> None:
        self._chunks.get(session_id, {}).pop(index, None)

    async def load_chunks_async(self, session_id: str) -> dict[int, bytes]:
        return dict(self._chunks.get(session_id, {}))

    async def delete_async(self, session_id: str) -> bool:
        existed = self._sessions.pop(session_id, None) is not None
        self._chunks.pop(session_id, None)
        return existed
