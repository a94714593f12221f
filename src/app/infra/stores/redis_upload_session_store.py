"""Redis Upload Session Store: sessões de upload em partes.

Contrato de Keys:
    upload_session:{id}       JSON dos metadados da sessão (SETEX)
    upload_chunks:{id}        Hash índice → bytes da parte
    upload_chunk_sizes:{id}   Hash índice → tamanho da parte

Os hashes são a única fonte dos índices recebidos: cada gravação é uma
transação MULTI/EXEC que devolve o estado completo após o HSET, então
partes concorrentes da mesma sessão nunca se sobrescrevem.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.domain.upload_session import UploadSession
from app.protocols.upload_session_store import AsyncUploadSessionStoreProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixos distintos: sessionId escolhido pelo cliente não colide entre keys
UPLOAD_SESSION_PREFIX = "upload_session:"
UPLOAD_CHUNKS_PREFIX = "upload_chunks:"
UPLOAD_CHUNK_SIZES_PREFIX = "upload_chunk_sizes:"


def _decode_sizes(raw: dict[bytes | str, bytes | str]) -> dict[int, int]:
    return {int(index): int(size) for index, size in raw.items()}


class RedisUploadSessionStore(AsyncUploadSessionStoreProtocol):
    """Store de sessões de upload usando Redis.

    Args:
        async_redis_client: Cliente Redis assíncrono
    """

    def __init__(self, async_redis_client: AsyncRedis[bytes]) -> None:
        self._redis = async_redis_client

    def _key(self, session_id: str) -> str:
        return f"{UPLOAD_SESSION_PREFIX}{session_id}"

    def _chunks_key(self, session_id: str) -> str:
        return f"{UPLOAD_CHUNKS_PREFIX}{session_id}"

    def _sizes_key(self, session_id: str) -> str:
        return f"{UPLOAD_CHUNK_SIZES_PREFIX}{session_id}"

    async def save_async(self, session: UploadSession, ttl_seconds: int = 3600) -> None:
        data = json.dumps(session.to_dict(), ensure_ascii=False)
        try:
            await self._redis.setex(self._key(session.session_id), ttl_seconds, data)
        except Exception as exc:
            raise RedisConnectionError("Falha ao salvar sessão de upload no Redis") from exc

    async def load_async(self, session_id: str) -> UploadSession | None:
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.get(self._key(session_id))
            pipeline.hgetall(self._sizes_key(session_id))
            data, sizes = await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao carregar sessão de upload do Redis") from exc
        if data is None:
            return None
        try:
            session = UploadSession.from_dict(json.loads(data))
            session.received_chunks = _decode_sizes(sizes or {})
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning(
                "upload_session_load_error", extra={"session_id": session_id, "error": str(e)}
            )
            return None
        return session

    async def put_chunk_async(
        self, session_id: str, index: int, data: bytes, ttl_seconds: int = 3600
    ) -> dict[int, int]:
        chunks_key = self._chunks_key(session_id)
        sizes_key = self._sizes_key(session_id)
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.hset(chunks_key, str(index), data)
            pipeline.hset(sizes_key, str(index), len(data))
            pipeline.expire(chunks_key, ttl_seconds)
            pipeline.expire(sizes_key, ttl_seconds)
            pipeline.expire(self._key(session_id), ttl_seconds)
            pipeline.hgetall(sizes_key)
            results = await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao gravar parte no Redis") from exc
        return _decode_sizes(results[-1] or {})

    async def discard_chunk_async(self, session_id: str, index: int) -> None:
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.hdel(self._chunks_key(session_id), str(index))
            pipeline.hdel(self._sizes_key(session_id), str(index))
            await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao descartar parte no Redis") from exc

    async def load_chunks_async(self, session_id: str) -> dict[int, bytes]:
        try:
            raw = await self._redis.hgetall(self._chunks_key(session_id))
        except Exception as exc:
            raise RedisConnectionError("Falha ao carregar partes do Redis") from exc
        return {int(index): data for index, data in raw.items()}

    async def delete_async(self, session_id: str) -> bool:
        try:
            result = await self._redis.delete(
                self._key(session_id),
                self._chunks_key(session_id),
                self._sizes_key(session_id),
            )
        except Exception as exc:
            raise RedisConnectionError("Falha ao remover sessão de upload do Redis") from exc
        return bool(result)
