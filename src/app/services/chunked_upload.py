"""Protocolo de upload em partes.

Partes chegam em qualquer ordem e podem ser reenviadas (substituem a
anterior). O merge concatena por índice crescente, confere o tamanho e
entrega o payload único ao roteador. Merge com partes faltando mantém a
sessão aberta para reenvio apenas dos índices ausentes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.domain.content_types import (
    CONTENT_TYPE_BY_EXTENSION,
    DEFAULT_CONTENT_TYPE,
    sniff_content_type,
)
from app.domain.errors import (
    ChunkMissingError,
    ChunkSizeMismatchError,
    ChunkTooLargeError,
    MediaPipelineError,
    UploadSessionNotFoundError,
)
from app.domain.media import MediaPayload, MediaReference, MediaRole
from app.domain.upload_session import UploadSession, UploadSessionState

if TYPE_CHECKING:
    from app.domain.media import RouteResult
    from app.protocols.upload_session_store import AsyncUploadSessionStoreProtocol
    from app.services.storage_router import StorageRouter
    from config.settings.media import StorageSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChunkMeta:
    """Metadados opcionais enviados junto das partes."""

    total_chunks: int | None = None
    file_name: str | None = None
    file_type: str | None = None
    file_size: int | None = None


@dataclass(frozen=True, slots=True)
class ChunkReceipt:
    """Resposta de put_chunk."""

    accepted: bool
    chunk_index: int
    received_count: int
    total_chunks: int | None
    is_complete: bool


def resolve_merged_content_type(file_name: str, declared: str | None, head: bytes) -> str:
    """fileType declarado > assinatura dos bytes > extensão do nome."""
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    sniffed = sniff_content_type(head)
    if sniffed:
        return sniffed
    ext = os.path.splitext(file_name)[1].lower()
    return CONTENT_TYPE_BY_EXTENSION.get(ext, DEFAULT_CONTENT_TYPE)


class ChunkedUploadService:
    """Recebe partes e executa o merge.

    Args:
        store: Persistência de sessões e bytes das partes
        router: Roteador que recebe o payload reconstruído
        settings: Teto de tamanho e TTL das sessões
    """

    def __init__(
        self,
        store: AsyncUploadSessionStoreProtocol,
        router: StorageRouter,
        settings: StorageSettings,
    ) -> None:
        self._store = store
        self._router = router
        self._settings = settings

    @property
    def _ttl(self) -> int:
        return self._settings.upload_session_ttl_seconds

    @property
    def _max_bytes(self) -> int:
        return self._settings.chunk_upload_max_bytes

    async def put_chunk(
        self,
        session_id: str,
        index: int,
        data: bytes,
        meta: ChunkMeta | None = None,
    ) -> ChunkReceipt:
        """Armazena (ou substitui) a parte `index`, criando a sessão se preciso.

        Contagem e teto usam o estado devolvido pelo store na própria
        gravação, então partes concorrentes da mesma sessão não se perdem.

        Raises:
            ValueError: índice negativo ou fora de total_chunks
            ChunkTooLargeError: tamanho declarado ou acumulado acima do teto
        """
        meta = meta or ChunkMeta()
        if index < 0:
            raise ValueError(f"chunkIndex inválido: {index}")
        if meta.file_size is not None and meta.file_size > self._max_bytes:
            raise ChunkTooLargeError(meta.file_size, self._max_bytes)

        session = await self._store.load_async(session_id)
        if session is None:
            session = UploadSession(
                session_id=session_id,
                file_name=meta.file_name or "",
                file_type=meta.file_type or DEFAULT_CONTENT_TYPE,
                declared_size=meta.file_size or 0,
                total_chunks=meta.total_chunks or 0,
            )
            changed = True
            logger.info("upload_session_created", extra={"session_id": session_id})
        else:
            changed = _apply_meta(session, meta)

        if session.total_chunks and index >= session.total_chunks:
            raise ValueError(f"chunkIndex {index} fora do total {session.total_chunks}")
        if len(data) > self._max_bytes:
            raise ChunkTooLargeError(len(data), self._max_bytes)

        if changed:
            await self._store.save_async(session, self._ttl)
        sizes = await self._store.put_chunk_async(session_id, index, data, self._ttl)

        session.received_chunks = sizes
        if session.received_bytes > self._max_bytes:
            await self._store.discard_chunk_async(session_id, index)
            raise ChunkTooLargeError(session.received_bytes, self._max_bytes)

        total = session.total_chunks or None
        received = len(sizes)
        logger.debug(
            "upload_chunk_stored",
            extra={"session_id": session_id, "chunk_index": index, "received": received},
        )
        return ChunkReceipt(
            accepted=True,
            chunk_index=index,
            received_count=received,
            total_chunks=total,
            is_complete=total is not None and not session.missing_indices(),
        )

    async def merge(
        self,
        session_id: str,
        file_name: str,
        total_chunks: int,
        file_size: int | None = None,
        file_type: str | None = None,
    ) -> RouteResult:
        """Reconstrói o arquivo e roteia o payload.

        Raises:
            UploadSessionNotFoundError: sessão inexistente/expirada
            ChunkMissingError: partes faltando (sessão continua aberta)
            ChunkTooLargeError / ChunkSizeMismatchError: tamanho inválido
            MediaPipelineError: falha no roteamento do payload
        """
        if total_chunks <= 0:
            raise ValueError("totalChunks deve ser positivo")
        if file_size is not None and file_size > self._max_bytes:
            raise ChunkTooLargeError(file_size, self._max_bytes)

        session = await self._store.load_async(session_id)
        if session is None:
            raise UploadSessionNotFoundError(session_id)

        session.total_chunks = total_chunks
        missing = session.missing_indices()
        if missing:
            session.state = UploadSessionState.OPEN
            await self._store.save_async(session, self._ttl)
            logger.info(
                "upload_merge_missing_chunks",
                extra={"session_id": session_id, "missing": missing},
            )
            raise ChunkMissingError(session_id, missing)

        session.state = UploadSessionState.MERGING
        await self._store.save_async(session, self._ttl)

        chunks = await self._store.load_chunks_async(session_id)
        absent = [i for i in range(total_chunks) if i not in chunks]
        if absent:
            session.state = UploadSessionState.OPEN
            await self._store.save_async(session, self._ttl)
            raise ChunkMissingError(session_id, absent)

        data = b"".join(chunks[i] for i in range(total_chunks))
        try:
            if len(data) > self._max_bytes:
                raise ChunkTooLargeError(len(data), self._max_bytes)
            if file_size is not None and len(data) != file_size:
                raise ChunkSizeMismatchError(file_size, len(data))

            name = file_name or session.file_name or session_id
            content_type = resolve_merged_content_type(
                name, file_type or session.file_type, data[:16]
            )
            payload = MediaPayload(data=data, file_name=name, content_type=content_type)
            role = MediaRole.VIDEO if content_type.startswith("video/") else MediaRole.IMAGE
            item = MediaReference(url=f"upload://{session_id}/{name}", role=role)
            result = await self._router.route(item, payload)
        except MediaPipelineError:
            session.state = UploadSessionState.FAILED
            await self._store.delete_async(session_id)
            logger.warning("upload_merge_failed", extra={"session_id": session_id})
            raise

        session.state = UploadSessionState.COMPLETE
        await self._store.delete_async(session_id)
        logger.info(
            "upload_merge_completed",
            extra={"session_id": session_id, "size_bytes": len(data), "chunks": total_chunks},
        )
        return result


def _apply_meta(session: UploadSession, meta: ChunkMeta) -> bool:
    """Completa metadados ausentes; retorna True se algo mudou."""
    changed = False
    if meta.total_chunks and not session.total_chunks:
        session.total_chunks = meta.total_chunks
        changed = True
    if meta.file_name and not session.file_name:
        session.file_name = meta.file_name
        changed = True
    if meta.file_type and session.file_type == DEFAULT_CONTENT_TYPE != meta.file_type:
        session.file_type = meta.file_type
        changed = True
    if meta.file_size and not session.declared_size:
        session.declared_size = meta.file_size
        changed = True
    return changed
