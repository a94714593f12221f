"""Protocolo de persistência de sessões de upload em partes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.upload_session import UploadSession


class AsyncUploadSessionStoreProtocol(ABC):
    """Contrato assíncrono para sessão + bytes das partes.

    A sessão persistida guarda só metadados; load_async preenche
    `received_chunks` a partir das partes gravadas.
    put_chunk_async substitui a parte de mesmo índice e devolve, de forma
    atômica com a gravação, índice → tamanho de todas as partes da sessão.
    delete_async remove a sessão e todas as partes.
    """

    @abstractmethod
    async def save_async(self, session: UploadSession, ttl_seconds: int = 3600) -> None: ...

    @abstractmethod
    async def load_async(self, session_id: str) -> UploadSession | None: ...

    @abstractmethod
    async def put_chunk_async(
        self, session_id: str, index: int, data: bytes, ttl_seconds: int = 3600
    ) -> dict[int, int]: ...

    @abstractmethod
    async def discard_chunk_async(self, session_id: str, index: int) -> None: ...

    @abstractmethod
    async def load_chunks_async(self, session_id: str) -> dict[int, bytes]: ...

    @abstractmethod
    async def delete_async(self, session_id: str) -> bool: ...
