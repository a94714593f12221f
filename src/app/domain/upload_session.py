"""Sessão de upload em partes.

Os bytes de cada parte ficam no store. A sessão persistida guarda só
metadados; `received_chunks` é preenchido pelo store a partir das partes
gravadas. Reenvio de uma parte substitui a anterior (nunca concatena).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class UploadSessionState(Enum):
    """Estados da sessão.

    OPEN → MERGING → COMPLETE
    MERGING → FAILED
    MERGING → OPEN (partes faltando)
    """

    OPEN = "open"
    MERGING = "merging"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(slots=True)
class UploadSession:
    """Estado de um upload em partes.

    Atributos:
        session_id: Identificador da sessão (fornecido pelo cliente)
        file_name: Nome original do arquivo
        file_type: Tipo de conteúdo original
        declared_size: Tamanho total declarado pelo cliente
        total_chunks: Quantidade de partes declarada
        received_chunks: índice → tamanho da parte recebida (não persistido)
        state: Estado atual
        created_at: Momento da primeira parte
    """

    session_id: str
    file_name: str
    file_type: str
    declared_size: int
    total_chunks: int
    received_chunks: dict[int, int] = field(default_factory=dict)
    state: UploadSessionState = UploadSessionState.OPEN
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def missing_indices(self) -> list[int]:
        """Índices em [0, total_chunks) ainda não recebidos."""
        return [i for i in range(self.total_chunks) if i not in self.received_chunks]

    @property
    def received_bytes(self) -> int:
        return sum(self.received_chunks.values())

    def to_dict(self) -> dict[str, Any]:
        """Serializa sessão para persistência."""
        return {
            "session_id": self.session_id,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "declared_size": self.declared_size,
            "total_chunks": self.total_chunks,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UploadSession:
        """Deserializa sessão de persistência."""
        return cls(
            session_id=data["session_id"],
            file_name=data.get("file_name", ""),
            file_type=data.get("file_type", "application/octet-stream"),
            declared_size=int(data.get("declared_size", 0)),
            total_chunks=int(data.get("total_chunks", 0)),
            state=UploadSessionState(data.get("state", "open")),
            created_at=(
                datetime.fromisoformat(data["created_at"])
                if "created_at" in data
                else datetime.now(UTC)
            ),
        )
