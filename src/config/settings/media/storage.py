"""Settings de roteamento de armazenamento e upload em partes.

Limites de tamanho que decidem entre upload direto e endereço de proxy,
além do ciclo de vida das sessões de upload em partes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StoreBackend = Literal["memory", "redis"]

MIB = 1024 * 1024


@dataclass(frozen=True)
class StorageSettings:
    """Políticas de tamanho e sessões de upload.

    Attributes:
        inline_upload_max_bytes: Abaixo disso o upload direto é sempre tentado
        oversized_max_bytes: A partir disso o item é "oversized" (motivo da rejeição)
        chunk_upload_max_bytes: Teto absoluto para uploads em partes
        upload_session_ttl_seconds: TTL de uma sessão de upload em partes
        upload_session_backend: Backend das sessões (memory|redis)
        origin_timeout_seconds: Timeout de requisições contra a origem
        item_timeout_seconds: Timeout total por item roteado
    """

    inline_upload_max_bytes: int = 19 * MIB
    oversized_max_bytes: int = 110 * MIB
    chunk_upload_max_bytes: int = 100 * MIB
    upload_session_ttl_seconds: int = 3600
    upload_session_backend: StoreBackend = "memory"
    origin_timeout_seconds: float = 45.0
    item_timeout_seconds: float = 45.0

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida limites e backend.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.inline_upload_max_bytes <= 0:
            errors.append("INLINE_UPLOAD_MAX_BYTES deve ser > 0")

        if self.oversized_max_bytes < self.inline_upload_max_bytes:
            errors.append("OVERSIZED_MAX_BYTES deve ser >= INLINE_UPLOAD_MAX_BYTES")

        if self.chunk_upload_max_bytes <= 0:
            errors.append("CHUNK_UPLOAD_MAX_BYTES deve ser > 0")

        if self.upload_session_ttl_seconds <= 0:
            errors.append("UPLOAD_SESSION_TTL_SECONDS deve ser > 0")

        if self.upload_session_backend not in ("memory", "redis"):
            errors.append(f"UPLOAD_SESSION_BACKEND inválido: {self.upload_session_backend}")

        if self.upload_session_backend == "memory" and not base.is_development:
            errors.append("UPLOAD_SESSION_BACKEND=memory proibido em staging/production")

        return errors


def _parse_backend(value: str) -> StoreBackend:
    return "redis" if value.lower() == "redis" else "memory"


def _load_storage_from_env() -> StorageSettings:
    """Carrega StorageSettings de variáveis de ambiente."""
    return StorageSettings(
        inline_upload_max_bytes=int(os.getenv("INLINE_UPLOAD_MAX_BYTES", str(19 * MIB))),
        oversized_max_bytes=int(os.getenv("OVERSIZED_MAX_BYTES", str(110 * MIB))),
        chunk_upload_max_bytes=int(os.getenv("CHUNK_UPLOAD_MAX_BYTES", str(100 * MIB))),
        upload_session_ttl_seconds=int(os.getenv("UPLOAD_SESSION_TTL_SECONDS", "3600")),
        upload_session_backend=_parse_backend(os.getenv("UPLOAD_SESSION_BACKEND", "memory")),
        origin_timeout_seconds=float(os.getenv("ORIGIN_TIMEOUT_SECONDS", "45")),
        item_timeout_seconds=float(os.getenv("ITEM_TIMEOUT_SECONDS", "45")),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """Retorna instância cacheada de StorageSettings."""
    return _load_storage_from_env()
