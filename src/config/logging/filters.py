"""Filters de logging para injeção de contexto e mascaramento.

Campos injetados:
- correlation_id: ID de rastreamento da requisição/task
- service: Nome do serviço (ex: media_relay)

Campos mascarados (quando presentes em `extra`):
- token, access_token, authorization, password, proxy_token
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

SENSITIVE_FIELDS = frozenset(
    {"token", "access_token", "authorization", "password", "proxy_token"}
)

# Caracteres preservados no início de um valor mascarado
VISIBLE_PREFIX = 6


def mask_value(value: object) -> str:
    """Mascara valor sensível preservando apenas um prefixo curto."""
    text = str(value)
    if len(text) <= VISIBLE_PREFIX:
        return "***"
    return f"{text[:VISIBLE_PREFIX]}***"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class SensitiveFieldFilter(logging.Filter):
    """Mascara campos sensíveis passados via `extra`.

    Não filtra records, apenas reescreve atributos conhecidos.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for field_name in SENSITIVE_FIELDS:
            value = getattr(record, field_name, None)
            if value:
                setattr(record, field_name, mask_value(value))
        return True
