"""Correlation_id por requisição HTTP ou avanço de task.

O valor vive num ContextVar, então cada request/task assíncrona vê o seu.
O filtro de logging lê daqui e injeta em todo record.

Uso:
    from app.observability import correlation_scope

    with correlation_scope(request.headers.get(CORRELATION_HEADER)):
        ...  # logs desta request carregam o mesmo id
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

CORRELATION_HEADER = "X-Correlation-Id"

# IDs recebidos de fora são aceitos apenas neste formato
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """correlation_id atual ou string vazia."""
    return _correlation_id.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


def normalize_correlation_id(candidate: str | None) -> str:
    """Aceita o id recebido se bem formado; senão gera um novo."""
    if candidate and _VALID_ID.match(candidate):
        return candidate
    return generate_correlation_id()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id; retorna token para reset."""
    return _correlation_id.set(normalize_correlation_id(correlation_id))


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Define o correlation_id enquanto o bloco executa."""
    token = set_correlation_id(correlation_id)
    try:
        yield get_correlation_id()
    finally:
        reset_correlation_id(token)
