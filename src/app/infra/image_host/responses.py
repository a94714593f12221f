"""Decodificação das respostas de upload do image host.

O image host devolve formatos variados. Cada formato conhecido é
uma variante; a primeira que produz URL vence, na ordem:
lista `[{src|url|path}]`, `src`, `url`, `path`, `data.url`, `fileId`.
Nenhuma variante casando é falha: a URL nunca é inventada.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.domain.errors import UploadFailedError


class UploadEntry(BaseModel):
    """Elemento de resposta em lista (formato padrão)."""

    model_config = ConfigDict(extra="ignore")

    src: str | None = None
    url: str | None = None
    path: str | None = None


class UploadData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str | None = None


class UploadObject(UploadEntry):
    """Resposta em objeto único."""

    data: UploadData | None = None
    file_id: str | None = Field(default=None, alias="fileId")
    error: str | None = None


def _absolute(value: str, domain: str) -> str:
    if value.startswith(("http://", "https://")):
        return value
    if not value.startswith("/"):
        value = "/" + value
    return f"{domain.rstrip('/')}{value}"


def _from_entry(entry: UploadEntry, domain: str) -> str | None:
    for candidate in (entry.src, entry.url, entry.path):
        if candidate:
            return _absolute(candidate, domain)
    return None


def decode_upload_response(payload: Any, domain: str) -> str:
    """Extrai a URL pública da resposta de upload.

    Raises:
        UploadFailedError: resposta com `error` ou sem variante reconhecida
    """
    try:
        if isinstance(payload, list):
            if not payload:
                raise UploadFailedError("Resposta de upload vazia")
            address = _from_entry(UploadEntry.model_validate(payload[0]), domain)
        elif isinstance(payload, dict):
            obj = UploadObject.model_validate(payload)
            if obj.error:
                raise UploadFailedError(f"Image host recusou upload: {obj.error}")
            address = _from_entry(obj, domain)
            if address is None and obj.data is not None and obj.data.url:
                address = _absolute(obj.data.url, domain)
            if address is None and obj.file_id:
                address = _absolute(f"/file/{obj.file_id}", domain)
        else:
            address = None
    except ValidationError as exc:
        raise UploadFailedError("Resposta de upload em formato inesperado") from exc

    if not address:
        raise UploadFailedError("Resposta de upload sem URL reconhecível")
    return address
