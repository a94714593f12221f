"""Mapeamento de erros de domínio para status HTTP."""

from __future__ import annotations

from fastapi import status

from app.domain.errors import (
    ChunkMissingError,
    ChunkSizeMismatchError,
    ChunkTooLargeError,
    ImageHostAuthError,
    MediaPipelineError,
    TaskNotFoundError,
    UnsupportedLargeFileError,
    UploadSessionNotFoundError,
)

_STATUS_BY_ERROR: tuple[tuple[type[MediaPipelineError], int], ...] = (
    (ChunkMissingError, status.HTTP_400_BAD_REQUEST),
    (ChunkSizeMismatchError, status.HTTP_400_BAD_REQUEST),
    (ImageHostAuthError, status.HTTP_401_UNAUTHORIZED),
    (ChunkTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (UnsupportedLargeFileError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (UploadSessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (TaskNotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_for(exc: Exception) -> int:
    """Status HTTP para um erro; ValueError é validação (400), resto 500."""
    if isinstance(exc, ValueError):
        return status.HTTP_400_BAD_REQUEST
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
