"""Endpoints de upload em partes.

Endpoints:
- POST /upload-chunk: recebe uma parte (multipart)
- POST /merge-chunks: reconstrói o arquivo e roteia ao armazenamento

Erros respondem `{"error": mensagem}` com 400/401/404/413/500.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from api.routes.media.errors import status_for
from api.routes.media.schemas import MergeChunksRequest
from app.bootstrap.dependencies import get_chunked_upload_service
from app.domain.errors import ChunkMissingError, MediaPipelineError
from app.services.chunked_upload import ChunkedUploadService, ChunkMeta

logger = logging.getLogger(__name__)

router = APIRouter()

UploadService = Annotated[ChunkedUploadService, Depends(get_chunked_upload_service)]


def _parse_int(name: str, value: str | None, *, required: bool = False) -> int | None:
    if value is None or value == "":
        if required:
            raise ValueError(f"{name} é obrigatório")
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} inválido: {value!r}") from exc


def _error(exc: Exception) -> JSONResponse:
    body: dict[str, object] = {"error": str(exc)}
    if isinstance(exc, ChunkMissingError):
        body["missing"] = exc.missing
    return JSONResponse(content=body, status_code=status_for(exc))


@router.post("/upload-chunk")
async def upload_chunk(
    service: UploadService,
    file: Annotated[UploadFile, File()],
    chunkIndex: Annotated[str, Form()],  # noqa: N803
    sessionId: Annotated[str, Form()],  # noqa: N803
    totalChunks: Annotated[str | None, Form()] = None,  # noqa: N803
    originalFileName: Annotated[str | None, Form()] = None,  # noqa: N803
    originalFileType: Annotated[str | None, Form()] = None,  # noqa: N803
    originalFileSize: Annotated[str | None, Form()] = None,  # noqa: N803
) -> JSONResponse:
    """Armazena uma parte; reenvio do mesmo índice substitui a anterior."""
    try:
        if not sessionId:
            raise ValueError("sessionId é obrigatório")
        index = _parse_int("chunkIndex", chunkIndex, required=True)
        meta = ChunkMeta(
            total_chunks=_parse_int("totalChunks", totalChunks),
            file_name=originalFileName,
            file_type=originalFileType,
            file_size=_parse_int("originalFileSize", originalFileSize),
        )
        data = await file.read()
        receipt = await service.put_chunk(sessionId, index or 0, data, meta)
    except (ValueError, MediaPipelineError) as exc:
        logger.warning(
            "upload_chunk_rejected",
            extra={"session_id": sessionId[:64], "error_type": type(exc).__name__},
        )
        return _error(exc)

    return JSONResponse(
        content={
            "success": receipt.accepted,
            "chunkIndex": receipt.chunk_index,
            "sessionId": sessionId,
            "isComplete": receipt.is_complete,
            "uploadedChunks": receipt.received_count,
            "totalChunks": receipt.total_chunks,
        }
    )


@router.post("/merge-chunks")
async def merge_chunks(body: MergeChunksRequest, service: UploadService) -> JSONResponse:
    """Reconstrói o arquivo e devolve o endereço final."""
    try:
        result = await service.merge(
            body.session_id,
            body.file_name,
            body.total_chunks,
            file_size=body.file_size,
            file_type=body.file_type,
        )
    except (ValueError, MediaPipelineError) as exc:
        logger.warning(
            "merge_chunks_rejected",
            extra={"session_id": body.session_id[:64], "error_type": type(exc).__name__},
        )
        return _error(exc)

    return JSONResponse(
        content={
            "success": True,
            "result": {
                "src": result.address,
                "name": result.file_name,
                "size": result.size_bytes,
                "type": result.content_type,
                "isChunkFile": True,
                "decision": result.decision.value,
            },
        }
    )
