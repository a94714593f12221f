"""Endpoints de processamento de backlog.

Endpoints:
- POST /process-media: cria task; small-batch devolve o resultado final,
  large-batch devolve o handle de continuação
- POST /continue-processing/{task_id}: avança um lote
- GET /task-status/{task_id}: progresso da task

Erros respondem `{"error": true, "message", "kind"}`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.routes.media.errors import status_for
from api.routes.media.schemas import ProcessMediaRequest
from app.bootstrap.dependencies import (
    get_backlog_use_case,
    get_batch_scheduler,
    get_storage_router,
)
from app.domain.errors import MediaPipelineError
from app.services.batch_scheduler import BatchScheduler
from app.services.required_media import process_required_media
from app.services.storage_router import StorageRouter
from app.use_cases.media import BacklogOutcome, ProcessBacklogUseCase
from config.settings import get_batch_settings

logger = logging.getLogger(__name__)

router = APIRouter()

BacklogUseCase = Annotated[ProcessBacklogUseCase, Depends(get_backlog_use_case)]
Scheduler = Annotated[BatchScheduler, Depends(get_batch_scheduler)]
Router = Annotated[StorageRouter, Depends(get_storage_router)]


def _error(exc: Exception) -> JSONResponse:
    kind = exc.kind if isinstance(exc, MediaPipelineError) else "validation_error"
    return JSONResponse(
        content={"error": True, "message": str(exc), "kind": kind},
        status_code=status_for(exc),
    )


def _outcome_body(request: Request, outcome: BacklogOutcome) -> dict[str, Any]:
    body = outcome.to_dict()
    if not outcome.is_complete:
        base = str(request.base_url).rstrip("/")
        body["continue_url"] = f"{base}{body['continue_path']}"
        body["status_url"] = f"{base}{body['status_path']}"
    return body


@router.post("/process-media")
async def process_media(
    body: ProcessMediaRequest,
    request: Request,
    use_case: BacklogUseCase,
    storage_router: Router,
) -> JSONResponse:
    """Fase obrigatória (se houver) seguida do backlog."""
    settings = get_batch_settings()
    required_addresses: list[str] = []
    try:
        if body.required:
            routed = await process_required_media(
                [item.to_reference() for item in body.required],
                storage_router,
                per_item_seconds=settings.required_phase_per_item_seconds,
                max_seconds=settings.required_phase_max_seconds,
            )
            required_addresses = [result.address for result in routed]
        outcome = await use_case.execute(
            [item.to_reference() for item in body.items],
            external_linkage=body.external_linkage,
        )
    except (ValueError, MediaPipelineError) as exc:
        logger.warning("process_media_failed", extra={"error_type": type(exc).__name__})
        return _error(exc)

    content = _outcome_body(request, outcome)
    content["required"] = required_addresses
    return JSONResponse(content=content)


@router.post("/continue-processing/{task_id}")
async def continue_processing(
    task_id: str, request: Request, use_case: BacklogUseCase
) -> JSONResponse:
    try:
        outcome = await use_case.continue_task(task_id)
    except MediaPipelineError as exc:
        logger.warning(
            "continue_processing_failed",
            extra={"task_id": task_id, "error_type": type(exc).__name__},
        )
        return _error(exc)
    return JSONResponse(content=_outcome_body(request, outcome))


@router.get("/task-status/{task_id}")
async def task_status(task_id: str, scheduler: Scheduler) -> JSONResponse:
    try:
        progress = await scheduler.progress(task_id)
    except MediaPipelineError as exc:
        return _error(exc)
    return JSONResponse(content=progress)
