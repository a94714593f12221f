"""Fase de mídia obrigatória (capa, imagem principal).

Ao contrário do agendador de lotes, aqui é tudo ou nada: qualquer
falha ou o estouro do prazo total derruba a fase inteira e as
tarefas ainda em voo são canceladas.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from app.domain.errors import MediaPipelineError, RequiredMediaError, RequiredMediaTimeoutError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.media import MediaReference, RouteResult
    from app.services.storage_router import StorageRouter

logger = logging.getLogger(__name__)


def required_phase_timeout(item_count: int, per_item_seconds: float, max_seconds: float) -> float:
    """min(n * por_item, máximo)."""
    return min(item_count * per_item_seconds, max_seconds)


async def _route_required(
    router: StorageRouter, index: int, item: MediaReference
) -> RouteResult:
    try:
        return await router.route(item)
    except MediaPipelineError as exc:
        raise RequiredMediaError(index, item.url, exc) from exc


async def process_required_media(
    items: Sequence[MediaReference],
    router: StorageRouter,
    per_item_seconds: float = 30.0,
    max_seconds: float = 300.0,
) -> list[RouteResult]:
    """Roteia todos os itens sob um único prazo.

    Returns:
        Resultados na mesma ordem de `items`

    Raises:
        RequiredMediaError: algum item falhou
        RequiredMediaTimeoutError: prazo total esgotado
    """
    if not items:
        return []
    timeout = required_phase_timeout(len(items), per_item_seconds, max_seconds)
    tasks = [
        asyncio.ensure_future(_route_required(router, index, item))
        for index, item in enumerate(items)
    ]
    try:
        return list(await asyncio.wait_for(asyncio.gather(*tasks), timeout))
    except TimeoutError as exc:
        logger.warning(
            "required_media_timeout",
            extra={"items": len(items), "timeout_seconds": timeout},
        )
        raise RequiredMediaTimeoutError(timeout) from exc
    except RequiredMediaError as exc:
        logger.warning(
            "required_media_failed",
            extra={"index": exc.index, "kind": exc.cause.__class__.__name__},
        )
        raise
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Recolhe canceladas e falhas tardias dos irmãos
        await asyncio.gather(*tasks, return_exceptions=True)
