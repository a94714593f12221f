"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente pelo coletor de logs.

Métricas suportadas:
- Latência: tempo de execução por componente/operação
- Roteamento: decisão tomada por item (direct/proxy) com tamanho
- Lote: itens processados/falhos por avanço de task

Uso:
    from app.observability.metrics import record_latency, record_route_decision

    start = time.perf_counter()
    # ... operação ...
    latency_ms = (time.perf_counter() - start) * 1000
    record_latency("storage_router", "route", latency_ms)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "storage_router", "batch_scheduler")
        operation: Nome da operação (ex: "route", "advance")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_route_decision(
    decision: str,
    platform: str,
    size_bytes: int,
    correlation_id: str | None = None,
) -> None:
    """Registra decisão de roteamento de um item."""
    logger.info(
        "metric_route_decision",
        extra={
            "metric_type": "route_decision",
            "component": "storage_router",
            "decision": decision,
            "platform": platform,
            "size_bytes": size_bytes,
            "correlation_id": correlation_id,
        },
    )


def record_batch_outcome(
    task_id: str,
    processed: int,
    failed: int,
    correlation_id: str | None = None,
) -> None:
    """Registra resultado de um avanço de lote."""
    logger.info(
        "metric_batch_outcome",
        extra={
            "metric_type": "batch_outcome",
            "component": "batch_scheduler",
            "task_id": task_id,
            "processed": processed,
            "failed": failed,
            "correlation_id": correlation_id,
        },
    )
