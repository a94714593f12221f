"""Testes do correlation_id e das métricas estruturadas."""

from __future__ import annotations

import logging

import pytest

from app.observability import (
    correlation_scope,
    get_correlation_id,
    record_batch_outcome,
    record_latency,
    record_route_decision,
)
from app.observability.correlation import normalize_correlation_id


class TestCorrelation:
    def test_scope_sets_and_resets(self) -> None:
        assert get_correlation_id() == ""
        with correlation_scope("req-42") as correlation_id:
            assert correlation_id == "req-42"
            assert get_correlation_id() == "req-42"
        assert get_correlation_id() == ""

    def test_nested_scopes_restore_outer(self) -> None:
        with correlation_scope("outer"):
            with correlation_scope("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

    @pytest.mark.parametrize("candidate", [None, "", "has space", "x" * 129, "a\nb"])
    def test_invalid_ids_are_replaced(self, candidate: str | None) -> None:
        generated = normalize_correlation_id(candidate)
        assert generated != candidate
        assert len(generated) == 32

    def test_valid_id_kept(self) -> None:
        assert normalize_correlation_id("abc-123.x:y_z") == "abc-123.x:y_z"


class TestMetrics:
    def test_latency_is_rounded(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.observability.metrics"):
            record_latency("storage_router", "route", 12.3456)

        record = caplog.records[-1]
        assert record.getMessage() == "metric_latency"
        assert record.latency_ms == 12.35
        assert record.component == "storage_router"

    def test_route_decision(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.observability.metrics"):
            record_route_decision("proxy", "douyin", 30_000_000)

        record = caplog.records[-1]
        assert record.decision == "proxy"
        assert record.platform == "douyin"
        assert record.size_bytes == 30_000_000

    def test_batch_outcome(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.observability.metrics"):
            record_batch_outcome("task-1", processed=7, failed=1)

        record = caplog.records[-1]
        assert (record.task_id, record.processed, record.failed) == ("task-1", 7, 1)
