"""Testes de config.logging.

Cobre: configure_logging, log_fallback, CorrelationIdFilter,
SensitiveFieldFilter e create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    SensitiveFieldFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_fallback,
    mask_value,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(msg: str = "msg", name: str = "test", **attrs: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("INFO", logging.INFO),
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            ("ERROR", logging.ERROR),
        ],
    )
    def test_sets_root_level(self, level: str, expected: int) -> None:
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1

    def test_handler_has_context_and_masking_filters(self) -> None:
        configure_logging(correlation_id_getter=lambda: "corr-1")
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)
        assert any(isinstance(f, SensitiveFieldFilter) for f in handler.filters)

    def test_httpx_logger_quieted(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "media_relay"


class TestGetLogger:
    def test_same_name_same_instance(self) -> None:
        assert get_logger("relay.module") is get_logger("relay.module")


class TestLogFallback:
    def test_logs_warning_with_component(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "proxy_address")
        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args == ("Fallback applied for %s", "proxy_address")
        assert kwargs["extra"] == {"fallback_used": True, "component": "proxy_address"}

    def test_optional_fields(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "proxy_address", reason="mint_failed", elapsed_ms=12.5)
        extra = logger.warning.call_args.kwargs["extra"]
        assert extra["reason"] == "mint_failed"
        assert extra["elapsed_ms"] == 12.5


class TestCorrelationIdFilter:
    def test_injects_correlation_and_service(self) -> None:
        record = _record()
        assert CorrelationIdFilter("media_relay", lambda: "corr-123").filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "media_relay"

    def test_preserves_explicit_id(self) -> None:
        record = _record(correlation_id="explicit")
        CorrelationIdFilter("svc", lambda: "from-getter").filter(record)
        assert record.correlation_id == "explicit"

    def test_none_from_extra_uses_getter(self) -> None:
        record = _record(correlation_id=None)
        CorrelationIdFilter("svc", lambda: "from-getter").filter(record)
        assert record.correlation_id == "from-getter"

    def test_without_getter_is_empty(self) -> None:
        record = _record()
        CorrelationIdFilter("svc").filter(record)
        assert record.correlation_id == ""


class TestSensitiveFieldFilter:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("abc", "***"), ("abcdef", "***"), ("abcdefghij", "abcdef***")],
    )
    def test_mask_value(self, value: str, expected: str) -> None:
        assert mask_value(value) == expected

    def test_masks_known_fields_only(self) -> None:
        record = _record(token="eyJhbGciOiJIUzI1NiJ9", password="hunter22", url="https://x")
        assert SensitiveFieldFilter().filter(record) is True
        assert record.token == "eyJhbG***"
        assert record.password == "hunter***"
        assert record.url == "https://x"


class TestCreateJsonFormatter:
    def test_constants(self) -> None:
        assert {
            "asctime",
            "levelname",
            "name",
            "message",
            "correlation_id",
            "service",
        } == REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_output_is_json_with_renamed_fields(self) -> None:
        formatter = create_json_formatter()
        record = _record(
            "media_routed",
            name="app.services.storage_router",
            correlation_id="abc-123",
            service="media_relay",
            url="https://cdn.example.com/视频.mp4",
        )

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "media_routed"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.services.storage_router"
        assert payload["correlation_id"] == "abc-123"
        assert payload["service"] == "media_relay"
        assert payload["url"].endswith("视频.mp4")

    def test_unicode_not_escaped(self) -> None:
        formatter = create_json_formatter()
        record = _record("视频", correlation_id="c", service="s")
        assert "视频" in formatter.format(record)


class TestLoggingIntegration:
    def test_full_flow_does_not_raise(self) -> None:
        configure_logging(
            level="DEBUG",
            service_name="integration_test",
            correlation_id_getter=lambda: "int-test-001",
        )
        logger = get_logger("integration.test")
        logger.debug("batch_advanced", extra={"task_id": "t1", "processed": 8})
        logger.info("image_host_login_succeeded", extra={"token": "secret-token-value"})
        logger.warning("origin_probe_failed", extra={"status_code": 403})
