"""Testes do wiring de stores e serviços."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from app.bootstrap import dependencies
from app.infra.stores import (
    MemoryTaskStore,
    MemoryUploadSessionStore,
    RedisTaskStore,
    RedisUploadSessionStore,
)
from config.settings import get_base_settings, get_batch_settings, get_storage_settings


@pytest.fixture(autouse=True)
def fresh_wiring() -> Iterator[None]:
    getters = (get_base_settings, get_batch_settings, get_storage_settings)
    for getter in getters:
        getter.cache_clear()
    dependencies.clear_dependency_caches()
    yield
    for getter in getters:
        getter.cache_clear()
    dependencies.clear_dependency_caches()


def test_memory_backends_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UPLOAD_SESSION_BACKEND", raising=False)
    monkeypatch.delenv("TASK_STORE_BACKEND", raising=False)

    assert isinstance(dependencies.get_upload_session_store(), MemoryUploadSessionStore)
    assert isinstance(dependencies.get_task_store(), MemoryTaskStore)


def test_redis_backends(monkeypatch: pytest.MonkeyPatch) -> None:
    redis = MagicMock()
    monkeypatch.setenv("UPLOAD_SESSION_BACKEND", "redis")
    monkeypatch.setenv("TASK_STORE_BACKEND", "redis")
    monkeypatch.setattr(dependencies, "create_async_redis_client", lambda: redis)

    assert isinstance(dependencies.get_upload_session_store(), RedisUploadSessionStore)
    assert isinstance(dependencies.get_task_store(), RedisTaskStore)


def test_services_share_router(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TASK_STORE_BACKEND", raising=False)
    router = dependencies.get_storage_router()

    assert dependencies.get_storage_router() is router
    assert dependencies.get_batch_scheduler()._router is router
    assert dependencies.get_chunked_upload_service()._router is router
