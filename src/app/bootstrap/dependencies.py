"""Factories de serviços e stores: wiring das implementações concretas.

Cada factory é singleton por processo (lru_cache) e serve como alvo de
`Depends` nas rotas; testes substituem via `app.dependency_overrides`.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.bootstrap.clients import create_async_redis_client, create_shared_http_client
from app.infra.http import HttpClient, HttpClientConfig
from app.infra.image_host import ImageHostClient, ImageHostCredentialProvider
from app.infra.origin import OriginFetcher
from app.infra.stores import (
    MemoryTaskStore,
    MemoryUploadSessionStore,
    RedisTaskStore,
    RedisUploadSessionStore,
)
from app.protocols.task_store import AsyncTaskStoreProtocol
from app.protocols.upload_session_store import AsyncUploadSessionStoreProtocol
from app.services.batch_scheduler import BatchScheduler
from app.services.chunked_upload import ChunkedUploadService
from app.services.proxy_address import ProxyAddressCodec
from app.services.proxy_resolver import ProxyResolver
from app.services.storage_router import StorageRouter
from app.use_cases.media import ProcessBacklogUseCase
from config.settings import (
    get_base_settings,
    get_batch_settings,
    get_image_host_settings,
    get_proxy_settings,
    get_storage_settings,
)

logger = logging.getLogger(__name__)

# Origem: falha rápida para tentar backups; o retry fica no nível do item
ORIGIN_MAX_RETRIES = 1


# ──────────────────────────────────────────────────────────────────────────────
# Stores
# ──────────────────────────────────────────────────────────────────────────────


def _warn_memory_backend(store_name: str) -> None:
    environment = get_base_settings().environment
    if environment != "development":
        logger.warning(
            "memory_store_in_non_dev",
            extra={"store": store_name, "backend": "memory", "environment": environment},
        )


@lru_cache(maxsize=1)
def get_upload_session_store() -> AsyncUploadSessionStoreProtocol:
    """Store de sessões de upload conforme UPLOAD_SESSION_BACKEND."""
    backend = get_storage_settings().upload_session_backend
    if backend == "redis":
        store: AsyncUploadSessionStoreProtocol = RedisUploadSessionStore(
            create_async_redis_client()
        )
    else:
        _warn_memory_backend("upload_session")
        store = MemoryUploadSessionStore()
    logger.info("upload_session_store_created", extra={"backend": backend})
    return store


@lru_cache(maxsize=1)
def get_task_store() -> AsyncTaskStoreProtocol:
    """Store de tasks de lote conforme TASK_STORE_BACKEND."""
    backend = get_batch_settings().task_store_backend
    if backend == "redis":
        store: AsyncTaskStoreProtocol = RedisTaskStore(create_async_redis_client())
    else:
        _warn_memory_backend("task")
        store = MemoryTaskStore()
    logger.info("task_store_created", extra={"backend": backend})
    return store


# ──────────────────────────────────────────────────────────────────────────────
# Adapters externos
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_origin_fetcher() -> OriginFetcher:
    settings = get_storage_settings()
    http_client = HttpClient(
        config=HttpClientConfig(
            timeout_seconds=settings.origin_timeout_seconds,
            max_retries=ORIGIN_MAX_RETRIES,
            backoff_base_seconds=0.5,
        ),
        client=create_shared_http_client(),
    )
    return OriginFetcher(http_client, timeout_seconds=settings.origin_timeout_seconds)


@lru_cache(maxsize=1)
def get_image_host_client() -> ImageHostClient:
    settings = get_image_host_settings()
    http_client = HttpClient(
        config=HttpClientConfig(
            timeout_seconds=settings.upload_timeout_seconds,
            max_retries=settings.max_retries,
            backoff_base_seconds=1.0,
        ),
        client=create_shared_http_client(),
    )
    credentials = ImageHostCredentialProvider(http_client, settings)
    return ImageHostClient(http_client, credentials, settings)


@lru_cache(maxsize=1)
def get_proxy_codec() -> ProxyAddressCodec:
    return ProxyAddressCodec(get_proxy_settings())


# ──────────────────────────────────────────────────────────────────────────────
# Serviços
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_storage_router() -> StorageRouter:
    return StorageRouter(
        origin=get_origin_fetcher(),
        image_host=get_image_host_client(),
        proxy_codec=get_proxy_codec(),
        settings=get_storage_settings(),
    )


@lru_cache(maxsize=1)
def get_chunked_upload_service() -> ChunkedUploadService:
    return ChunkedUploadService(
        store=get_upload_session_store(),
        router=get_storage_router(),
        settings=get_storage_settings(),
    )


@lru_cache(maxsize=1)
def get_batch_scheduler() -> BatchScheduler:
    return BatchScheduler(
        store=get_task_store(),
        router=get_storage_router(),
        settings=get_batch_settings(),
        item_timeout_seconds=get_storage_settings().item_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_backlog_use_case() -> ProcessBacklogUseCase:
    return ProcessBacklogUseCase(get_batch_scheduler(), get_batch_settings())


@lru_cache(maxsize=1)
def get_proxy_resolver() -> ProxyResolver:
    return ProxyResolver(get_proxy_codec(), get_origin_fetcher())


def clear_dependency_caches() -> None:
    """Descarta singletons (shutdown e testes)."""
    for factory in (
        get_upload_session_store,
        get_task_store,
        get_origin_fetcher,
        get_image_host_client,
        get_proxy_codec,
        get_storage_router,
        get_chunked_upload_service,
        get_batch_scheduler,
        get_backlog_use_case,
        get_proxy_resolver,
    ):
        factory.cache_clear()
