"""Factories de clientes externos: Redis e HTTP.

Clientes são singletons por processo; o lifespan da aplicação fecha
ambos no shutdown.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import httpx

from config.settings import get_base_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Pool compartilhado entre origem e image host
HTTP_MAX_CONNECTIONS = 50
HTTP_MAX_KEEPALIVE = 20


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_async_redis_client() -> AsyncRedis[bytes]:
    """Cria cliente Redis assíncrono (singleton).

    Bytes crus (decode_responses=False): as partes de upload são binárias.

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    redis_url = get_base_settings().redis_url
    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis[bytes] = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )

    logger.info("async_redis_client_created")
    return client


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_shared_http_client() -> httpx.AsyncClient:
    """Cria httpx.AsyncClient compartilhado (singleton)."""
    client = httpx.AsyncClient(
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=HTTP_MAX_KEEPALIVE,
        ),
    )
    logger.info("http_client_created", extra={"max_connections": HTTP_MAX_CONNECTIONS})
    return client


async def close_clients() -> None:
    """Fecha clientes já criados e limpa os caches das factories."""
    if create_shared_http_client.cache_info().currsize:
        await create_shared_http_client().aclose()
        create_shared_http_client.cache_clear()
    if create_async_redis_client.cache_info().currsize:
        await create_async_redis_client().aclose()
        create_async_redis_client.cache_clear()
