"""Agregador de rotas: registra todos os routers.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health.router import router as health_router
from api.routes.media.chunks import router as chunks_router
from api.routes.media.tasks import router as tasks_router
from api.routes.proxy.router import router as proxy_router
from config.settings import get_proxy_settings


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    # Upload em partes e processamento de backlog
    api_router.include_router(chunks_router, tags=["upload"])
    api_router.include_router(tasks_router, tags=["tasks"])

    # Resolução de endereços de proxy
    api_router.include_router(
        proxy_router,
        prefix=f"/proxy/{get_proxy_settings().version}",
        tags=["proxy"],
    )

    return api_router
