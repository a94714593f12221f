"""Entrypoint da aplicação media_relay.

Este módulo é o ponto de entrada principal do serviço.
Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import create_api_router
from app.bootstrap import SERVICE_NAME, initialize_app, validate_runtime_settings
from app.bootstrap.clients import close_clients, create_async_redis_client
from app.bootstrap.dependencies import clear_dependency_caches
from app.observability import CORRELATION_HEADER, correlation_scope
from config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Inicializa conexão Redis (opcional em dev)

    Shutdown:
    - Fecha clientes HTTP/Redis e descarta singletons
    """
    logger.info("app_starting", extra={"service": SERVICE_NAME})
    validate_runtime_settings()
    app.state.redis_client = None

    try:
        app.state.redis_client = create_async_redis_client()
    except ValueError as exc:
        logger.warning("redis_client_not_ready", extra={"error_type": type(exc).__name__})

    yield

    logger.info("app_shutting_down", extra={"service": SERVICE_NAME})
    await close_clients()
    clear_dependency_caches()


async def correlation_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Propaga X-Correlation-Id (recebido ou gerado) para logs e resposta."""
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


# Rotas de upload respondem {"error": mensagem}; as demais {"error": true, ...}
_CHUNK_PATHS = frozenset({"/upload-chunk", "/merge-chunks"})


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Erros de validação de request viram 400 no formato de cada rota."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())[1:]) for err in errors)
    message = f"Requisição inválida: {fields}" if fields else "Requisição inválida"
    if request.url.path in _CHUNK_PATHS:
        content: dict[str, object] = {"error": message}
    else:
        content = {"error": True, "message": message, "kind": "validation_error"}
    return JSONResponse(content=content, status_code=status.HTTP_400_BAD_REQUEST)


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="media_relay",
        description="Aquisição de mídia e roteamento de armazenamento",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    fastapi_app.middleware("http")(correlation_middleware)
    fastapi_app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Endereços de proxy são embutidos em páginas de terceiros
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Range", "Content-Type", CORRELATION_HEADER],
    )

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": SERVICE_NAME})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting media_relay in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
