"""Resolução de endereços de proxy.

Endpoints (prefixo /proxy/{version}):
- GET /{token}: token opaco (o sufixo .mp4 faz parte do segmento)

Respostas de erro: 400 token ilegível, 403 adulterado/expirado,
503 nenhuma fonte disponível.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from app.bootstrap.dependencies import get_proxy_resolver
from app.domain.errors import OriginFetchError, ProxyTokenError
from app.services.proxy_resolver import ProxyResolver

logger = logging.getLogger(__name__)

router = APIRouter()

Resolver = Annotated[ProxyResolver, Depends(get_proxy_resolver)]


@router.get("/{token}")
async def resolve_proxy(token: str, request: Request, resolver: Resolver) -> Response:
    """Faz stream da mídia original com os headers da plataforma."""
    try:
        resolved = await resolver.resolve(token, request.headers.get("range"))
    except ProxyTokenError as exc:
        code = (
            status.HTTP_400_BAD_REQUEST
            if exc.reason == "malformed"
            else status.HTTP_403_FORBIDDEN
        )
        logger.warning("proxy_token_rejected", extra={"reason": exc.reason, "token": token[:16]})
        return JSONResponse(content={"error": str(exc), "reason": exc.reason}, status_code=code)
    except OriginFetchError as exc:
        return JSONResponse(
            content={"error": str(exc)},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    upstream = resolved.response
    return StreamingResponse(
        upstream.aiter_raw(),
        status_code=upstream.status_code,
        headers=resolved.response_headers(),
        background=BackgroundTask(upstream.aclose),
    )
