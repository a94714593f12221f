"""Credenciais do image host.

Token obtido por login (usuário/senha) e mantido em cache até
expirar. Logins concorrentes são serializados.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from app.domain.errors import ImageHostAuthError
from app.infra.http.client import HttpError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.infra.http.client import HttpClient
    from config.settings.media import ImageHostSettings

logger = logging.getLogger(__name__)


class ImageHostCredentialProvider:
    """Fornece token Bearer válido para o image host.

    Args:
        http_client: Cliente HTTP
        settings: Configuração do image host
        clock: Relógio monotônico (injetável em testes)
    """

    def __init__(
        self,
        http_client: HttpClient,
        settings: ImageHostSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        """Token em cache ou novo login se expirado."""
        if self._token and self._clock() < self._expires_at:
            return self._token
        async with self._lock:
            if self._token and self._clock() < self._expires_at:
                return self._token
            return await self._login()

    async def refresh(self) -> str:
        """Descarta o token atual e faz novo login."""
        async with self._lock:
            self._token = None
            self._expires_at = 0.0
            return await self._login()

    async def _login(self) -> str:
        try:
            response = await self._http.post(
                self._settings.login_url,
                json={
                    "username": self._settings.username,
                    "password": self._settings.password,
                },
                timeout=self._settings.login_timeout_seconds,
            )
        except HttpError as exc:
            logger.warning("image_host_login_failed", extra={"status_code": exc.status_code})
            raise ImageHostAuthError("Falha de conexão no login do image host") from exc

        if not response.is_success:
            logger.warning(
                "image_host_login_rejected", extra={"status_code": response.status_code}
            )
            msg = f"Login no image host recusado: HTTP {response.status_code}"
            raise ImageHostAuthError(msg)

        try:
            data = response.json()
        except ValueError as exc:
            raise ImageHostAuthError("Resposta de login não é JSON") from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            detail = (data.get("error") or data.get("message")) if isinstance(data, dict) else None
            raise ImageHostAuthError(f"Login sem token: {detail or 'erro desconhecido'}")

        self._token = token
        self._expires_at = self._clock() + self._settings.token_ttl_seconds
        logger.info("image_host_login_succeeded", extra={"token": token})
        return token
