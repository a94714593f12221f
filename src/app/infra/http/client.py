"""Cliente HTTP base para adaptadores externos (origem e image host).

Retry com backoff exponencial em 429/5xx e falhas de conexão.
Aceita um httpx.AsyncClient injetado (pool compartilhado ou
MockTransport em testes); sem ele, abre um cliente por chamada.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 30.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    follow_redirects: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


class HttpClient:
    """Cliente HTTP simples para chamadas externas."""

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._client = client

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        return await self.request("GET", url, headers=headers, timeout=timeout)

    async def head(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        return await self.request("HEAD", url, headers=headers, timeout=timeout)

    async def post(
        self,
        url: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        return await self.request(
            "POST", url, headers=headers, json=json, files=files, timeout=timeout
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Executa requisição com retry.

        Status 429/5xx e timeouts são retentados até `max_retries`;
        demais status voltam ao chamador sem exceção.
        """
        merged_headers = {**self._config.default_headers, **(headers or {})}
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        for attempt in range(self._config.max_retries + 1):
            try:
                response = await self._send(
                    method,
                    url,
                    headers=merged_headers,
                    json=json,
                    files=files,
                    timeout=effective_timeout,
                )
                if response.status_code in (429,) or response.status_code >= 500:
                    raise HttpError(
                        "http_retryable_status",
                        status_code=response.status_code,
                        is_retryable=True,
                    )
                return response
            except HttpError as exc:
                if not exc.is_retryable or attempt >= self._config.max_retries:
                    raise
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError("http_connection_error", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
        raise HttpError("http_retry_exhausted", is_retryable=True)

    async def send_stream(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        follow_redirects: bool = False,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Abre resposta em modo stream (sem retry).

        O chamador deve fechar com `await response.aclose()`.
        Exige cliente compartilhado, pois o corpo é lido após o retorno.
        """
        if self._client is None:
            msg = "Stream exige httpx.AsyncClient compartilhado"
            raise RuntimeError(msg)
        merged_headers = {**self._config.default_headers, **(headers or {})}
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        request = self._client.build_request(
            method, url, headers=merged_headers, timeout=effective_timeout
        )
        try:
            return await self._client.send(
                request, stream=True, follow_redirects=follow_redirects
            )
        except (httpx.TimeoutException, httpx.ConnectError) as exc:
            raise HttpError("http_connection_error", is_retryable=True) from exc

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        json: dict[str, Any] | None,
        files: dict[str, tuple[str, bytes, str]] | None,
        timeout: float,
    ) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(
                method, url, headers=headers, json=json, files=files, timeout=timeout
            )
        async with httpx.AsyncClient(
            verify=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
        ) as client:
            return await client.request(
                method, url, headers=headers, json=json, files=files, timeout=timeout
            )


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
