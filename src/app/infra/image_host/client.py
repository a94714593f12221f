"""Cliente de upload para o image host."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain.errors import UploadFailedError
from app.infra.http.client import HttpError
from app.infra.image_host.responses import decode_upload_response

if TYPE_CHECKING:
    import httpx

    from app.infra.http.client import HttpClient
    from app.protocols.media_ports import CredentialProviderProtocol
    from config.settings.media import ImageHostSettings

logger = logging.getLogger(__name__)

_AUTH_STATUSES = frozenset({401, 403})


class ImageHostClient:
    """Envia bytes como multipart (campo `file`) e devolve URL pública.

    Um 401/403 provoca um único refresh de credencial e nova tentativa.
    """

    def __init__(
        self,
        http_client: HttpClient,
        credentials: CredentialProviderProtocol,
        settings: ImageHostSettings,
    ) -> None:
        self._http = http_client
        self._credentials = credentials
        self._settings = settings

    async def upload(self, data: bytes, file_name: str, content_type: str) -> str:
        token = await self._credentials.get_token()
        response = await self._post(data, file_name, content_type, token)
        if response.status_code in _AUTH_STATUSES:
            logger.info("image_host_token_refresh", extra={"status_code": response.status_code})
            token = await self._credentials.refresh()
            response = await self._post(data, file_name, content_type, token)

        if not response.is_success:
            logger.warning(
                "image_host_upload_rejected",
                extra={"status_code": response.status_code, "file_name": file_name},
            )
            raise UploadFailedError(f"Upload recusado: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UploadFailedError("Resposta de upload não é JSON") from exc

        address = decode_upload_response(payload, self._settings.domain)
        logger.info(
            "image_host_upload_succeeded",
            extra={"file_name": file_name, "size_bytes": len(data)},
        )
        return address

    async def _post(
        self, data: bytes, file_name: str, content_type: str, token: str
    ) -> httpx.Response:
        try:
            return await self._http.post(
                self._settings.upload_url,
                headers={"Authorization": f"Bearer {token}"},
                files={"file": (file_name, data, content_type)},
                timeout=self._settings.upload_timeout_seconds,
            )
        except HttpError as exc:
            logger.warning(
                "image_host_upload_failed",
                extra={"status_code": exc.status_code, "file_name": file_name},
            )
            raise UploadFailedError("Falha de conexão no upload") from exc
