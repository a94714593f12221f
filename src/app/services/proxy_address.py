"""Endereços de proxy autocontidos e assinados.

O endereço não tem registro no servidor: todo o necessário para
resolver (URL original, nome, plataforma, backups) viaja no token.
Cunhar nunca faz I/O; o risco de acesso à origem fica para a resolução.

Formato do token: JSON compacto em base64url sem padding, com os campos
`original`, `filename`, `timestamp` (ms), `source`, `backupUrls` e
`signature`. O caminho público é `/proxy/{version}/{token}[.mp4]`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.domain.errors import ProxyMintFailedError, ProxyTokenError
from app.infra.crypto import sign_message, verify_signature

if TYPE_CHECKING:
    from config.settings.media import ProxySettings

logger = logging.getLogger(__name__)

VIDEO_SUFFIX = ".mp4"


@dataclass(frozen=True, slots=True)
class ProxyAddress:
    """Conteúdo decodificado de um token de proxy."""

    original: str
    filename: str
    created_at: int
    source: str
    backup_urls: tuple[str, ...] = ()
    signature: str = field(default="", compare=False)

    def signing_message(self) -> str:
        """Mensagem canônica assinada.

        Começa por original|filename|timestamp e inclui source e backups,
        de modo que nenhum campo do token pode mudar sem invalidar a assinatura.
        """
        backups = ",".join(self.backup_urls)
        return f"{self.original}|{self.filename}|{self.created_at}|{self.source}|{backups}"

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "original": self.original,
            "filename": self.filename,
            "timestamp": self.created_at,
            "source": self.source,
        }
        if self.backup_urls:
            payload["backupUrls"] = list(self.backup_urls)
        if self.signature:
            payload["signature"] = self.signature
        return payload


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def encode_token(address: ProxyAddress) -> str:
    raw = json.dumps(address.to_payload(), ensure_ascii=False, separators=(",", ":"))
    return _b64encode(raw.encode("utf-8"))


def parse_token(token: str) -> ProxyAddress:
    """Decodifica token sem verificar assinatura.

    Raises:
        ProxyTokenError: reason="malformed"
    """
    if token.endswith(VIDEO_SUFFIX):
        token = token[: -len(VIDEO_SUFFIX)]
    if not token:
        raise ProxyTokenError("malformed", "Token de proxy vazio")
    try:
        raw = _b64decode(token)
        # Codificação não canônica (bits de padding alterados) conta como adulteração
        if _b64encode(raw) != token:
            raise ProxyTokenError("malformed", "Token de proxy com codificação inválida")
        data = json.loads(raw.decode("utf-8"))
        return ProxyAddress(
            original=str(data["original"]),
            filename=str(data["filename"]),
            created_at=int(data["timestamp"]),
            source=str(data["source"]),
            backup_urls=tuple(str(url) for url in data.get("backupUrls") or ()),
            signature=str(data.get("signature", "")),
        )
    except ProxyTokenError:
        raise
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise ProxyTokenError("malformed", "Token de proxy ilegível") from exc


class ProxyAddressCodec:
    """Cunha e verifica endereços de proxy.

    Args:
        settings: Segredo, idade máxima e base pública do proxy
        clock: Relógio em segundos (injetável em testes)
    """

    def __init__(
        self,
        settings: ProxySettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def mint(
        self,
        original: str,
        filename: str,
        source_platform: str,
        backup_urls: Sequence[str] = (),
    ) -> str:
        """Gera token opaco assinado.

        Raises:
            ProxyMintFailedError: segredo ausente ou campos não serializáveis
        """
        if not self._settings.signing_secret:
            raise ProxyMintFailedError("Segredo de assinatura do proxy não configurado")
        try:
            unsigned = ProxyAddress(
                original=original,
                filename=filename,
                created_at=self._now_ms(),
                source=source_platform,
                backup_urls=tuple(backup_urls),
            )
            signature = sign_message(unsigned.signing_message(), self._settings.signing_secret)
            signed = ProxyAddress(
                original=unsigned.original,
                filename=unsigned.filename,
                created_at=unsigned.created_at,
                source=unsigned.source,
                backup_urls=unsigned.backup_urls,
                signature=signature,
            )
            return encode_token(signed)
        except (TypeError, ValueError, UnicodeError) as exc:
            raise ProxyMintFailedError(f"Falha ao codificar endereço de proxy: {exc}") from exc

    def build_url(self, token: str, filename: str) -> str:
        """URL pública do token (sufixo .mp4 para vídeos mp4)."""
        suffix = VIDEO_SUFFIX if filename.lower().endswith(VIDEO_SUFFIX) else ""
        base = self._settings.base_url.rstrip("/")
        return f"{base}/proxy/{self._settings.version}/{token}{suffix}"

    def mint_url(
        self,
        original: str,
        filename: str,
        source_platform: str,
        backup_urls: Sequence[str] = (),
    ) -> str:
        return self.build_url(self.mint(original, filename, source_platform, backup_urls), filename)

    def decode(self, token: str) -> ProxyAddress:
        """Decodifica e verifica assinatura e idade.

        Raises:
            ProxyTokenError: reason em malformed | tampered | expired
        """
        address = parse_token(token)
        if not verify_signature(
            address.signing_message(), address.signature, self._settings.signing_secret
        ):
            logger.warning("proxy_token_tampered", extra={"source": address.source})
            raise ProxyTokenError("tampered", "Assinatura do token de proxy inválida")
        age_ms = self._now_ms() - address.created_at
        if age_ms > self._settings.max_age_seconds * 1000:
            raise ProxyTokenError("expired", "Token de proxy expirado")
        return address
