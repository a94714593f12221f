"""Settings do endereçamento de proxy CDN.

Base pública dos endereços de proxy e segredo de assinatura dos tokens.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

# Segredo usado apenas em desenvolvimento local
DEV_SIGNING_SECRET = "dev-only-proxy-secret"


@dataclass(frozen=True)
class ProxySettings:
    """Configurações dos endereços de proxy.

    Attributes:
        base_url: URL pública do resolvedor (ex: https://media.example.com)
        version: Segmento de versão do caminho (/proxy/{version}/{token})
        signing_secret: Segredo HMAC dos tokens
        max_age_seconds: Idade máxima aceita na resolução
    """

    base_url: str = ""
    version: str = "v1"
    signing_secret: str = DEV_SIGNING_SECRET
    max_age_seconds: int = 24 * 3600

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de proxy.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.base_url:
            errors.append("PROXY_BASE_URL não configurado")

        if not self.version:
            errors.append("PROXY_VERSION não pode ser vazio")

        if self.max_age_seconds <= 0:
            errors.append("PROXY_MAX_AGE_SECONDS deve ser > 0")

        if not base.is_development and self.signing_secret in ("", DEV_SIGNING_SECRET):
            errors.append("PROXY_SIGNING_SECRET obrigatório em staging/production")

        return errors


def _load_proxy_from_env() -> ProxySettings:
    """Carrega ProxySettings de variáveis de ambiente."""
    return ProxySettings(
        base_url=os.getenv("PROXY_BASE_URL", "").rstrip("/"),
        version=os.getenv("PROXY_VERSION", "v1"),
        signing_secret=os.getenv("PROXY_SIGNING_SECRET", DEV_SIGNING_SECRET),
        max_age_seconds=int(os.getenv("PROXY_MAX_AGE_SECONDS", str(24 * 3600))),
    )


@lru_cache(maxsize=1)
def get_proxy_settings() -> ProxySettings:
    """Retorna instância cacheada de ProxySettings."""
    return _load_proxy_from_env()
