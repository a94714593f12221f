"""Settings do backend de hospedagem de imagens.

Endpoints de login/upload e credenciais do image host.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# 7 dias
DEFAULT_TOKEN_TTL_SECONDS = 7 * 24 * 3600


@dataclass(frozen=True)
class ImageHostSettings:
    """Configurações do image host.

    Attributes:
        upload_url: Endpoint de upload (multipart, campo "file")
        login_url: Endpoint de login (JSON username/password -> token)
        domain: Domínio público usado para resolver caminhos relativos
        username: Usuário do image host
        password: Senha do image host
        token_ttl_seconds: Validade assumida do bearer token
        login_timeout_seconds: Timeout do login
        upload_timeout_seconds: Timeout do upload
        max_retries: Tentativas extras em falhas transitórias
    """

    upload_url: str = ""
    login_url: str = ""
    domain: str = ""
    username: str = ""
    password: str = ""
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    login_timeout_seconds: float = 15.0
    upload_timeout_seconds: float = 30.0
    max_retries: int = 2

    def validate(self) -> list[str]:
        """Valida configurações do image host.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.upload_url:
            errors.append("IMAGE_HOST_UPLOAD_URL não configurado")

        if not self.login_url:
            errors.append("IMAGE_HOST_LOGIN_URL não configurado")

        if not self.domain:
            errors.append("IMAGE_HOST_DOMAIN não configurado")

        if not self.username or not self.password:
            errors.append("IMAGE_HOST_USERNAME/IMAGE_HOST_PASSWORD não configurados")

        if self.token_ttl_seconds <= 0:
            errors.append("IMAGE_HOST_TOKEN_TTL_SECONDS deve ser > 0")

        return errors


def _load_image_host_from_env() -> ImageHostSettings:
    """Carrega ImageHostSettings de variáveis de ambiente."""
    return ImageHostSettings(
        upload_url=os.getenv("IMAGE_HOST_UPLOAD_URL", ""),
        login_url=os.getenv("IMAGE_HOST_LOGIN_URL", ""),
        domain=os.getenv("IMAGE_HOST_DOMAIN", "").rstrip("/"),
        username=os.getenv("IMAGE_HOST_USERNAME", ""),
        password=os.getenv("IMAGE_HOST_PASSWORD", ""),
        token_ttl_seconds=int(
            os.getenv("IMAGE_HOST_TOKEN_TTL_SECONDS", str(DEFAULT_TOKEN_TTL_SECONDS))
        ),
        login_timeout_seconds=float(os.getenv("IMAGE_HOST_LOGIN_TIMEOUT_SECONDS", "15")),
        upload_timeout_seconds=float(os.getenv("IMAGE_HOST_UPLOAD_TIMEOUT_SECONDS", "30")),
        max_retries=int(os.getenv("IMAGE_HOST_MAX_RETRIES", "2")),
    )


@lru_cache(maxsize=1)
def get_image_host_settings() -> ImageHostSettings:
    """Retorna instância cacheada de ImageHostSettings."""
    return _load_image_host_from_env()
