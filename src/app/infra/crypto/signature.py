"""Assinatura HMAC-SHA256 de endereços de proxy."""

from __future__ import annotations

import hashlib
import hmac


def sign_message(message: str, secret: str) -> str:
    """Assina `message` e retorna hexdigest.

    Args:
        message: Conteúdo canônico a assinar
        secret: Segredo compartilhado do proxy

    Returns:
        Assinatura em hexadecimal
    """
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(message: str, signature: str, secret: str) -> bool:
    """Compara assinatura em tempo constante."""
    if not signature:
        return False
    return hmac.compare_digest(sign_message(message, secret), signature)
