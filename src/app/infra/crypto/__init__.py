"""Primitivas criptográficas usadas pelo endereçamento de proxy."""

from .signature import sign_message, verify_signature

__all__ = ["sign_message", "verify_signature"]
