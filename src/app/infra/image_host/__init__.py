"""Adaptador do image host (login + upload multipart)."""

from app.infra.image_host.client import ImageHostClient
from app.infra.image_host.credentials import ImageHostCredentialProvider
from app.infra.image_host.responses import decode_upload_response

__all__ = ["ImageHostClient", "ImageHostCredentialProvider", "decode_upload_response"]
