"""Protocolos e contratos do core da aplicação."""

from .media_ports import (
    CredentialProviderProtocol,
    ImageHostProtocol,
    OriginFetcherProtocol,
)
from .task_store import AsyncTaskStoreProtocol
from .upload_session_store import AsyncUploadSessionStoreProtocol

__all__ = [
    "AsyncTaskStoreProtocol",
    "AsyncUploadSessionStoreProtocol",
    "CredentialProviderProtocol",
    "ImageHostProtocol",
    "OriginFetcherProtocol",
]
