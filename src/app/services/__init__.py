"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.batch_scheduler import BatchResult, BatchScheduler
from app.services.chunked_upload import ChunkedUploadService, ChunkMeta, ChunkReceipt
from app.services.proxy_address import ProxyAddress, ProxyAddressCodec
from app.services.proxy_resolver import ProxyResolver, ResolvedStream
from app.services.required_media import process_required_media
from app.services.storage_router import StorageRouter

__all__ = [
    "BatchResult",
    "BatchScheduler",
    "ChunkMeta",
    "ChunkReceipt",
    "ChunkedUploadService",
    "ProxyAddress",
    "ProxyAddressCodec",
    "ProxyResolver",
    "ResolvedStream",
    "StorageRouter",
    "process_required_media",
]
