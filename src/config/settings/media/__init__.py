"""Agregador de settings do pipeline de mídia.

Re-exporta settings de armazenamento, image host, proxy e lotes.
"""

from __future__ import annotations

from config.settings.media.batch import (
    BatchSettings,
    TaskStoreBackend,
    get_batch_settings,
)
from config.settings.media.image_host import (
    ImageHostSettings,
    get_image_host_settings,
)
from config.settings.media.proxy import (
    ProxySettings,
    get_proxy_settings,
)
from config.settings.media.storage import (
    MIB,
    StorageSettings,
    StoreBackend,
    get_storage_settings,
)

__all__ = [
    "MIB",
    "BatchSettings",
    "ImageHostSettings",
    "ProxySettings",
    "StorageSettings",
    "StoreBackend",
    "TaskStoreBackend",
    "get_batch_settings",
    "get_image_host_settings",
    "get_proxy_settings",
    "get_storage_settings",
]
