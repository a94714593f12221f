"""Agregador de settings do media relay.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)

# Pipeline de mídia
from config.settings.media import (
    MIB,
    BatchSettings,
    ImageHostSettings,
    ProxySettings,
    StorageSettings,
    StoreBackend,
    TaskStoreBackend,
    get_batch_settings,
    get_image_host_settings,
    get_proxy_settings,
    get_storage_settings,
)

__all__ = [
    # Constants
    "MIB",
    # Base
    "BaseSettings",
    # Media
    "BatchSettings",
    "Environment",
    "ImageHostSettings",
    "ProxySettings",
    "StorageSettings",
    "StoreBackend",
    "TaskStoreBackend",
    "get_base_settings",
    "get_batch_settings",
    "get_image_host_settings",
    "get_proxy_settings",
    "get_storage_settings",
]
