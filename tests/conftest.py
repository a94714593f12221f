"""Configuração do pytest para o projeto media_relay."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ e tests/ ao PYTHONPATH para permitir imports absolutos
root_path = Path(__file__).parent.parent
for path in (root_path / "src", root_path / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config.settings import BatchSettings, ProxySettings, StorageSettings  # noqa: E402
from config.settings.media.storage import MIB  # noqa: E402


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(
        inline_upload_max_bytes=19 * MIB,
        oversized_max_bytes=110 * MIB,
        chunk_upload_max_bytes=100 * MIB,
        upload_session_ttl_seconds=3600,
    )


@pytest.fixture
def proxy_settings() -> ProxySettings:
    return ProxySettings(
        base_url="https://relay.example.com",
        signing_secret="test-secret",
        max_age_seconds=3600,
    )


@pytest.fixture
def batch_settings() -> BatchSettings:
    return BatchSettings(batch_interval_ms=0)
