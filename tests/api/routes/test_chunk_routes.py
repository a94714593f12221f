"""Testes HTTP de /upload-chunk e /merge-chunks."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from app.app import create_app
from app.bootstrap.dependencies import get_chunked_upload_service
from app.infra.stores import MemoryUploadSessionStore
from app.observability import CORRELATION_HEADER
from app.services.chunked_upload import ChunkedUploadService
from app.services.proxy_address import ProxyAddressCodec
from app.services.storage_router import StorageRouter
from config.settings import ProxySettings, StorageSettings
from fakes.fake_media_ports import FakeImageHost, FakeOrigin


@dataclass
class ChunkApi:
    client: TestClient
    image_host: FakeImageHost

    def put(self, session_id: str, index: int, data: bytes, **form: str):
        fields = {"chunkIndex": str(index), "sessionId": session_id, **form}
        return self.client.post(
            "/upload-chunk",
            data=fields,
            files={"file": ("blob", data, "application/octet-stream")},
        )


@pytest.fixture
def api(storage_settings: StorageSettings, proxy_settings: ProxySettings) -> ChunkApi:
    image_host = FakeImageHost()
    router = StorageRouter(
        FakeOrigin(), image_host, ProxyAddressCodec(proxy_settings), storage_settings
    )
    service = ChunkedUploadService(MemoryUploadSessionStore(), router, storage_settings)
    app = create_app()
    app.dependency_overrides[get_chunked_upload_service] = lambda: service
    return ChunkApi(client=TestClient(app), image_host=image_host)


def test_out_of_order_upload_and_merge(api: ChunkApi) -> None:
    meta = {"totalChunks": "3", "originalFileName": "clip.mp4", "originalFileType": "video/mp4"}

    first = api.put("sess-1", 2, b"cc", **meta)
    api.put("sess-1", 0, b"aa", **meta)
    last = api.put("sess-1", 1, b"bb", **meta)

    assert first.status_code == 200
    assert first.json() == {
        "success": True,
        "chunkIndex": 2,
        "sessionId": "sess-1",
        "isComplete": False,
        "uploadedChunks": 1,
        "totalChunks": 3,
    }
    assert last.json()["isComplete"] is True

    merged = api.client.post(
        "/merge-chunks",
        json={"sessionId": "sess-1", "fileName": "clip.mp4", "totalChunks": 3, "fileSize": 6},
    )

    assert merged.status_code == 200
    result = merged.json()["result"]
    assert result["src"] == "https://img.example.com/file/1_clip.mp4"
    assert result["size"] == 6
    assert result["type"] == "video/mp4"
    assert result["isChunkFile"] is True
    assert result["decision"] == "direct"
    assert api.image_host.uploads == [("clip.mp4", 6, "video/mp4")]


def test_merge_with_missing_chunks_lists_indices(api: ChunkApi) -> None:
    api.put("sess-2", 0, b"aa")
    api.put("sess-2", 2, b"cc")

    response = api.client.post(
        "/merge-chunks", json={"sessionId": "sess-2", "fileName": "a.jpg", "totalChunks": 3}
    )

    assert response.status_code == 400
    assert response.json()["missing"] == [1]

    api.put("sess-2", 1, b"bb")
    retry = api.client.post(
        "/merge-chunks", json={"sessionId": "sess-2", "fileName": "a.jpg", "totalChunks": 3}
    )
    assert retry.status_code == 200


def test_merge_unknown_session(api: ChunkApi) -> None:
    response = api.client.post(
        "/merge-chunks", json={"sessionId": "ghost", "fileName": "a.jpg", "totalChunks": 1}
    )

    assert response.status_code == 404
    assert "error" in response.json()


def test_declared_size_above_ceiling(api: ChunkApi, storage_settings: StorageSettings) -> None:
    too_big = str(storage_settings.chunk_upload_max_bytes + 1)

    response = api.put("sess-3", 0, b"aa", originalFileSize=too_big)

    assert response.status_code == 413


def test_invalid_chunk_index(api: ChunkApi) -> None:
    response = api.put("sess-4", 0, b"aa")
    bad = api.client.post(
        "/upload-chunk",
        data={"chunkIndex": "abc", "sessionId": "sess-4"},
        files={"file": ("blob", b"x", "application/octet-stream")},
    )

    assert response.status_code == 200
    assert bad.status_code == 400
    assert "chunkIndex" in bad.json()["error"]


def test_missing_form_field_is_400(api: ChunkApi) -> None:
    response = api.client.post(
        "/upload-chunk",
        data={"chunkIndex": "0"},
        files={"file": ("blob", b"x", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert isinstance(response.json()["error"], str)


def test_merge_body_validation_is_400(api: ChunkApi) -> None:
    response = api.client.post("/merge-chunks", json={"sessionId": "s", "fileName": "a.jpg"})

    assert response.status_code == 400
    assert "totalChunks" in response.json()["error"]


def test_correlation_id_echoed(api: ChunkApi) -> None:
    response = api.client.post(
        "/merge-chunks",
        json={"sessionId": "ghost", "fileName": "a.jpg", "totalChunks": 1},
        headers={CORRELATION_HEADER: "req-123"},
    )

    assert response.headers[CORRELATION_HEADER] == "req-123"
