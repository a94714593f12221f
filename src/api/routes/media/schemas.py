"""Contratos JSON das rotas de mídia."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.media import MediaReference, MediaRole


class MergeChunksRequest(BaseModel):
    """Corpo de POST /merge-chunks."""

    model_config = ConfigDict(extra="ignore")

    session_id: str = Field(alias="sessionId", min_length=1)
    file_name: str = Field(alias="fileName", min_length=1)
    total_chunks: int = Field(alias="totalChunks", gt=0)
    file_size: int | None = Field(default=None, alias="fileSize", ge=0)
    file_type: str | None = Field(default=None, alias="fileType")


class MediaItemIn(BaseModel):
    """Item de mídia recebido do parser."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    url: str = Field(min_length=1)
    role: Literal["image", "video", "cover"] = "image"
    is_live_photo_video: bool = Field(default=False, alias="isLivePhotoVideo")
    backup_urls: list[str] = Field(default_factory=list, alias="backupUrls")

    def to_reference(self) -> MediaReference:
        return MediaReference(
            url=self.url,
            role=MediaRole(self.role),
            is_live_photo_video=self.is_live_photo_video,
            backup_urls=tuple(self.backup_urls),
        )


class ProcessMediaRequest(BaseModel):
    """Corpo de POST /process-media.

    `required` passa pela fase obrigatória (capa, imagem principal) antes
    do backlog; falha ali aborta a requisição inteira.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    items: list[MediaItemIn] = Field(default_factory=list)
    required: list[MediaItemIn] = Field(default_factory=list)
    external_linkage: dict[str, Any] | None = Field(default=None, alias="externalLinkage")
