"""Erros de domínio do pipeline de mídia.

Cada classe corresponde a um tipo de falha estável (`kind`) que
atravessa a camada HTTP e os detalhes de lote sem perder semântica.
"""

from __future__ import annotations

from collections.abc import Sequence


class MediaPipelineError(Exception):
    """Base de todos os erros do pipeline."""

    kind = "pipeline_error"


class SizeUnknownError(MediaPipelineError):
    """Tamanho do payload não pôde ser determinado; rota não decidida."""

    kind = "size_unknown"

    def __init__(self, url: str) -> None:
        super().__init__(f"Não foi possível obter o tamanho do arquivo: {url}")
        self.url = url


class UnsupportedLargeFileError(MediaPipelineError):
    """Arquivo acima do limite inline em plataforma sem suporte a proxy."""

    kind = "unsupported_large_file"

    def __init__(self, url: str, size: int, platform: str, reason: str) -> None:
        super().__init__(
            f"Arquivo de {size} bytes não suportado para a plataforma {platform} ({reason})"
        )
        self.url = url
        self.size = size
        self.platform = platform
        self.reason = reason


class UploadFailedError(MediaPipelineError):
    """Image host rejeitou os bytes ou devolveu resposta inutilizável."""

    kind = "upload_failed"


class PassthroughDetectedError(UploadFailedError):
    """Endereço "processado" ainda aponta para a origem."""

    kind = "passthrough_detected"

    def __init__(self, original_url: str, address: str) -> None:
        super().__init__(f"Upload devolveu endereço da origem: {address}")
        self.original_url = original_url
        self.address = address


class ImageHostAuthError(UploadFailedError):
    """Login no image host falhou."""

    kind = "image_host_auth_failed"


class OriginFetchError(MediaPipelineError):
    """Origem recusou ou falhou ao entregar os bytes."""

    kind = "origin_fetch_failed"

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ChunkMissingError(MediaPipelineError):
    """Merge tentado com partes faltando; sessão permanece aberta."""

    kind = "chunk_missing"

    def __init__(self, session_id: str, missing: Sequence[int]) -> None:
        missing_list = sorted(missing)
        super().__init__(f"Partes faltando na sessão {session_id}: {missing_list}")
        self.session_id = session_id
        self.missing = missing_list


class ChunkTooLargeError(MediaPipelineError):
    """Tamanho declarado ou reconstruído acima do teto de upload em partes."""

    kind = "chunk_too_large"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Arquivo de {size} bytes excede o limite de {limit} bytes")
        self.size = size
        self.limit = limit


class ChunkSizeMismatchError(MediaPipelineError):
    """Tamanho reconstruído difere do declarado."""

    kind = "chunk_size_mismatch"

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Tamanho reconstruído {actual} difere do declarado {expected}")
        self.expected = expected
        self.actual = actual


class UploadSessionNotFoundError(MediaPipelineError):
    """Sessão de upload inexistente ou expirada."""

    kind = "upload_session_not_found"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Sessão de upload não encontrada: {session_id}")
        self.session_id = session_id


class ProxyMintFailedError(MediaPipelineError):
    """Falha ao codificar/assinar o endereço de proxy."""

    kind = "proxy_mint_failed"


class ProxyTokenError(MediaPipelineError):
    """Token de proxy rejeitado na resolução.

    reason: malformed | tampered | expired
    """

    kind = "proxy_token_invalid"

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or f"Token de proxy inválido: {reason}")
        self.reason = reason


class TaskNotFoundError(MediaPipelineError):
    """Task inexistente ou expirada."""

    kind = "task_not_found"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task não existe ou expirou: {task_id}")
        self.task_id = task_id


class RequiredMediaError(MediaPipelineError):
    """Item obrigatório (capa/imagem principal) falhou; fase inteira falha."""

    kind = "required_media_failed"

    def __init__(self, index: int, url: str, cause: Exception) -> None:
        super().__init__(f"Mídia obrigatória {index} falhou: {cause}")
        self.index = index
        self.url = url
        self.cause = cause


class RequiredMediaTimeoutError(MediaPipelineError):
    """Prazo da fase obrigatória esgotado; nenhum resultado parcial."""

    kind = "required_media_timeout"

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Processamento de mídia obrigatória excedeu {timeout_seconds:.0f}s")
        self.timeout_seconds = timeout_seconds
