"""Inferência de tipo de conteúdo e extensão.

Ordem de confiança: assinatura dos bytes > Content-Type da origem
> padrões da URL. CDNs de origem frequentemente mentem no header
ou omitem extensão no path.
"""

from __future__ import annotations

from urllib.parse import urlparse

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPE_BY_EXTENSION: dict[str, str] = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",
    ".flv": "video/x-flv",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".bmp": "image/bmp",
}

EXTENSION_BY_CONTENT_TYPE: dict[str, str] = {
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/quicktime": ".mov",
    "video/x-matroska": ".mkv",
    "video/x-flv": ".flv",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/bmp": ".bmp",
}

# Sufixos de formato do CDN do Xiaohongshu (ex: "...!nd_dft_wgth_jpg_3")
_XHS_FORMAT_MARKERS: tuple[tuple[str, str], ...] = (
    ("!nd_dft_wgth_webp", ".webp"),
    ("!nd_dft_wgth_png", ".png"),
    ("!nd_dft_wgth_gif", ".gif"),
    ("!nd_dft_wgth_jpg", ".jpg"),
    ("webp_", ".webp"),
    ("png_", ".png"),
    ("gif_", ".gif"),
    ("jpeg_", ".jpg"),
    ("jpg_", ".jpg"),
)


def sniff_content_type(head: bytes) -> str | None:
    """Detecta tipo pelos primeiros bytes."""
    if head.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if head[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if head[:4] == b"\x1a\x45\xdf\xa3":
        return "video/webm"
    if head[4:8] == b"ftyp":
        brand = head[8:12]
        if brand in (b"heic", b"heix", b"mif1", b"msf1"):
            return "image/heic"
        if brand == b"qt  ":
            return "video/quicktime"
        return "video/mp4"
    return None


def extension_from_url(url: str) -> str | None:
    """Extensão pelo path da URL ou por marcadores conhecidos."""
    path = urlparse(url).path
    last_segment = path.rsplit("/", 1)[-1]
    if "." in last_segment:
        ext = "." + last_segment.rsplit(".", 1)[-1].lower()
        if ext in CONTENT_TYPE_BY_EXTENSION:
            return ext

    lower = url.lower()
    if "xhscdn.com" in lower or "sns-webpic" in lower:
        for marker, ext in _XHS_FORMAT_MARKERS:
            if marker in lower:
                return ext
        return ".jpg"
    if "video" in lower or "mp4" in lower or "/play/" in lower:
        return ".mp4"
    return None


def normalize_content_type(header_value: str | None) -> str | None:
    if not header_value:
        return None
    value = header_value.split(";", 1)[0].strip().lower()
    if not value or value == DEFAULT_CONTENT_TYPE:
        return None
    return value


def resolve_content_type(url: str, header_value: str | None, head: bytes = b"") -> str:
    """Tipo final combinando bytes, header e URL."""
    sniffed = sniff_content_type(head) if head else None
    if sniffed:
        return sniffed
    declared = normalize_content_type(header_value)
    if declared and (declared.startswith("image/") or declared.startswith("video/")):
        return declared
    ext = extension_from_url(url)
    if ext:
        return CONTENT_TYPE_BY_EXTENSION[ext]
    return declared or DEFAULT_CONTENT_TYPE


def extension_for(content_type: str, default: str = ".bin") -> str:
    return EXTENSION_BY_CONTENT_TYPE.get(content_type, default)
