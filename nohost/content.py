"""MIME inference and data URL encoding utilities."""

from __future__ import annotations

import base64
import mimetypes
import posixpath
from typing import Optional, Union

from filetype import guess

DEFAULT_MIME = "application/octet-stream"

# Types whose mimetypes answer depends on the platform registry.
WEB_MIME_TYPES = {
    ".css": "text/css",
    ".htm": "text/html",
    ".html": "text/html",
    ".ico": "image/x-icon",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
}

IMAGE_EXTENSIONS = {".gif", ".png", ".jpg", ".jpeg", ".bmp", ".webp", ".svg", ".ico"}


def mime_from_ext(ext: str) -> str:
    """Map a file extension (with or without the dot) to a MIME type."""
    ext = ext.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    if not ext:
        return DEFAULT_MIME
    if ext in WEB_MIME_TYPES:
        return WEB_MIME_TYPES[ext]
    mime, _ = mimetypes.guess_type("file" + ext, strict=False)
    return mime or DEFAULT_MIME


def sniff_mime(data: bytes) -> Optional[str]:
    """Detect the MIME type from the payload signature using filetype."""
    kind = guess(data)
    if kind:
        return kind.mime
    return None


def guess_mime(path: str, data: Optional[bytes] = None) -> str:
    """Infer a MIME type from the path extension, sniffing ``data`` as a fallback."""
    mime = mime_from_ext(posixpath.splitext(path)[1])
    if mime == DEFAULT_MIME and data:
        return sniff_mime(data) or DEFAULT_MIME
    return mime


def is_image_path(path: str) -> bool:
    return posixpath.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def to_data_url(data: Union[bytes, str], mime: str) -> str:
    """Encode a payload as a base64 ``data:`` URL."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"
