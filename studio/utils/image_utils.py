"""Utility helpers for turning uploaded images into proxy-friendly inputs."""

from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import Any, Optional, Tuple

from PIL import Image

_FORMAT_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


def bytes_to_data_url(data: bytes, mime_type: str) -> str:
    """Wrap raw image bytes in a base64 data URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def to_data_url(image: Any, image_format: str = "PNG") -> str:
    """Encode a PIL image, a file path or raw bytes as a data URL.

    Strings that already look like URLs or data URLs are passed through, so
    callers can hand in whatever the UI gave them.
    """
    if isinstance(image, str):
        if image.startswith(("data:", "http://", "https://")):
            return image
        image = Path(image)

    if isinstance(image, Path):
        with Image.open(image) as opened:
            fmt = (opened.format or image_format).upper()
            return bytes_to_data_url(image.read_bytes(), _FORMAT_MIME.get(fmt, "image/png"))

    if isinstance(image, (bytes, bytearray)):
        with Image.open(io.BytesIO(image)) as opened:
            fmt = (opened.format or image_format).upper()
        return bytes_to_data_url(bytes(image), _FORMAT_MIME.get(fmt, "image/png"))

    if isinstance(image, Image.Image):
        fmt = image_format.upper()
        buffer = io.BytesIO()
        to_save = image.convert("RGB") if fmt == "JPEG" and image.mode not in ("RGB", "L") else image
        to_save.save(buffer, format=fmt)
        return bytes_to_data_url(buffer.getvalue(), _FORMAT_MIME.get(fmt, "image/png"))

    raise TypeError(f"Unsupported image input type: {type(image).__name__}")


def image_dimensions(image: Any) -> Optional[Tuple[int, int]]:
    """Return ``(width, height)`` for a PIL image or path, or None when unknown."""
    if image is None:
        return None
    if isinstance(image, Image.Image):
        return image.size
    if isinstance(image, (str, Path)) and not str(image).startswith(("data:", "http://", "https://")):
        with Image.open(image) as opened:
            return opened.size
    return None
