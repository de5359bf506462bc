"""Content-type detection from image bytes. File names and headers are never trusted."""
from __future__ import annotations

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

# Multi-picture JPEGs from cameras are still JPEG files
_FORMAT_ALIASES = {"MPO": "JPEG"}

ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def sniff_mime(data: bytes) -> Optional[str]:
    """Return the MIME type Pillow detects from the image header, or None."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None
    if not fmt:
        return None
    return Image.MIME.get(_FORMAT_ALIASES.get(fmt, fmt))


def extension_for(mime: str) -> Optional[str]:
    """Extension for an accepted MIME type, None when the type is not allowed."""
    return ALLOWED_MIME_TYPES.get(mime)
