"""Image helpers for order photos sent alongside (or instead of) text."""

from __future__ import annotations

import base64
import io
import re

from PIL import Image, UnidentifiedImageError

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[^;,]+);base64,(?P<data>.+)$", re.DOTALL)


def image_to_base64(image_bytes: bytes) -> str:
    """Encode raw image bytes to a Base64 string."""
    return base64.b64encode(image_bytes).decode("utf-8")


def image_to_bytes(base64_str: str) -> bytes:
    """Decode a Base64 string back to raw image bytes."""
    return base64.b64decode(base64_str)


def detect_mime_type(image_bytes: bytes) -> str:
    """Return the MIME type of an encoded image, e.g. ``image/jpeg``.

    Raises ``ValueError`` when Pillow cannot identify the payload.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            fmt = img.format
    except UnidentifiedImageError as exc:
        raise ValueError("Unrecognised image payload") from exc
    mime = Image.MIME.get(fmt or "")
    if not mime:
        raise ValueError(f"No MIME type known for image format {fmt!r}")
    return mime


def image_to_data_uri(image_bytes: bytes) -> str:
    """Wrap raw image bytes in a ``data:<mime>;base64,...`` URI."""
    mime = detect_mime_type(image_bytes)
    return f"data:{mime};base64,{image_to_base64(image_bytes)}"


def parse_data_uri(uri: str) -> tuple[str, str] | None:
    """Split a base64 data URI into ``(mime_type, base64_data)``.

    Returns None when *uri* is not a base64 data URI.
    """
    match = DATA_URI_PATTERN.match(uri.strip())
    if not match:
        return None
    return match.group("mime"), match.group("data")


def normalize_image_input(image: bytes | str | None) -> str | None:
    """Turn raw bytes or a data URI into a data URI; None stays None.

    Raises ``ValueError`` for strings that are not data URIs and for bytes
    that are not a recognisable image.
    """
    if image is None:
        return None
    if isinstance(image, (bytes, bytearray)):
        return image_to_data_uri(bytes(image))
    if parse_data_uri(image) is None:
        raise ValueError("Image string must be a base64 data URI")
    return image.strip()
