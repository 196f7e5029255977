"""Image codec adapter backed by Pillow.

Turns compressed image bytes into an RGBA raster and back into PNG bytes.
Decode failures (``PIL.UnidentifiedImageError``, ``binascii.Error``) are not
caught here; callers see them unchanged.
"""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image

from MCP_smart_background.constants import OUTPUT_FORMAT, PNG_COMPRESS_LEVEL
from MCP_smart_background.services.raster import RasterImage

logger = logging.getLogger(__name__)

_DATA_URL_MARKER = ";base64,"


def decode_base64(image_base64: str) -> bytes:
    """Decode a base64 image, accepting an optional ``data:`` URL prefix."""
    # Wrapped (MIME style) base64 carries line breaks anywhere in the payload
    payload = "".join(image_base64.split())
    if payload.startswith("data:") and _DATA_URL_MARKER in payload:
        payload = payload.split(_DATA_URL_MARKER, 1)[1]
    return base64.b64decode(payload, validate=True)


def encode_base64(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("ascii")


def decode_rgba(image_bytes: bytes) -> RasterImage:
    """Decode compressed image bytes into an RGBA raster."""
    with Image.open(io.BytesIO(image_bytes)) as image:
        logger.debug(f"Decoding image: {image.size}, mode={image.mode}")
        image.load()
        return RasterImage.from_image(image)


def encode_png(raster: RasterImage) -> bytes:
    """Encode an RGBA raster as PNG bytes."""
    output_buffer = io.BytesIO()
    raster.to_image().save(
        output_buffer, format=OUTPUT_FORMAT, compress_level=PNG_COMPRESS_LEVEL
    )
    return output_buffer.getvalue()
