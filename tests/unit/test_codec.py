"""Tests for the Pillow codec adapter and the raster type."""

from __future__ import annotations

import base64
import binascii
import io

import numpy as np
import pytest
from PIL import Image, UnidentifiedImageError

from MCP_smart_background.services.codec import (
    decode_base64,
    decode_rgba,
    encode_base64,
    encode_png,
)
from MCP_smart_background.services.raster import RasterImage


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class TestBase64:
    """Tests for base64 helpers."""

    def test_decode_base64_plain(self) -> None:
        """Verify plain base64 is decoded."""
        assert decode_base64(base64.b64encode(b"abc").decode()) == b"abc"

    def test_decode_base64_data_url(self) -> None:
        """Verify a data URL prefix is stripped."""
        payload = "data:image/png;base64," + base64.b64encode(b"abc").decode()
        assert decode_base64(payload) == b"abc"

    def test_decode_base64_wrapped_lines(self) -> None:
        """Verify base64 wrapped at 76 columns decodes like the unwrapped form."""
        data = bytes(range(256)) * 2
        wrapped = base64.encodebytes(data).decode("ascii")
        assert "\n" in wrapped.strip()
        assert decode_base64(wrapped) == data

    def test_decode_base64_wrapped_data_url(self) -> None:
        """Verify a data URL with a wrapped payload is decoded."""
        data = bytes(range(256))
        payload = "data:image/png;base64,\n" + base64.encodebytes(data).decode("ascii")
        assert decode_base64(payload) == data

    def test_decode_base64_invalid(self) -> None:
        """Verify invalid base64 raises binascii.Error."""
        with pytest.raises(binascii.Error):
            decode_base64("not base64 at all!")

    def test_encode_base64(self) -> None:
        """Verify bytes are encoded to an ASCII string."""
        assert encode_base64(b"abc") == "YWJj"


class TestDecodeRgba:
    """Tests for decode_rgba and encode_png."""

    def test_decode_adds_opaque_alpha(self) -> None:
        """Verify RGB images gain a fully opaque alpha channel."""
        raster = decode_rgba(_png_bytes(Image.new("RGB", (4, 3), (1, 2, 3))))
        assert raster.size == (4, 3)
        assert raster.pixels.shape == (3, 4, 4)
        assert (raster.alpha == 255).all()
        assert raster.rgb[0, 0].tolist() == [1, 2, 3]

    def test_decode_jpeg(self) -> None:
        """Verify non-PNG formats are decoded too."""
        buffer = io.BytesIO()
        Image.new("RGB", (8, 8), (0, 0, 0)).save(buffer, format="JPEG")
        assert decode_rgba(buffer.getvalue()).size == (8, 8)

    def test_decode_invalid_bytes(self) -> None:
        """Verify undecodable bytes raise Pillow's error unchanged."""
        with pytest.raises(UnidentifiedImageError):
            decode_rgba(b"definitely not an image")

    def test_encode_png_preserves_pixels(self) -> None:
        """Verify encoded PNG decodes to the same RGBA pixels."""
        pixels = np.arange(5 * 7 * 4, dtype=np.uint8).reshape(5, 7, 4)
        raster = RasterImage(pixels.copy())

        encoded = encode_png(raster)

        assert encoded.startswith(b"\x89PNG")
        assert (decode_rgba(encoded).pixels == pixels).all()


class TestRasterImage:
    """Tests for RasterImage."""

    def test_rejects_non_rgba_buffer(self) -> None:
        """Verify the buffer must have four channels."""
        with pytest.raises(ValueError):
            RasterImage(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_alpha_is_a_view(self) -> None:
        """Verify writing through alpha updates the pixel buffer."""
        raster = RasterImage(np.full((2, 2, 4), 255, dtype=np.uint8))
        raster.alpha[0, 0] = 0
        assert raster.pixels[0, 0, 3] == 0

    def test_copy_is_independent(self) -> None:
        """Verify copies do not share the buffer."""
        raster = RasterImage(np.full((2, 2, 4), 255, dtype=np.uint8))
        clone = raster.copy()
        clone.alpha[:] = 0
        assert (raster.alpha == 255).all()
