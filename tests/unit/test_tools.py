"""Unit tests for MCP tools.

Tests for the remove_background, remove_background_base64,
check_smart_removal and check_transparency tools.
"""

from __future__ import annotations

import base64
import importlib
import io
import tempfile
import threading
from collections.abc import Generator
from pathlib import Path

import pytest
from PIL import Image

from MCP_smart_background.constants import METHOD_SMART, METHOD_UNCHANGED
from MCP_smart_background.services.codec import decode_rgba
from MCP_smart_background.services.raster import RasterImage
from MCP_smart_background.tools.remove_background import (
    RemoveBackgroundBase64Output,
    RemoveBackgroundOutput,
    SuitabilityOutput,
    TransparencyOutput,
    check_smart_removal,
    check_transparency,
    remove_background,
    remove_background_base64,
)

# The tools package re-exports the function under the module name
remove_background_tools = importlib.import_module(
    "MCP_smart_background.tools.remove_background"
)


def _logo_image() -> Image.Image:
    # 100x100 white background with a red square in the center
    img = Image.new("RGB", (100, 100), color=(255, 255, 255))
    for x in range(25, 75):
        for y in range(25, 75):
            img.putpixel((x, y), (255, 0, 0))
    return img


@pytest.fixture
def sample_image_path() -> Generator[str, None, None]:
    """Create a temporary test image with white background and red center."""
    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        _logo_image().save(f.name)
        yield f.name
    Path(f.name).unlink(missing_ok=True)


@pytest.fixture
def striped_image_path() -> Generator[str, None, None]:
    """Create a temporary test image with a different color on every side."""
    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        img = Image.new("RGB", (40, 40), color=(255, 255, 0))
        img.paste((0, 255, 0), (0, 0, 5, 40))
        img.paste((255, 0, 0), (0, 0, 40, 5))
        img.paste((0, 0, 255), (0, 35, 40, 40))
        img.save(f.name)
        yield f.name
    Path(f.name).unlink(missing_ok=True)


@pytest.fixture
def sample_image_base64() -> str:
    """Base64 encoded PNG of the sample logo."""
    buffer = io.BytesIO()
    _logo_image().save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class TestRemoveBackgroundTool:
    """Tests for remove_background tool."""

    @pytest.mark.asyncio
    async def test_remove_background_requires_image_path(self) -> None:
        """TC-T01: Verify error when image_path is empty string."""
        result = await remove_background(image_path="")
        assert isinstance(result, RemoveBackgroundOutput)
        assert result.success is False
        assert result.error is not None
        assert "not found" in result.error.lower()

    @pytest.mark.asyncio
    async def test_remove_background_validates_tolerance(self) -> None:
        """TC-T02: Verify error for out-of-range tolerance."""
        result = await remove_background(image_path="/tmp/test.png", tolerance=250)
        assert isinstance(result, RemoveBackgroundOutput)
        assert result.success is False
        assert result.error is not None
        assert "invalid request" in result.error.lower()
        assert "tolerance" in result.error

    @pytest.mark.asyncio
    async def test_remove_background_handles_missing_file(self) -> None:
        """TC-T03: Verify error for missing file."""
        result = await remove_background(
            image_path="/nonexistent/path/to/image.png",
        )
        assert isinstance(result, RemoveBackgroundOutput)
        assert result.success is False
        assert result.error is not None
        assert "not found" in result.error.lower()

    @pytest.mark.asyncio
    async def test_remove_background_unreadable_file(self) -> None:
        """Verify a file that is not an image is reported, not raised."""
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            f.write(b"not an image")

        result = await remove_background(image_path=f.name)

        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Could not read image")
        Path(f.name).unlink(missing_ok=True)

    @pytest.mark.asyncio
    async def test_remove_background_success_with_path(self, sample_image_path: str) -> None:
        """TC-T05: Verify success with file path input."""
        result = await remove_background(image_path=sample_image_path)

        assert isinstance(result, RemoveBackgroundOutput)
        assert result.success is True
        assert result.error is None
        assert result.input_path == sample_image_path
        assert result.output_path is not None
        assert Path(result.output_path).exists()
        assert result.file_size_bytes == Path(result.output_path).stat().st_size
        # Cleanup
        Path(result.output_path).unlink(missing_ok=True)

    @pytest.mark.asyncio
    async def test_remove_background_reports_detection(self, sample_image_path: str) -> None:
        """TC-T07: Verify detection details are populated."""
        result = await remove_background(image_path=sample_image_path)

        assert result.success is True
        assert result.method_used == METHOD_SMART
        assert result.width == 100
        assert result.height == 100
        assert result.resampled is False
        assert result.background_colors == ["#ffffff"]
        assert result.tolerance_used == 35
        assert result.pixels_removed == 100 * 100 - 50 * 50
        # Cleanup
        if result.output_path:
            Path(result.output_path).unlink(missing_ok=True)

    @pytest.mark.asyncio
    async def test_remove_background_explicit_output_path(self, sample_image_path: str) -> None:
        """Verify output is written where requested."""
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = str(Path(tmpdir) / "out" / "logo.png")
            result = await remove_background(
                image_path=sample_image_path, output_path=output_path
            )

            assert result.success is True
            assert result.output_path == str(Path(output_path).absolute())
            with Image.open(output_path) as image:
                assert image.getpixel((0, 0))[3] == 0
                assert image.getpixel((50, 50))[3] == 255


class TestRemoveBackgroundBase64Tool:
    """Tests for remove_background_base64 tool."""

    @pytest.mark.asyncio
    async def test_remove_background_base64_success(self, sample_image_base64: str) -> None:
        """Verify a base64 image comes back as a transparent PNG."""
        result = await remove_background_base64(image_base64=sample_image_base64)

        assert isinstance(result, RemoveBackgroundBase64Output)
        assert result.success is True
        assert result.image_base64 is not None
        with Image.open(io.BytesIO(base64.b64decode(result.image_base64))) as image:
            assert image.format == "PNG"
            assert image.size == (100, 100)
            assert image.getpixel((0, 0))[3] == 0

    @pytest.mark.asyncio
    async def test_remove_background_base64_unchanged(self) -> None:
        """Verify a too-small image is echoed back unchanged."""
        buffer = io.BytesIO()
        Image.new("RGB", (1, 1), color=(0, 0, 0)).save(buffer, format="PNG")
        image_base64 = base64.b64encode(buffer.getvalue()).decode("ascii")

        result = await remove_background_base64(image_base64=image_base64)

        assert result.success is True
        assert result.method_used == METHOD_UNCHANGED
        assert result.image_base64 == image_base64

    @pytest.mark.asyncio
    async def test_remove_background_base64_invalid_input(self) -> None:
        """Verify invalid base64 is reported in the error field."""
        result = await remove_background_base64(image_base64="%%% not base64 %%%")

        assert result.success is False
        assert result.image_base64 is None
        assert result.error is not None
        assert result.error.startswith("Could not read image")

    @pytest.mark.asyncio
    async def test_remove_background_base64_invalid_option(
        self, sample_image_base64: str
    ) -> None:
        """Verify an invalid option is reported with its name."""
        result = await remove_background_base64(
            image_base64=sample_image_base64, sample_depth=0
        )

        assert result.success is False
        assert result.error is not None
        assert "sample_depth" in result.error


class TestCheckSmartRemovalTool:
    """Tests for check_smart_removal tool."""

    @pytest.mark.asyncio
    async def test_check_smart_removal_suitable(self, sample_image_path: str) -> None:
        """Verify a solid border is suitable."""
        result = await check_smart_removal(image_path=sample_image_path)

        assert isinstance(result, SuitabilityOutput)
        assert result.success is True
        assert result.suitable is True
        assert result.dominant_share == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_check_smart_removal_not_suitable(self, striped_image_path: str) -> None:
        """Verify four differently colored sides are not suitable."""
        result = await check_smart_removal(image_path=striped_image_path)

        assert result.success is True
        assert result.suitable is False
        assert result.dominant_share == pytest.approx(200 / 700)

    @pytest.mark.asyncio
    async def test_check_smart_removal_missing_file(self) -> None:
        """Verify error for missing file."""
        result = await check_smart_removal(image_path="/nonexistent/image.png")

        assert result.success is False
        assert result.error is not None
        assert "not found" in result.error.lower()


    @pytest.mark.asyncio
    async def test_check_smart_removal_not_an_image(self) -> None:
        """Verify decode failures inside the worker thread are reported."""
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            f.write(b"not an image")

        result = await check_smart_removal(image_path=f.name)

        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Could not read image")
        Path(f.name).unlink(missing_ok=True)

    @pytest.mark.asyncio
    async def test_check_smart_removal_decodes_off_the_event_loop(
        self, sample_image_path: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Verify the image is decoded in a worker thread."""
        loop_thread = threading.get_ident()
        decode_threads: list[int] = []

        def recording_decode(image_bytes: bytes) -> RasterImage:
            decode_threads.append(threading.get_ident())
            return decode_rgba(image_bytes)

        monkeypatch.setattr(remove_background_tools, "decode_rgba", recording_decode)

        result = await check_smart_removal(image_path=sample_image_path)

        assert result.success is True
        assert decode_threads
        assert loop_thread not in decode_threads


class TestCheckTransparencyTool:
    """Tests for check_transparency tool."""

    def test_check_transparency_opaque(self, sample_image_path: str) -> None:
        """Verify an RGB image has no transparency."""
        result = check_transparency(image_path=sample_image_path)

        assert isinstance(result, TransparencyOutput)
        assert result.success is True
        assert result.has_transparency is False

    @pytest.mark.asyncio
    async def test_check_transparency_after_removal(self, sample_image_path: str) -> None:
        """Verify the removal output is reported as transparent."""
        removal = await remove_background(image_path=sample_image_path)
        assert removal.output_path is not None

        result = check_transparency(image_path=removal.output_path)

        assert result.has_transparency is True
        # Cleanup
        Path(removal.output_path).unlink(missing_ok=True)

    def test_check_transparency_missing_file(self) -> None:
        """Verify error for missing file."""
        result = check_transparency(image_path="/nonexistent/image.png")

        assert result.success is False
        assert result.error is not None
        assert "not found" in result.error.lower()

    def test_check_transparency_not_an_image(self) -> None:
        """Verify a file that is not an image is reported as a failure."""
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            f.write(b"meeting notes, not an image")

        result = check_transparency(image_path=f.name)

        assert result.success is False
        assert result.has_transparency is False
        assert result.error is not None
        assert result.error.startswith("Could not read image")
        Path(f.name).unlink(missing_ok=True)
