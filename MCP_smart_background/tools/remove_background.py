"""Smart background removal tools for MCP server.

This module provides MCP tools for removing solid and gradient backgrounds
from images. Images are passed either by file path or as base64 strings.
Tools never raise; failures are reported in the ``error`` field.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field

from MCP_smart_background.constants import (
    DEFAULT_EDGE_SMOOTHING,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SAMPLE_DEPTH,
    DEFAULT_TOLERANCE,
    MIN_DOMINANT_SHARE,
)
from MCP_smart_background.exceptions import GenerationError, InvalidRequestError
from MCP_smart_background.services.background_remover import (
    SmartRemovalReport,
    dominant_edge_share,
    raster_has_transparency,
    remove_background_from_bytes,
    remove_background_from_file,
)
from MCP_smart_background.services.codec import (
    decode_base64,
    decode_rgba,
    encode_base64,
)
from MCP_smart_background.services.options import SmartRemovalOptions


def _hex_color(rgb: tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


class RemovalDetails(BaseModel):
    """Details shared by the removal tool outputs."""

    method_used: str = Field(
        default="",
        description="'smart' when the background was removed, 'unchanged' when the image was returned as is",
    )
    width: int | None = Field(default=None, description="Image width in pixels")
    height: int | None = Field(default=None, description="Image height in pixels")
    resampled: bool = Field(
        default=False,
        description="Whether the image was processed at reduced resolution",
    )
    background_colors: list[str] = Field(
        default_factory=list, description="Detected background colors as hex strings"
    )
    tolerance_used: float | None = Field(
        default=None, description="Effective tolerance after brightness adaptation"
    )
    pixels_removed: int = Field(
        default=0, description="Pixels made transparent by the flood fill"
    )
    error: str | None = Field(
        default=None, description="Error message if background removal failed"
    )

    @staticmethod
    def from_report(report: SmartRemovalReport) -> dict:
        return {
            "method_used": report.method,
            "width": report.width,
            "height": report.height,
            "resampled": report.resampled,
            "background_colors": [_hex_color(c) for c in report.background_colors],
            "tolerance_used": report.tolerance,
            "pixels_removed": report.pixels_removed,
        }


class RemoveBackgroundOutput(RemovalDetails):
    """Output schema for remove_background tool."""

    success: bool = Field(description="Whether the background removal was successful")
    input_path: str = Field(description="Path to the input image file")
    output_path: str | None = Field(
        default=None, description="Path to the output image file"
    )
    file_size_bytes: int | None = Field(
        default=None, description="Size of the output image in bytes"
    )


class RemoveBackgroundBase64Output(RemovalDetails):
    """Output schema for remove_background_base64 tool."""

    success: bool = Field(description="Whether the background removal was successful")
    image_base64: str | None = Field(
        default=None, description="Base64 encoded PNG with transparent background"
    )


class SuitabilityOutput(BaseModel):
    """Output schema for check_smart_removal tool."""

    success: bool = Field(description="Whether the image could be analysed")
    input_path: str = Field(description="Path to the input image file")
    suitable: bool = Field(
        default=False,
        description="Whether the image has a dominant border color smart removal can use",
    )
    dominant_share: float = Field(
        default=0.0,
        description=f"Share of edge pixels in the dominant color group (suitable above {MIN_DOMINANT_SHARE:.0%})",
    )
    error: str | None = Field(default=None, description="Error message if the check failed")


class TransparencyOutput(BaseModel):
    """Output schema for check_transparency tool."""

    success: bool = Field(description="Whether the image could be read")
    input_path: str = Field(description="Path to the input image file")
    has_transparency: bool = Field(
        default=False, description="Whether any pixel is not fully opaque"
    )
    error: str | None = Field(default=None, description="Error message if the check failed")


def _edge_share_from_file(input_file: Path) -> float:
    return dominant_edge_share(decode_rgba(input_file.read_bytes()))


def _failure_message(e: Exception) -> str:
    if isinstance(e, InvalidRequestError):
        return f"Invalid request: {e}"
    if isinstance(e, GenerationError):
        return f"Background removal failed: {e}"
    if isinstance(e, (OSError, ValueError)):
        return f"Could not read image: {e}"
    return f"Unexpected error: {e}"


async def remove_background(
    image_path: str,
    output_path: str | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    sample_depth: int = DEFAULT_SAMPLE_DEPTH,
    edge_smoothing: bool = DEFAULT_EDGE_SMOOTHING,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> RemoveBackgroundOutput:
    """Remove background from an image file.

    Detects the background color from the image border and makes every
    background pixel connected to the border transparent. The work runs in
    a worker thread so the event loop stays responsive.

    Args:
        image_path: Path to the input image file.
        output_path: Path for the output image. If not provided,
            appends '_nobg' to the input filename.
        tolerance: Color tolerance for background matching (0-100).
        sample_depth: How many pixels deep to sample from each edge.
        edge_smoothing: Apply the legacy anti-alias smoothing pass.
        max_dimension: Longest side processed at full resolution.

    Returns:
        RemoveBackgroundOutput with the result.
    """
    try:
        options = SmartRemovalOptions(
            tolerance=tolerance,
            sample_depth=sample_depth,
            edge_smoothing=edge_smoothing,
            max_dimension=max_dimension,
        )
    except InvalidRequestError as e:
        return RemoveBackgroundOutput(
            success=False, input_path=image_path, error=f"Invalid request: {e}"
        )

    # Check if input file exists
    if not Path(image_path).is_file():
        return RemoveBackgroundOutput(
            success=False,
            input_path=image_path,
            error=f"Input file not found: {image_path}",
        )

    try:
        result_path, report = await asyncio.to_thread(
            remove_background_from_file, image_path, output_path, options
        )
    except Exception as e:
        return RemoveBackgroundOutput(
            success=False, input_path=image_path, error=_failure_message(e)
        )

    return RemoveBackgroundOutput(
        success=True,
        input_path=image_path,
        output_path=result_path,
        file_size_bytes=Path(result_path).stat().st_size,
        **RemovalDetails.from_report(report),
    )


async def remove_background_base64(
    image_base64: str,
    tolerance: float = DEFAULT_TOLERANCE,
    sample_depth: int = DEFAULT_SAMPLE_DEPTH,
    edge_smoothing: bool = DEFAULT_EDGE_SMOOTHING,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> RemoveBackgroundBase64Output:
    """Remove background from a base64 encoded image.

    Args:
        image_base64: Base64 encoded image, optionally a ``data:`` URL.
        tolerance: Color tolerance for background matching (0-100).
        sample_depth: How many pixels deep to sample from each edge.
        edge_smoothing: Apply the legacy anti-alias smoothing pass.
        max_dimension: Longest side processed at full resolution.

    Returns:
        RemoveBackgroundBase64Output with a base64 encoded PNG. The input is
        echoed back unchanged when no border colors could be sampled.
    """
    try:
        options = SmartRemovalOptions(
            tolerance=tolerance,
            sample_depth=sample_depth,
            edge_smoothing=edge_smoothing,
            max_dimension=max_dimension,
        )
        image_bytes = decode_base64(image_base64)
        result_bytes, report = await asyncio.to_thread(
            remove_background_from_bytes, image_bytes, options
        )
    except Exception as e:
        return RemoveBackgroundBase64Output(success=False, error=_failure_message(e))

    image_out = encode_base64(result_bytes) if report.applied else image_base64
    return RemoveBackgroundBase64Output(
        success=True,
        image_base64=image_out,
        **RemovalDetails.from_report(report),
    )


async def check_smart_removal(image_path: str) -> SuitabilityOutput:
    """Check whether smart removal suits an image.

    Args:
        image_path: Path to the input image file.

    Returns:
        SuitabilityOutput with the recommendation and dominant color share.
    """
    input_file = Path(image_path)
    if not input_file.is_file():
        return SuitabilityOutput(
            success=False,
            input_path=image_path,
            error=f"Input file not found: {image_path}",
        )

    try:
        share = await asyncio.to_thread(_edge_share_from_file, input_file)
    except Exception as e:
        return SuitabilityOutput(
            success=False, input_path=image_path, error=_failure_message(e)
        )

    return SuitabilityOutput(
        success=True,
        input_path=image_path,
        suitable=share > MIN_DOMINANT_SHARE,
        dominant_share=share,
    )


def check_transparency(image_path: str) -> TransparencyOutput:
    """Check whether an image already has transparent pixels.

    Args:
        image_path: Path to the input image file.

    Returns:
        TransparencyOutput with the result.
    """
    input_file = Path(image_path)
    if not input_file.is_file():
        return TransparencyOutput(
            success=False,
            input_path=image_path,
            error=f"Input file not found: {image_path}",
        )

    try:
        raster = decode_rgba(input_file.read_bytes())
    except Exception as e:
        return TransparencyOutput(
            success=False, input_path=image_path, error=_failure_message(e)
        )

    return TransparencyOutput(
        success=True,
        input_path=image_path,
        has_transparency=raster_has_transparency(raster),
    )
