"""FastMCP server definition for Smart Background Removal MCP.

This module defines the MCP server with tools for background removal.
"""

from fastmcp import FastMCP

from MCP_smart_background.constants import (
    DEFAULT_EDGE_SMOOTHING,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SAMPLE_DEPTH,
    DEFAULT_TOLERANCE,
)
from MCP_smart_background.tools.remove_background import (
    check_smart_removal as _check_smart_removal,
    check_transparency as _check_transparency,
    remove_background as _remove_background,
    remove_background_base64 as _remove_background_base64,
)

# Create the MCP server instance
mcp = FastMCP("Smart Background Removal MCP Server")


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool()
async def remove_background(
    image_path: str,
    output_path: str | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    sample_depth: int = DEFAULT_SAMPLE_DEPTH,
    edge_smoothing: bool = DEFAULT_EDGE_SMOOTHING,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> dict:
    """Remove a solid or gradient background from an image, producing PNG with transparency.

    Detects the background color from the image border and removes only
    background pixels connected to the border, so text and shapes that share
    the background color but sit inside the artwork are preserved.

    Args:
        image_path: Path to the input image file.
        output_path: Path for the output image. If not provided, appends '_nobg' to input filename.
        tolerance: Color tolerance for background matching (0-100).
        sample_depth: How many pixels deep to sample from each edge.
        edge_smoothing: Apply legacy anti-alias smoothing (usually not needed).
        max_dimension: Larger images are processed downscaled to this size.

    Returns:
        Dictionary with success status, file path, and detection details.
    """
    result = await _remove_background(
        image_path=image_path,
        output_path=output_path,
        tolerance=tolerance,
        sample_depth=sample_depth,
        edge_smoothing=edge_smoothing,
        max_dimension=max_dimension,
    )
    return result.model_dump()


@mcp.tool()
async def remove_background_base64(
    image_base64: str,
    tolerance: float = DEFAULT_TOLERANCE,
    sample_depth: int = DEFAULT_SAMPLE_DEPTH,
    edge_smoothing: bool = DEFAULT_EDGE_SMOOTHING,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> dict:
    """Remove background from a base64 encoded image.

    Args:
        image_base64: Base64 encoded image (a data URL prefix is accepted).
        tolerance: Color tolerance for background matching (0-100).
        sample_depth: How many pixels deep to sample from each edge.
        edge_smoothing: Apply legacy anti-alias smoothing (usually not needed).
        max_dimension: Larger images are processed downscaled to this size.

    Returns:
        Dictionary with success status and base64 encoded PNG.
    """
    result = await _remove_background_base64(
        image_base64=image_base64,
        tolerance=tolerance,
        sample_depth=sample_depth,
        edge_smoothing=edge_smoothing,
        max_dimension=max_dimension,
    )
    return result.model_dump()


@mcp.tool()
async def check_smart_removal(image_path: str) -> dict:
    """Check whether an image has a dominant border color smart removal can use.

    Use this before remove_background to decide whether another removal
    method (for example an ML model) is a better fit for photos or busy
    backgrounds.

    Args:
        image_path: Path to the input image file.

    Returns:
        Dictionary with the recommendation and the dominant color share.
    """
    result = await _check_smart_removal(image_path=image_path)
    return result.model_dump()


@mcp.tool()
def check_transparency(image_path: str) -> dict:
    """Check whether an image already has transparent pixels.

    Args:
        image_path: Path to the input image file.

    Returns:
        Dictionary with the transparency flag.
    """
    result = _check_transparency(image_path=image_path)
    return result.model_dump()


# ============================================================================
# MAIN
# ============================================================================


if __name__ == "__main__":
    mcp.run()
