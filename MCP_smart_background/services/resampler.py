"""Working-resolution bound for the removal pipeline.

Very large images are downscaled before processing and the result is
upscaled back to the original size. This caps flood fill and cleanup cost
at the price of sub-pixel accuracy on the cutout edge of very large inputs.
Images within the cap are never resampled.
"""

from __future__ import annotations

import logging

from PIL import Image

from MCP_smart_background.constants import DEFAULT_MAX_DIMENSION
from MCP_smart_background.services.raster import RasterImage

logger = logging.getLogger(__name__)


def needs_downscale(
    raster: RasterImage, max_dimension: int = DEFAULT_MAX_DIMENSION
) -> bool:
    return max(raster.width, raster.height) > max_dimension


def downscale(
    raster: RasterImage, max_dimension: int = DEFAULT_MAX_DIMENSION
) -> RasterImage:
    """Shrink ``raster`` so its longest side equals ``max_dimension``.

    Returns the raster itself when it already fits.
    """
    if not needs_downscale(raster, max_dimension):
        return raster

    scale = max_dimension / max(raster.width, raster.height)
    size = (
        max(1, round(raster.width * scale)),
        max(1, round(raster.height * scale)),
    )
    logger.info(f"Downscaling {raster.width}x{raster.height} to {size[0]}x{size[1]}")
    resized = raster.to_image().resize(size, Image.Resampling.LANCZOS)
    return RasterImage.from_image(resized)


def upscale(raster: RasterImage, original: RasterImage) -> RasterImage:
    """Resize a processed raster back to the size of ``original``.

    Pixels that were fully transparent in ``original`` stay transparent so
    that interpolation cannot reintroduce opacity on them.
    """
    if raster.size == original.size:
        return raster

    logger.info(
        f"Upscaling {raster.width}x{raster.height} back to "
        f"{original.width}x{original.height}"
    )
    resized = raster.to_image().resize(original.size, Image.Resampling.LANCZOS)
    result = RasterImage.from_image(resized)
    result.alpha[original.alpha == 0] = 0
    return result

