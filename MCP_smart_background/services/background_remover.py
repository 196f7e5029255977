"""Smart background removal service.

Removes a solid, gradient or anti-aliased background from logos and
illustrations without any ML model:

1. Sample the colors found in a band along the image border
2. Group similar colors and decide which groups are background
3. Flood fill from every border pixel through background-colored pixels
4. Make the filled pixels transparent and clean up edge artifacts

Only pixels connected to the border through background-colored pixels are
removed, so content that shares the background color (text, inner shapes)
is preserved when it is enclosed by other content.

Every call is self-contained; the service keeps no state between calls and
is safe to use from several threads at once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import numpy as np

from MCP_smart_background.constants import (
    COLOR_GROUP_THRESHOLD,
    METHOD_SMART,
    METHOD_UNCHANGED,
    MIN_DOMINANT_SHARE,
    OUTPUT_SUFFIX,
    SUITABILITY_SAMPLE_DEPTH,
)
from MCP_smart_background.exceptions import (
    FileNotFoundError as FileNotFoundErr,
    GenerationError,
    InvalidOptionError,
    SmartBackgroundError,
)
from MCP_smart_background.services import resampler
from MCP_smart_background.services.classifier import classify_background
from MCP_smart_background.services.cleanup import (
    erode_dark_halo,
    smooth_edges,
    snap_partial_alpha,
)
from MCP_smart_background.services.codec import (
    decode_base64,
    decode_rgba,
    encode_base64,
    encode_png,
)
from MCP_smart_background.services.color_sampling import (
    group_similar_colors,
    sample_edge_colors,
)
from MCP_smart_background.services.compositing import apply_removal
from MCP_smart_background.services.flood_fill import (
    flood_fill_background,
    match_background,
)
from MCP_smart_background.services.options import SmartRemovalOptions
from MCP_smart_background.services.raster import RasterImage

logger = logging.getLogger(__name__)

OptionsLike = SmartRemovalOptions | Mapping[str, Any] | None


@dataclass
class SmartRemovalReport:
    """Summary of what a removal call did."""

    method: str
    width: int
    height: int
    resampled: bool = False
    background_colors: list[tuple[int, int, int]] = field(default_factory=list)
    average_brightness: float | None = None
    tolerance: float | None = None
    pixels_removed: int = 0
    pixels_smoothed: int = 0
    pixels_snapped: int = 0
    halo_pixels_eroded: int = 0

    @property
    def applied(self) -> bool:
        """False when the image was returned unchanged."""
        return self.method == METHOD_SMART


def resolve_options(options: OptionsLike = None) -> SmartRemovalOptions:
    """Turn ``None``, a mapping or an options object into validated options.

    Raises:
        InvalidOptionError: For unknown option names or invalid values.
    """
    if options is None:
        return SmartRemovalOptions()
    if isinstance(options, SmartRemovalOptions):
        return options

    known = {f.name for f in fields(SmartRemovalOptions)}
    for name in options:
        if name not in known:
            raise InvalidOptionError(
                str(name), f"unknown option, expected one of {', '.join(sorted(known))}"
            )
    return SmartRemovalOptions(**options)


def process_raster(
    raster: RasterImage,
    options: OptionsLike = None,
) -> tuple[RasterImage, SmartRemovalReport]:
    """Run smart background removal on a decoded RGBA raster.

    Args:
        raster: Input raster. It is never modified.
        options: Removal options.

    Returns:
        Tuple of (result raster, report). When no border colors can be
        sampled the input raster itself is returned and ``report.applied``
        is False.

    Raises:
        InvalidOptionError: If the options are invalid.
    """
    options = resolve_options(options)
    report = SmartRemovalReport(
        method=METHOD_UNCHANGED, width=raster.width, height=raster.height
    )

    working = resampler.downscale(raster, options.max_dimension)
    report.resampled = working is not raster

    samples = sample_edge_colors(working.pixels, options.sample_depth)
    groups = group_similar_colors(samples, COLOR_GROUP_THRESHOLD)
    if not groups:
        logger.warning("No edge colors detected, returning original image")
        return raster, report

    profile = classify_background(groups, options.tolerance)
    report.background_colors = [color.rgb for color in profile.background_colors]
    report.average_brightness = profile.average_brightness
    report.tolerance = profile.tolerance
    logger.info(
        "Detected background colors: "
        + ", ".join(
            f"rgb{color.rgb} [{color.count}]" for color in profile.background_colors
        )
    )

    if working is raster:
        working = raster.copy()

    background_mask = match_background(
        working.rgb, profile.background_colors, profile.threshold
    )
    states = flood_fill_background(background_mask)
    report.pixels_removed = apply_removal(working, states)

    if options.edge_smoothing:
        report.pixels_smoothed = smooth_edges(
            working, profile.background_colors, profile.threshold
        )
    report.pixels_snapped = snap_partial_alpha(working)
    if profile.is_dark:
        report.halo_pixels_eroded = erode_dark_halo(working)

    result = resampler.upscale(working, raster)
    report.method = METHOD_SMART

    logger.info(
        f"Smart removal complete: {report.pixels_removed}/"
        f"{working.width * working.height} pixels removed, "
        f"{report.halo_pixels_eroded} halo pixels eroded"
    )
    return result, report


def dominant_edge_share(raster: RasterImage) -> float:
    """Share of sampled edge pixels that belong to the largest color group."""
    samples = sample_edge_colors(raster.pixels, SUITABILITY_SAMPLE_DEPTH)
    groups = group_similar_colors(samples, COLOR_GROUP_THRESHOLD)
    if not groups:
        return 0.0
    total = sum(sample.count for sample in samples)
    return groups[0].count / total


def is_suitable_for_smart_removal(raster: RasterImage) -> bool:
    """Check whether the image has a clearly dominant border color."""
    share = dominant_edge_share(raster)
    logger.debug(f"Dominant edge color share: {share:.1%}")
    return share > MIN_DOMINANT_SHARE


def can_use_smart_removal(image_base64: str) -> bool:
    """Check if smart removal is suitable for a base64 encoded image.

    Callers can use this to pick a different removal strategy up front.
    Images that cannot be decoded are reported as unsuitable.

    Args:
        image_base64: Base64 encoded image, optionally a ``data:`` URL.

    Returns:
        True if the dominant border color group covers more than 30% of the
        sampled edge pixels.
    """
    try:
        raster = decode_rgba(decode_base64(image_base64))
    except (OSError, ValueError) as e:
        logger.warning(f"Suitability check could not decode image: {e}")
        return False
    return is_suitable_for_smart_removal(raster)


def raster_has_transparency(raster: RasterImage) -> bool:
    return bool(np.any(raster.alpha < 255))


def has_transparency(image_bytes: bytes) -> bool:
    """Check if an image already has any pixel that is not fully opaque.

    Images that cannot be decoded are reported as having no transparency.
    """
    try:
        raster = decode_rgba(image_bytes)
    except (OSError, ValueError) as e:
        logger.warning(f"Transparency check could not decode image: {e}")
        return False
    return raster_has_transparency(raster)


def remove_background_from_bytes(
    image_bytes: bytes,
    options: OptionsLike = None,
) -> tuple[bytes, SmartRemovalReport]:
    """Remove background from image bytes.

    Args:
        image_bytes: The input image as bytes, in any format Pillow reads.
        options: Removal options.

    Returns:
        Tuple of (PNG image bytes with transparent background, report).
        If no border colors could be sampled the input bytes are returned
        unchanged.

    Raises:
        InvalidOptionError: If the options are invalid.
        PIL.UnidentifiedImageError: If the bytes are not a readable image.
        GenerationError: If background removal fails.
    """
    options = resolve_options(options)
    raster = decode_rgba(image_bytes)

    try:
        result, report = process_raster(raster, options)
        if not report.applied:
            return image_bytes, report
        result_bytes = encode_png(result)
    except SmartBackgroundError:
        raise
    except Exception as e:
        logger.error(f"Background removal failed: {e}")
        raise GenerationError(f"Failed to remove background: {e}") from e

    logger.info(
        f"Background removed successfully. "
        f"Input: {len(image_bytes)} bytes, Output: {len(result_bytes)} bytes"
    )
    return result_bytes, report


def remove_background_smart(image_base64: str, options: OptionsLike = None) -> str:
    """Remove background from a base64 encoded image.

    Args:
        image_base64: Base64 encoded image, optionally a ``data:`` URL.
        options: Removal options.

    Returns:
        Base64 encoded PNG with an alpha channel and the same dimensions as
        the input. The input string is returned as is when no border colors
        could be sampled.

    Raises:
        InvalidOptionError: If the options are invalid.
        binascii.Error: If the input is not valid base64.
        PIL.UnidentifiedImageError: If the bytes are not a readable image.
        GenerationError: If background removal fails.
    """
    options = resolve_options(options)
    result_bytes, report = remove_background_from_bytes(
        decode_base64(image_base64), options
    )
    if not report.applied:
        return image_base64
    return encode_base64(result_bytes)


def remove_background_from_file(
    input_path: str,
    output_path: str | None = None,
    options: OptionsLike = None,
) -> tuple[str, SmartRemovalReport]:
    """Remove background from an image file.

    Args:
        input_path: Path to the input image file.
        output_path: Path for the output image. If None, appends '_nobg' to input
            name with a .png suffix, or the input suffix when the image is unchanged.
        options: Removal options.

    Returns:
        Tuple of (path to the output image file, report).

    Raises:
        FileNotFoundError: If the input file does not exist.
        InvalidOptionError: If the options are invalid.
        PIL.UnidentifiedImageError: If the file is not a readable image.
        GenerationError: If background removal or writing the output fails.
    """
    options = resolve_options(options)
    input_file = Path(input_path)

    if not input_file.is_file():
        raise FileNotFoundErr(f"Input file not found: {input_path}")

    result_bytes, report = remove_background_from_bytes(input_file.read_bytes(), options)

    # Generate output path if not provided; unchanged input keeps its own format
    if output_path is None:
        suffix = ".png" if report.applied else input_file.suffix
        output_path = str(input_file.parent / f"{input_file.stem}{OUTPUT_SUFFIX}{suffix}")

    try:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(result_bytes)
    except OSError as e:
        logger.error(f"Failed to write output file: {e}")
        raise GenerationError(f"Failed to write '{output_path}': {e}") from e

    logger.info(f"Saved background-removed image to: {output_path} (method: {report.method})")
    return str(output_file.absolute()), report
