"""Artifact cleanup passes run after the background has been removed.

All passes operate in place on the alpha channel of a raster and read the
neighborhood from a snapshot taken before the pass, so the result does not
depend on scan order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from MCP_smart_background.constants import (
    EDGE_SMOOTHING_MIN_ALPHA,
    EDGE_SMOOTHING_STRENGTH,
    HALO_BRIGHTNESS_THRESHOLD,
    HALO_MAX_PASSES,
    MAJORITY_NEIGHBORS,
)
from MCP_smart_background.services.color_sampling import (
    ColorGroup,
    squared_distance_to,
)
from MCP_smart_background.services.raster import RasterImage

logger = logging.getLogger(__name__)

ORTHOGONAL_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL_OFFSETS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ALL_OFFSETS = ORTHOGONAL_OFFSETS + DIAGONAL_OFFSETS


def count_neighbors(
    flags: np.ndarray,
    offsets: Sequence[tuple[int, int]] = ALL_OFFSETS,
) -> np.ndarray:
    """Count, for every pixel, how many in-bounds neighbors are set in ``flags``.

    Args:
        flags: Boolean array of shape (height, width).
        offsets: (dy, dx) neighbor offsets to consider.

    Returns:
        ``int16`` array of neighbor counts, shape (height, width).
    """
    height, width = flags.shape
    padded = np.pad(flags.astype(np.int16), 1)
    counts = np.zeros((height, width), dtype=np.int16)
    for dy, dx in offsets:
        counts += padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
    return counts


def brightness(raster: RasterImage) -> np.ndarray:
    """Per-pixel brightness, the plain mean of the RGB channels."""
    return raster.rgb.astype(np.float32).sum(axis=2) / 3


def snap_partial_alpha(raster: RasterImage) -> int:
    """Snap semi-transparent pixels to the majority of their 8 neighbors.

    A pixel with 0 < alpha < 255 becomes opaque when at least five neighbors
    are opaque, transparent when at least five are transparent, and is left
    alone otherwise.

    Returns:
        Number of pixels snapped.
    """
    alpha = raster.alpha
    partial = (alpha > 0) & (alpha < 255)
    if not partial.any():
        return 0

    opaque_neighbors = count_neighbors(alpha == 255)
    transparent_neighbors = count_neighbors(alpha == 0)

    to_opaque = partial & (opaque_neighbors >= MAJORITY_NEIGHBORS)
    to_transparent = (
        partial & ~to_opaque & (transparent_neighbors >= MAJORITY_NEIGHBORS)
    )
    alpha[to_opaque] = 255
    alpha[to_transparent] = 0

    snapped = int(np.count_nonzero(to_opaque) + np.count_nonzero(to_transparent))
    logger.debug(f"Snapped {snapped} semi-transparent pixel(s)")
    return snapped


def erode_dark_halo(
    raster: RasterImage,
    max_passes: int = HALO_MAX_PASSES,
    brightness_threshold: float = HALO_BRIGHTNESS_THRESHOLD,
) -> int:
    """Erode dark fringe pixels left on the cutout edge of a dark background.

    Each pass clears every visible pixel darker than ``brightness_threshold``
    that touches a transparent pixel orthogonally. Passes stop early once
    nothing changes. Visible means alpha > 0, so partially transparent
    pixels left over from snapping erode too, not only fully opaque ones.

    Returns:
        Total number of pixels made transparent.
    """
    dark = brightness(raster) < brightness_threshold
    alpha = raster.alpha
    total = 0

    for pass_number in range(1, max_passes + 1):
        touches_transparent = count_neighbors(alpha == 0, ORTHOGONAL_OFFSETS) > 0
        halo = (alpha > 0) & dark & touches_transparent
        removed = int(np.count_nonzero(halo))
        if removed == 0:
            break
        alpha[halo] = 0
        total += removed
        logger.debug(f"Halo erosion pass {pass_number}: {removed} pixel(s)")

    return total


def smooth_edges(
    raster: RasterImage,
    background_colors: Sequence[ColorGroup],
    threshold: float,
) -> int:
    """Soften visible pixels on the cutout edge that are close to the background.

    Legacy anti-aliasing pass, off by default. Only pixels with at least two
    transparent orthogonal neighbors and a color within half the removal
    threshold of a background color are touched; their alpha is reduced by
    up to 30% and never below 50.

    Returns:
        Number of pixels whose alpha was adjusted.
    """
    limit = threshold * 0.5
    if limit <= 0:
        return 0

    alpha = raster.alpha
    edge = (alpha > 0) & (count_neighbors(alpha == 0, ORTHOGONAL_OFFSETS) >= 2)
    if not edge.any():
        return 0

    # The first background color within reach decides the reduction
    distance = np.full(alpha.shape, np.inf, dtype=np.float64)
    pending = edge.copy()
    for color in background_colors:
        color_distances = np.sqrt(squared_distance_to(raster.rgb, color.rgb))
        hit = pending & (color_distances < limit)
        distance[hit] = color_distances[hit]
        pending &= ~hit

    smoothed = edge & np.isfinite(distance)
    reduction = (1 - distance[smoothed] / limit) * EDGE_SMOOTHING_STRENGTH
    new_alpha = np.floor(alpha[smoothed] * (1 - reduction) + 0.5)
    alpha[smoothed] = np.maximum(EDGE_SMOOTHING_MIN_ALPHA, new_alpha).astype(np.uint8)

    count = int(np.count_nonzero(smoothed))
    logger.debug(f"Edge smoothing adjusted {count} pixel(s)")
    return count
