"""Edge color sampling and perceptual color grouping.

The background of a logo or illustration is inferred from the colors found
in a band along the image border. Exact colors are tallied first, then
similar colors are merged into weighted groups so that gradients and
anti-aliased borders collapse into a few representative colors.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from MCP_smart_background.constants import (
    COLOR_GROUP_THRESHOLD,
    DEFAULT_SAMPLE_DEPTH,
    MAX_EDGE_SAMPLES,
)

logger = logging.getLogger(__name__)

# Per-channel weights of the perceptual distance (green > blue > red)
RED_WEIGHT = 2
GREEN_WEIGHT = 4
BLUE_WEIGHT = 3


@dataclass(frozen=True)
class ColorSample:
    """An exact RGB color seen in the border band and how often it occurred."""

    r: int
    g: int
    b: int
    count: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b


@dataclass
class ColorGroup:
    """Running count-weighted average of similar edge colors."""

    r: int
    g: int
    b: int
    count: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b

    @property
    def brightness(self) -> float:
        return (self.r + self.g + self.b) / 3

    @classmethod
    def from_sample(cls, sample: ColorSample) -> ColorGroup:
        return cls(sample.r, sample.g, sample.b, sample.count)

    def merge(self, sample: ColorSample) -> None:
        """Fold a sample into the group by count-weighted average."""
        total = self.count + sample.count
        self.r = _round_half_up((self.r * self.count + sample.r * sample.count) / total)
        self.g = _round_half_up((self.g * self.count + sample.g * sample.count) / total)
        self.b = _round_half_up((self.b * self.count + sample.b * sample.count) / total)
        self.count = total


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def color_distance(color1: tuple, color2: tuple) -> float:
    """Calculate perceptual color distance between two RGB/RGBA colors.

    Weighted Euclidean distance, ``sqrt(2*dr^2 + 4*dg^2 + 3*db^2)``. The eye
    is most sensitive to green and least to red in this weighting.

    Args:
        color1: First color as RGB or RGBA tuple.
        color2: Second color as RGB or RGBA tuple.

    Returns:
        Perceptual color distance (0 = identical, higher = more different).
    """
    # Convert to int to avoid overflow with uint8
    dr = int(color1[0]) - int(color2[0])
    dg = int(color1[1]) - int(color2[1])
    db = int(color1[2]) - int(color2[2])
    return math.sqrt(
        RED_WEIGHT * dr * dr + GREEN_WEIGHT * dg * dg + BLUE_WEIGHT * db * db
    )


def squared_distance_to(rgb: np.ndarray, color: tuple[int, int, int]) -> np.ndarray:
    """Vectorised squared :func:`color_distance` from every pixel to ``color``."""
    channels = rgb.astype(np.int32)
    dr = channels[..., 0] - int(color[0])
    dg = channels[..., 1] - int(color[1])
    db = channels[..., 2] - int(color[2])
    return RED_WEIGHT * dr * dr + GREEN_WEIGHT * dg * dg + BLUE_WEIGHT * db * db


def _band_strips(rgb: np.ndarray, depth: int) -> list[np.ndarray]:
    """Border band strips in scan order: top, bottom, left, right per depth."""
    height, width = rgb.shape[:2]
    strips = []
    for d in range(depth):
        strips.append(rgb[d, :])
        strips.append(rgb[height - 1 - d, :])
        # Side columns skip the rows already covered by the top/bottom strips
        strips.append(rgb[depth : height - depth, d])
        strips.append(rgb[depth : height - depth, width - 1 - d])
    return strips


def sample_edge_colors(
    pixels: np.ndarray,
    sample_depth: int = DEFAULT_SAMPLE_DEPTH,
    max_samples: int = MAX_EDGE_SAMPLES,
) -> list[ColorSample]:
    """Tally the exact RGB colors found in the border band of an image.

    Args:
        pixels: RGB or RGBA array of shape (height, width, channels).
            Alpha is ignored.
        sample_depth: Width of the border band in pixels.
        max_samples: Maximum number of distinct colors to return.

    Returns:
        Most frequent colors first. Colors with equal counts keep the order
        in which they were first seen while scanning the band. Empty when
        the band does not fit inside the image.
    """
    height, width = pixels.shape[:2]
    if sample_depth < 1 or sample_depth > width or sample_depth > height:
        logger.debug(
            f"Sample depth {sample_depth} does not fit a {width}x{height} image"
        )
        return []

    strips = _band_strips(pixels[:, :, :3], sample_depth)
    band = np.concatenate([strip.reshape(-1, 3) for strip in strips]).astype(np.uint32)
    keys = (band[:, 0] << 16) | (band[:, 1] << 8) | band[:, 2]

    unique_keys, first_seen, counts = np.unique(
        keys, return_index=True, return_counts=True
    )
    # Primary key: descending count; secondary: first occurrence in scan order
    order = np.lexsort((first_seen, -counts.astype(np.int64)))[:max_samples]

    samples = [
        ColorSample(
            r=int(unique_keys[i] >> 16) & 0xFF,
            g=int(unique_keys[i] >> 8) & 0xFF,
            b=int(unique_keys[i]) & 0xFF,
            count=int(counts[i]),
        )
        for i in order
    ]
    logger.debug(
        f"Sampled {len(keys)} edge pixels, {len(unique_keys)} distinct colors"
    )
    return samples


def group_similar_colors(
    samples: list[ColorSample],
    threshold: float = COLOR_GROUP_THRESHOLD,
) -> list[ColorGroup]:
    """Greedily merge similar samples into weighted color groups.

    Each sample joins the first existing group closer than ``threshold``,
    otherwise it seeds a new group. Input order matters, so samples are
    expected most frequent first.

    Args:
        samples: Edge color samples, most frequent first.
        threshold: Maximum color distance (exclusive) for merging.

    Returns:
        Color groups sorted by descending count.
    """
    groups: list[ColorGroup] = []
    for sample in samples:
        for group in groups:
            if color_distance(sample.rgb, group.rgb) < threshold:
                group.merge(sample)
                break
        else:
            groups.append(ColorGroup.from_sample(sample))

    return sorted(groups, key=lambda group: group.count, reverse=True)
