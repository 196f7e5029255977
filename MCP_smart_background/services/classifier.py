"""Adaptive background classification from border color groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from MCP_smart_background.constants import (
    DARK_BACKGROUND_GROUPS,
    DARK_BRIGHTNESS_THRESHOLD,
    DARK_MIN_TOLERANCE,
    DEFAULT_BACKGROUND_GROUPS,
    DEFAULT_TOLERANCE,
    LIGHT_BACKGROUND_GROUPS,
    LIGHT_BRIGHTNESS_THRESHOLD,
    LIGHT_MIN_TOLERANCE,
    TOLERANCE_SCALE,
)
from MCP_smart_background.services.color_sampling import ColorGroup

logger = logging.getLogger(__name__)

# Groups averaged to decide whether the border is dark or light
BRIGHTNESS_GROUPS = 3


@dataclass(frozen=True)
class BackgroundProfile:
    """How background pixels are recognised for one image."""

    average_brightness: float
    tolerance: float
    background_colors: tuple[ColorGroup, ...]

    @property
    def threshold(self) -> float:
        """Color distance below which a pixel counts as background."""
        return self.tolerance * TOLERANCE_SCALE

    @property
    def is_dark(self) -> bool:
        return self.average_brightness < DARK_BRIGHTNESS_THRESHOLD


def average_brightness(groups: list[ColorGroup]) -> float:
    """Mean brightness of the most frequent border color groups."""
    top = groups[:BRIGHTNESS_GROUPS]
    if not top:
        return 0.0
    return sum(group.brightness for group in top) / len(top)


def classify_background(
    groups: list[ColorGroup],
    tolerance: float = DEFAULT_TOLERANCE,
) -> BackgroundProfile:
    """Pick the effective tolerance and background color set.

    Solid borders work with a tight tolerance. Dark and near-white borders
    are usually gradients or heavily anti-aliased, so they get a looser
    tolerance and more candidate colors.

    Args:
        groups: Border color groups, most frequent first.
        tolerance: Requested tolerance (0-100).

    Returns:
        BackgroundProfile for the flood fill and artifact cleanup.
    """
    brightness = average_brightness(groups)

    if brightness < DARK_BRIGHTNESS_THRESHOLD:
        effective = max(tolerance, DARK_MIN_TOLERANCE)
        group_count = DARK_BACKGROUND_GROUPS
        kind = "dark"
    elif brightness > LIGHT_BRIGHTNESS_THRESHOLD:
        effective = max(tolerance, LIGHT_MIN_TOLERANCE)
        group_count = LIGHT_BACKGROUND_GROUPS
        kind = "light"
    else:
        effective = tolerance
        group_count = DEFAULT_BACKGROUND_GROUPS
        kind = "mid-tone"

    profile = BackgroundProfile(
        average_brightness=brightness,
        tolerance=effective,
        background_colors=tuple(groups[:group_count]),
    )
    logger.debug(
        f"Classified {kind} background (brightness {brightness:.1f}): "
        f"tolerance {effective}, {len(profile.background_colors)} color(s)"
    )
    return profile
