"""Border flood fill that separates background from content.

Every border pixel seeds the fill. Pixels close to a background color are
marked for removal and spread the fill to their 8 neighbors; any other pixel
is kept and stops the fill. A background-colored region that is enclosed by
content (text counters, inner shapes) is never reached and stays opaque.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import IntEnum

import numpy as np

from MCP_smart_background.services.color_sampling import (
    ColorGroup,
    squared_distance_to,
)

logger = logging.getLogger(__name__)


class PixelState(IntEnum):
    """Flood fill state of a single pixel. Never changes once visited."""

    UNVISITED = 0
    KEEP = 1
    REMOVE = 2


def match_background(
    rgb: np.ndarray,
    background_colors: Sequence[ColorGroup],
    threshold: float,
) -> np.ndarray:
    """Boolean mask of pixels closer than ``threshold`` to any background color.

    Args:
        rgb: Array of shape (height, width, 3+).
        background_colors: Reference background colors.
        threshold: Color distance threshold (exclusive).

    Returns:
        Boolean array of shape (height, width).
    """
    mask = np.zeros(rgb.shape[:2], dtype=bool)
    if threshold <= 0:
        return mask

    limit = threshold * threshold
    for color in background_colors:
        mask |= squared_distance_to(rgb, color.rgb) < limit
    return mask


def border_indices(width: int, height: int) -> list[int]:
    """Flat indices of every pixel on the four image edges."""
    indices = list(range(width))
    if height > 1:
        last_row = (height - 1) * width
        indices.extend(range(last_row, last_row + width))
    for y in range(1, height - 1):
        indices.append(y * width)
        if width > 1:
            indices.append(y * width + width - 1)
    return indices


def flood_fill_background(background_mask: np.ndarray) -> np.ndarray:
    """Classify pixels reachable from the border through background pixels.

    Uses an explicit stack of flat pixel indices so large images cannot
    exhaust the interpreter's recursion limit. Each pixel is classified once.

    Args:
        background_mask: Boolean (height, width) mask from
            :func:`match_background`.

    Returns:
        ``uint8`` array of :class:`PixelState` values, shape (height, width).
        Pixels never reached stay ``UNVISITED``.
    """
    height, width = background_mask.shape
    matches = np.ascontiguousarray(background_mask, dtype=np.uint8).tobytes()
    state = bytearray(width * height)

    keep = PixelState.KEEP.value
    remove = PixelState.REMOVE.value
    last_x = width - 1
    last_y = height - 1

    stack = border_indices(width, height)
    while stack:
        index = stack.pop()
        if state[index]:
            continue
        if not matches[index]:
            state[index] = keep
            continue

        state[index] = remove
        y, x = divmod(index, width)
        has_left = x > 0
        has_right = x < last_x

        if y > 0:
            above = index - width
            if not state[above]:
                stack.append(above)
            if has_left and not state[above - 1]:
                stack.append(above - 1)
            if has_right and not state[above + 1]:
                stack.append(above + 1)
        if y < last_y:
            below = index + width
            if not state[below]:
                stack.append(below)
            if has_left and not state[below - 1]:
                stack.append(below - 1)
            if has_right and not state[below + 1]:
                stack.append(below + 1)
        if has_left and not state[index - 1]:
            stack.append(index - 1)
        if has_right and not state[index + 1]:
            stack.append(index + 1)

    states = np.frombuffer(state, dtype=np.uint8).reshape(height, width)
    logger.debug(
        f"Flood fill visited {np.count_nonzero(states)}/{width * height} pixels"
    )
    return states
