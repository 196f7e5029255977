"""Apply a flood fill classification to the alpha channel."""

from __future__ import annotations

import numpy as np

from MCP_smart_background.services.flood_fill import PixelState
from MCP_smart_background.services.raster import RasterImage


def apply_removal(raster: RasterImage, states: np.ndarray) -> int:
    """Make every pixel marked REMOVE fully transparent, in place.

    All other bytes are left untouched.

    Returns:
        Number of pixels marked for removal.
    """
    remove = states == PixelState.REMOVE
    raster.pixels[:, :, 3][remove] = 0
    return int(np.count_nonzero(remove))
