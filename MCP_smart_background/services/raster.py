"""In-memory RGBA raster used by the smart background removal pipeline."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass
class RasterImage:
    """Row-major interleaved RGBA pixel buffer.

    ``pixels`` is a ``uint8`` array of shape ``(height, width, 4)``. A raster
    belongs to a single removal call and is never shared between calls.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(
                f"Expected an RGBA buffer of shape (height, width, 4), "
                f"got {self.pixels.shape}"
            )
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def copy(self) -> RasterImage:
        return RasterImage(self.pixels.copy())

    @classmethod
    def from_image(cls, image: Image.Image) -> RasterImage:
        """Build a raster from a PIL image, adding an opaque alpha if missing."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))
