"""Services for Smart Background Removal MCP Server."""

from .background_remover import (
    SmartRemovalReport,
    can_use_smart_removal,
    has_transparency,
    process_raster,
    remove_background_from_bytes,
    remove_background_from_file,
    remove_background_smart,
)
from .options import SmartRemovalOptions
from .raster import RasterImage

__all__ = [
    "RasterImage",
    "SmartRemovalOptions",
    "SmartRemovalReport",
    "can_use_smart_removal",
    "has_transparency",
    "process_raster",
    "remove_background_from_bytes",
    "remove_background_from_file",
    "remove_background_smart",
]
