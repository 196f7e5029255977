"""MCP tools for smart background removal."""

from MCP_smart_background.tools.remove_background import (
    RemoveBackgroundBase64Output,
    RemoveBackgroundOutput,
    SuitabilityOutput,
    TransparencyOutput,
    check_smart_removal,
    check_transparency,
    remove_background,
    remove_background_base64,
)

__all__ = [
    "remove_background",
    "remove_background_base64",
    "check_smart_removal",
    "check_transparency",
    "RemoveBackgroundOutput",
    "RemoveBackgroundBase64Output",
    "SuitabilityOutput",
    "TransparencyOutput",
]
