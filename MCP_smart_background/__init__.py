"""Smart background removal for logos and illustrations, served over MCP."""

__version__ = "0.1.0"
