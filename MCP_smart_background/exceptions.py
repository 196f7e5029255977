"""Custom exceptions for Smart Background Removal MCP Server."""


class SmartBackgroundError(Exception):
    """Base exception for Smart Background Removal errors."""

    pass


class InvalidRequestError(SmartBackgroundError):
    """Invalid request parameters."""

    pass


class InvalidOptionError(InvalidRequestError):
    """A removal option is out of range or of the wrong type."""

    def __init__(self, option: str, message: str) -> None:
        self.option = option
        super().__init__(f"Invalid option '{option}': {message}")


class GenerationError(SmartBackgroundError):
    """Background removal processing failures."""

    pass


class FileNotFoundError(SmartBackgroundError):
    """Input file not found."""

    pass
