"""Per-call options for smart background removal."""

from __future__ import annotations

from dataclasses import dataclass

from MCP_smart_background.constants import (
    DEFAULT_EDGE_SMOOTHING,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SAMPLE_DEPTH,
    DEFAULT_TOLERANCE,
    MAX_TOLERANCE,
    MIN_TOLERANCE,
)
from MCP_smart_background.exceptions import InvalidOptionError


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class SmartRemovalOptions:
    """Options for smart background removal, validated on construction.

    Attributes:
        tolerance: Color tolerance for background matching (0-100).
        sample_depth: How many pixels deep to sample from each edge.
        edge_smoothing: Apply the legacy anti-alias smoothing pass.
        max_dimension: Longest side processed at full resolution.

    Raises:
        InvalidOptionError: Naming the first invalid option.
    """

    tolerance: float = DEFAULT_TOLERANCE
    sample_depth: int = DEFAULT_SAMPLE_DEPTH
    edge_smoothing: bool = DEFAULT_EDGE_SMOOTHING
    max_dimension: int = DEFAULT_MAX_DIMENSION

    def __post_init__(self) -> None:
        if not _is_number(self.tolerance):
            raise InvalidOptionError("tolerance", f"expected a number, got {self.tolerance!r}")
        if not MIN_TOLERANCE <= self.tolerance <= MAX_TOLERANCE:
            raise InvalidOptionError(
                "tolerance",
                f"must be between {MIN_TOLERANCE} and {MAX_TOLERANCE}, got {self.tolerance}",
            )
        if not _is_integer(self.sample_depth) or self.sample_depth < 1:
            raise InvalidOptionError(
                "sample_depth", f"must be a positive integer, got {self.sample_depth!r}"
            )
        if not isinstance(self.edge_smoothing, bool):
            raise InvalidOptionError(
                "edge_smoothing", f"expected a boolean, got {self.edge_smoothing!r}"
            )
        if not _is_integer(self.max_dimension) or self.max_dimension < 1:
            raise InvalidOptionError(
                "max_dimension", f"must be a positive integer, got {self.max_dimension!r}"
            )
