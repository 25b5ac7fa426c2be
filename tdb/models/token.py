"""Breakpoint token data model representing one media-<dir>-<px>:<utility> class."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Direction(str, Enum):
    """Viewport comparison encoded in the token prefix."""

    MAX = "max"
    MIN = "min"

    @property
    def media_feature(self) -> str:
        """CSS media feature name, e.g. 'max-width'."""
        return f"{self.value}-width"


@dataclass(frozen=True)
class BreakpointToken:
    """A breakpoint-encoded class found in source text.

    Attributes:
        direction: MAX applies at or below `pixels`, MIN at or above
        pixels: Breakpoint boundary as written in source (no unit conversion)
        utility_class: Utility class to apply under the breakpoint
        raw_token: Exact matched text; dedup key and output selector
    """

    direction: Direction
    pixels: int
    utility_class: str
    raw_token: str

    def __post_init__(self):
        """Reject negative pixels on direct construction; parsed tokens never carry a sign."""
        if self.pixels < 0:
            raise ValueError(f"Breakpoint pixels must be non-negative: {self.pixels}")

    @property
    def key(self) -> Tuple[Direction, int]:
        """Grouping key shared by all tokens emitted in one media block."""
        return (self.direction, self.pixels)


# raw_token -> BreakpointToken, insertion ordered, first occurrence wins
TokenSet = Dict[str, BreakpointToken]
