"""Resolved rule and breakpoint group models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .token import BreakpointToken, Direction


@dataclass
class ResolvedRule:
    """A token paired with the declarations the CSS engine produced for it.

    `declarations` is None when the engine could not resolve the utility
    class (a resolution gap); such rules are dropped by the assembler.
    """

    token: BreakpointToken
    declarations: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.declarations is not None


@dataclass
class BreakpointGroup:
    """All resolved rules sharing one (direction, pixels) key, in scan order."""

    direction: Direction
    pixels: int
    rules: List[ResolvedRule] = field(default_factory=list)

    @property
    def media_query(self) -> str:
        return f"@media ({self.direction.media_feature}: {self.pixels}px)"
