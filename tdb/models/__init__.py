"""Data models for the breakpoint pipeline."""

from .rule import BreakpointGroup, ResolvedRule
from .token import BreakpointToken, Direction, TokenSet

__all__ = ["BreakpointGroup", "BreakpointToken", "Direction", "ResolvedRule", "TokenSet"]
