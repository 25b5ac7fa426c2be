"""CSS engine adapters."""

from .base import CssEngine, EngineError
from .tailwind import TailwindEngine

__all__ = ["CssEngine", "EngineError", "TailwindEngine"]
