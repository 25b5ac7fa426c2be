"""Abstract CSS engine the resolver delegates utility expansion to."""

from abc import ABC, abstractmethod
from typing import Optional


class EngineError(Exception):
    """Raised when the CSS engine cannot be started or cannot load its configuration."""
    pass


class CssEngine(ABC):
    """Turns one utility class name into its CSS declarations."""

    def close(self) -> None:
        """Release resources held by the engine."""

    def check(self) -> None:
        """Verify the engine is usable before a run.

        Raises:
            EngineError: If no utility could be resolved with this engine
        """

    @abstractmethod
    def render(self, utility_class: str) -> Optional[str]:
        """Render declarations for a single utility class.

        Args:
            utility_class: Utility class name, e.g. 'text-black'

        Returns:
            Declarations, one 'property: value;' per line, or None if the
            engine does not know the class

        Raises:
            EngineError: On structural engine failure
        """
        pass
