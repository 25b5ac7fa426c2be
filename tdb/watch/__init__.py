"""Watch mode."""

from .watcher import RegenerateHandler, start_watching

__all__ = ["RegenerateHandler", "start_watching"]
