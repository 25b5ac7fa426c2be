"""Tailwind dynamic breakpoints: media-query CSS for media-max/min-<px>: classes."""

__version__ = "0.3.0"
