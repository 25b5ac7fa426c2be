"""Pipeline stages: scan, resolve, assemble, write."""

from .assembler import assemble
from .resolver import resolve, resolve_all
from .scanner import scan

__all__ = ["scan", "resolve", "resolve_all", "assemble"]
