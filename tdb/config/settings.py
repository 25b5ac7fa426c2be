"""Central application settings for tdb, read from environment variables."""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_TIMEOUT = 60.0
DEFAULT_DEBOUNCE_SECONDS = 0.2


def get_app_name() -> str:
    """Get application name."""
    return "tdb"


def get_app_version() -> str:
    """Get application version from pyproject.toml."""
    try:
        import tomli
        pyproject_path = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject = tomli.load(f)
            return pyproject.get("project", {}).get("version", "0.1.0")
    except Exception:
        # Fallback version if pyproject.toml cannot be read
        return "0.1.0"


def get_tailwind_bin() -> str:
    """Get the Tailwind CSS executable.

    Returns:
        Value of TDB_TAILWIND_BIN, or 'tailwindcss' (resolved on PATH)
    """
    return os.getenv('TDB_TAILWIND_BIN') or 'tailwindcss'


def get_node_bin() -> str:
    """Get the Node.js executable used to evaluate JavaScript configs."""
    return os.getenv('TDB_NODE_BIN') or 'node'


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Invalid {name}: {value!r}, using {default}")
        return default
    if parsed < 0:
        logger.warning(f"Negative {name}: {value!r}, using {default}")
        return default
    return parsed


def get_engine_timeout() -> float:
    """Get timeout in seconds for one Tailwind CLI invocation (TDB_ENGINE_TIMEOUT)."""
    return _get_float('TDB_ENGINE_TIMEOUT', DEFAULT_ENGINE_TIMEOUT)


def get_debounce_seconds() -> float:
    """Get the watch-mode burst coalescing window (TDB_DEBOUNCE_SECONDS)."""
    return _get_float('TDB_DEBOUNCE_SECONDS', DEFAULT_DEBOUNCE_SECONDS)


def get_scan_workers() -> Optional[int]:
    """Get the number of parallel file readers.

    Returns:
        Positive int from TDB_SCAN_WORKERS, or None for the executor default
    """
    value = os.getenv('TDB_SCAN_WORKERS')
    if not value:
        return None
    try:
        workers = int(value)
    except ValueError:
        logger.warning(f"Invalid TDB_SCAN_WORKERS: {value!r}, using default")
        return None
    return workers if workers > 0 else None
