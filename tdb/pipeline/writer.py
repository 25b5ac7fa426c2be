"""Atomic write of the generated stylesheet."""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class WriteError(Exception):
    """Raised when the output stylesheet cannot be written."""
    pass


def write_output(path: Union[str, Path], text: str) -> Path:
    """Replace the output file with `text` (atomic write to avoid truncated file on interrupt).

    Parent directories are created when missing.

    Returns:
        The written path

    Raises:
        WriteError: If the file cannot be written
    """
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError as e:
        try:
            tmp.unlink()
        except OSError:
            pass
        raise WriteError(f"Could not write output file {path}: {e}") from e
    logger.debug(f"Wrote {len(text)} characters to {path}")
    return path
