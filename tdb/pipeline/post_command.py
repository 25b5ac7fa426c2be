"""Post-generation shell command."""

import logging
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)


class PostCommandError(Exception):
    """Raised when the post-generation command cannot start or exits non-zero."""
    pass


def run_post_command(command: str, cwd: Optional[str] = None) -> subprocess.CompletedProcess:
    """Run `command` through the shell and log its output.

    Returns:
        The completed process

    Raises:
        PostCommandError: If the command cannot be started or exits non-zero
    """
    logger.info(f'Executing post-command: "{command}"')
    try:
        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=cwd,
        )
    except OSError as e:
        raise PostCommandError(f"Post-command failed to start: {e}") from e

    if completed.stdout:
        logger.info(f"Post-command stdout:\n{completed.stdout.rstrip()}")
    if completed.stderr:
        logger.warning(f"Post-command stderr:\n{completed.stderr.rstrip()}")

    if completed.returncode != 0:
        raise PostCommandError(f"Post-command failed with exit code {completed.returncode}")

    logger.info("Post-command executed successfully.")
    return completed
