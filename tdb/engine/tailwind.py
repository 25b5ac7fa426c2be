"""Tailwind CSS CLI adapter: expands one utility class via a synthetic @apply rule."""

import json
import logging
import re
import shutil
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config.engine_config import EngineConfig
from ..config.settings import get_engine_timeout, get_tailwind_bin
from .base import CssEngine, EngineError

logger = logging.getLogger(__name__)

PROBE_SELECTOR = ".tdb-probe"

_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


def _matching_brace(text: str, open_index: int) -> int:
    """Index of the '}' closing the '{' at open_index (len(text) if unbalanced)."""
    depth = 0
    quote = None
    for i in range(open_index, len(text)):
        ch = text[i]
        if quote:
            if ch == quote and text[i - 1] != '\\':
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i
    return len(text)


def _top_level_declarations(body: str) -> List[str]:
    """Split a rule body into 'prop: value;' strings, skipping nested blocks."""
    declarations = []
    current: List[str] = []
    depth = 0
    parens = 0
    quote = None

    def flush():
        segment = ''.join(current).strip()
        current.clear()
        name, sep, value = segment.partition(':')
        name = name.strip()
        # Custom properties may be empty and still count as defined
        if sep and name and (value.strip() or name.startswith('--')):
            declarations.append(f"{name}: {value.strip()};")

    for i, ch in enumerate(body):
        if quote:
            if depth == 0:
                current.append(ch)
            if ch == quote and body[i - 1] != '\\':
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
        elif ch == '{':
            if depth == 0:
                current.clear()
            depth += 1
            continue
        elif ch == '}':
            depth = max(depth - 1, 0)
            continue
        if depth:
            continue
        if ch == '(':
            parens += 1
        elif ch == ')':
            parens = max(parens - 1, 0)
        elif ch == ';' and parens == 0:
            flush()
            continue
        current.append(ch)
    flush()
    return declarations


def extract_declarations(css_text: str, selector: str = PROBE_SELECTOR) -> Optional[str]:
    """Collect declarations of top-level rules whose selector is exactly `selector`.

    Returns:
        Declarations joined by newlines, or None if the selector produced none
    """
    text = _COMMENT.sub('', css_text)
    declarations: List[str] = []
    pos = 0
    while True:
        open_index = text.find('{', pos)
        if open_index == -1:
            break
        prelude = text[pos:open_index].rsplit(';', 1)[-1].strip()
        close_index = _matching_brace(text, open_index)
        if prelude == selector:
            declarations.extend(_top_level_declarations(text[open_index + 1:close_index]))
        pos = close_index + 1
    return '\n'.join(declarations) if declarations else None


class TailwindEngine(CssEngine):
    """Resolves utility classes by running the Tailwind CSS v3 CLI.

    Each class is compiled in isolation from the stylesheet
    `.tdb-probe { @apply <class>; }` so an unknown class only fails its
    own build. Results are cached for the lifetime of the instance.
    """

    def __init__(self, config: EngineConfig, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.config = config
        self.binary = binary or get_tailwind_bin()
        self.timeout = timeout if timeout is not None else get_engine_timeout()
        self._cache: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()
        self._workdir: Optional[Path] = None
        self._config_file: Optional[Path] = None

    def __enter__(self) -> 'TailwindEngine':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove temporary files created for this engine."""
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None
            self._config_file = None

    def _executable(self) -> str:
        found = shutil.which(self.binary)
        if not found:
            raise EngineError(
                f"Tailwind CSS executable not found: {self.binary}. "
                f"Install pytailwindcss or set TDB_TAILWIND_BIN."
            )
        return found

    def _ensure_workdir(self) -> Path:
        with self._lock:
            if self._workdir is None:
                self._workdir = Path(tempfile.mkdtemp(prefix="tdb-"))
            return self._workdir

    def _config_path(self) -> Path:
        """Config file to pass to the CLI; data configs are written out as CommonJS."""
        if self.config.is_javascript:
            return self.config.path
        workdir = self._ensure_workdir()
        with self._lock:
            if self._config_file is None:
                config_file = workdir / "tailwind.config.js"
                config_file.write_text(
                    "module.exports = " + json.dumps(self.config.data, indent=2) + ";\n",
                    encoding="utf-8",
                )
                self._config_file = config_file
            return self._config_file

    def _build(self, css_input: str) -> Tuple[int, str, str]:
        """Compile css_input; returns (exit code, output css, stderr)."""
        executable = self._executable()
        config_path = self._config_path()
        with tempfile.TemporaryDirectory(dir=self._ensure_workdir()) as tmp:
            input_path = Path(tmp) / "input.css"
            output_path = Path(tmp) / "output.css"
            input_path.write_text(css_input, encoding="utf-8")
            cmd = [executable, "-i", str(input_path), "-o", str(output_path), "-c", str(config_path)]
            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self.timeout,
                    cwd=str(self.config.path.parent),
                )
            except OSError as e:
                raise EngineError(f"Could not start Tailwind CSS ({executable}): {e}") from e
            output = output_path.read_text(encoding="utf-8") if output_path.exists() else ""
            return completed.returncode, output, completed.stderr or ""

    def check(self) -> None:
        """Build an empty stylesheet to prove the CLI and config load.

        Raises:
            EngineError: If the CLI is missing or rejects the configuration
        """
        try:
            code, _, stderr = self._build("")
        except subprocess.TimeoutExpired as e:
            raise EngineError(f"Tailwind CSS timed out after {self.timeout}s") from e
        if code != 0:
            detail = stderr.strip() or f"exit code {code}"
            raise EngineError(f"Tailwind CSS could not load {self.config.path}: {detail}")

    def render(self, utility_class: str) -> Optional[str]:
        with self._lock:
            if utility_class in self._cache:
                return self._cache[utility_class]

        css_input = f"{PROBE_SELECTOR} {{\n  @apply {utility_class};\n}}\n"
        try:
            code, output, stderr = self._build(css_input)
        except subprocess.TimeoutExpired:
            logger.warning(f"Warning: Tailwind CSS timed out resolving '{utility_class}'")
            return None

        if code != 0:
            logger.debug(f"Tailwind CSS rejected '{utility_class}': {stderr.strip()}")
            declarations = None
        else:
            declarations = extract_declarations(output)

        with self._lock:
            self._cache[utility_class] = declarations
        return declarations
