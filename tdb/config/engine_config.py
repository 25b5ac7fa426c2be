"""Loader for the CSS engine configuration (tailwind.config.*)."""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .settings import get_engine_timeout, get_node_bin

logger = logging.getLogger(__name__)

JS_EXTENSIONS = {".js", ".cjs", ".mjs"}
DATA_EXTENSIONS = {".json", ".yaml", ".yml"}

# Evaluates a config module and prints it as JSON. Handles both CommonJS
# (module.exports) and ES modules (export default).
_NODE_LOADER = """
const { pathToFileURL } = require('url');
(async () => {
  const target = process.argv[1];
  let mod;
  try {
    mod = require(target);
  } catch (err) {
    if (err.code !== 'ERR_REQUIRE_ESM') throw err;
    mod = await import(pathToFileURL(target).href);
  }
  const config = (mod && mod.default) || mod;
  process.stdout.write(JSON.stringify(config === undefined ? null : config));
})().catch((err) => {
  process.stderr.write(String((err && err.message) || err));
  process.exit(1);
});
"""


class ConfigError(Exception):
    """Raised when the engine configuration is missing, unparseable or lacks content globs."""
    pass


@dataclass
class EngineConfig:
    """Normalized engine configuration.

    Attributes:
        path: Absolute path of the loaded config file
        content: Glob patterns to scan (may include '!' exclusions)
        raw_sources: Inline source strings from {raw: ...} content entries
        data: The full parsed configuration mapping
    """
    path: Path
    content: List[str] = field(default_factory=list)
    raw_sources: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_javascript(self) -> bool:
        return self.path.suffix.lower() in JS_EXTENSIONS


def normalize_content(content: Any) -> Tuple[List[str], List[str]]:
    """Normalize a `content` value into (patterns, raw_sources).

    Accepts a single pattern, a list of patterns and {raw: ...} entries,
    or Tailwind's {files: [...]} mapping.

    Raises:
        ConfigError: If content has an unsupported type
    """
    if isinstance(content, dict):
        if 'files' not in content:
            raise ConfigError('"content" mapping must have a "files" list')
        content = content['files']

    if isinstance(content, str):
        return [content], []

    if not isinstance(content, list):
        raise ConfigError(
            f'"content" must be a glob pattern or a list of glob patterns, got {type(content).__name__}'
        )

    patterns: List[str] = []
    raw_sources: List[str] = []
    for entry in content:
        if isinstance(entry, str):
            patterns.append(entry)
        elif isinstance(entry, dict) and isinstance(entry.get('raw'), str):
            raw_sources.append(entry['raw'])
        else:
            raise ConfigError(f'Unsupported "content" entry: {entry!r}')
    return patterns, raw_sources


def _evaluate_javascript(path: Path) -> Any:
    """Run the config module through Node.js and return the parsed export."""
    cmd = [get_node_bin(), "-e", _NODE_LOADER, str(path)]
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=get_engine_timeout(),
            cwd=str(path.parent),
        )
    except FileNotFoundError as e:
        raise ConfigError(f"Node.js is required to load {path.name}: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise ConfigError(f"Timed out loading {path}") from e

    if completed.returncode != 0:
        detail = completed.stderr.strip() or f"exit code {completed.returncode}"
        raise ConfigError(f"Could not load {path}: {detail}")

    try:
        return json.loads(completed.stdout or "null")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config {path} did not serialize to JSON: {e}") from e


def _read_data_file(path: Path) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read config {path}: {e}") from e


def load_engine_config(config_path: Union[str, Path], cwd: Optional[Path] = None) -> EngineConfig:
    """Load and normalize an engine configuration file.

    Args:
        config_path: Path to tailwind.config.{js,cjs,mjs,json,yaml,yml}
        cwd: Directory relative paths resolve against (default: process cwd)

    Returns:
        EngineConfig with normalized content patterns

    Raises:
        ConfigError: If the file is missing, unparseable or lacks `content`
    """
    path = Path(config_path)
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    path = path.resolve()

    if not path.is_file():
        raise ConfigError(f"Could not load engine configuration from {path}: file not found")

    suffix = path.suffix.lower()
    if suffix in JS_EXTENSIONS:
        data = _evaluate_javascript(path)
    elif suffix in DATA_EXTENSIONS:
        data = _read_data_file(path)
    else:
        raise ConfigError(f"Unsupported config format '{suffix}' for {path}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must define an object, got {type(data).__name__}")

    if 'content' not in data or data['content'] is None:
        raise ConfigError(f'"content" property not found in {path}')

    patterns, raw_sources = normalize_content(data['content'])
    logger.debug(f"Loaded engine config {path}: {len(patterns)} pattern(s), {len(raw_sources)} raw source(s)")
    return EngineConfig(path=path, content=patterns, raw_sources=raw_sources, data=data)
