"""File-change watching for watch mode, built on watchdog."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..pipeline.scanner import compile_patterns, expand_braces, matches_any

logger = logging.getLogger(__name__)

TRIGGER_EVENTS = {"created", "modified", "moved"}
_GLOB_CHARS = set("*?[{")


def is_hidden(path: Path, root: Optional[Path] = None) -> bool:
    """True if any path segment (relative to root when possible) starts with a dot."""
    if root is not None:
        try:
            path = path.relative_to(root)
        except ValueError:
            pass
    return any(part.startswith(".") and part not in (".", "..") for part in path.parts)


def glob_base(pattern: str, cwd: Path) -> Path:
    """Deepest existing directory that contains every match of a glob pattern."""
    parts = []
    for part in pattern.replace("\\", "/").split("/"):
        if any(ch in _GLOB_CHARS for ch in part):
            break
        parts.append(part)
    else:
        # No glob characters: the pattern names a file
        parts = parts[:-1]
    base = Path("/".join(parts)) if parts else Path(".")
    if not base.is_absolute():
        base = cwd / base
    while not base.is_dir() and base != base.parent:
        base = base.parent
    return base


def watch_roots(patterns: Iterable[str], cwd: Path) -> List[Path]:
    """Directories to observe for the include patterns, without nested duplicates."""
    roots: List[Path] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            continue
        for variant in expand_braces(pattern):
            roots.append(glob_base(variant, cwd).resolve())
    unique = sorted(set(roots), key=lambda p: len(p.parts))
    result: List[Path] = []
    for root in unique:
        if not any(root == kept or kept in root.parents for kept in result):
            result.append(root)
    return result


class RegenerateHandler(FileSystemEventHandler):
    """Calls `on_change(path)` for created/modified/moved files matching the patterns.

    Deletions, directories and hidden paths are ignored.
    """

    def __init__(
        self,
        on_change: Callable[[str], None],
        patterns: Sequence[str],
        extra_files: Sequence[Path] = (),
        cwd: Optional[Path] = None,
    ):
        super().__init__()
        self.on_change = on_change
        self.cwd = (cwd or Path.cwd()).resolve()
        includes = [p for p in patterns if p and not p.startswith("!")]
        excludes = [p[1:] for p in patterns if p.startswith("!") and len(p) > 1]
        self._includes = compile_patterns(includes, self.cwd)
        self._excludes = compile_patterns(excludes, self.cwd)
        self._extra = {Path(p).resolve() for p in extra_files}

    def should_trigger(self, path: Path) -> bool:
        path = Path(path).resolve()
        if path in self._extra:
            return True
        if is_hidden(path, self.cwd):
            return False
        if not matches_any(path, self._includes):
            return False
        return not matches_any(path, self._excludes)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in TRIGGER_EVENTS:
            return
        raw_path = event.dest_path if event.event_type == "moved" else event.src_path
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode("utf-8", errors="replace")
        if raw_path and self.should_trigger(Path(raw_path)):
            self.on_change(str(raw_path))


def start_watching(
    on_change: Callable[[str], None],
    patterns: Sequence[str],
    extra_files: Sequence[Path] = (),
    cwd: Optional[Path] = None,
) -> Observer:
    """Start a watchdog observer for the patterns (and extra files, e.g. the config).

    Returns:
        The started Observer; call stop() and join() to shut it down
    """
    cwd = (cwd or Path.cwd()).resolve()
    handler = RegenerateHandler(on_change, patterns, extra_files=extra_files, cwd=cwd)
    roots = watch_roots(patterns, cwd)
    observer = Observer()
    for root in roots:
        observer.schedule(handler, str(root), recursive=True)
        logger.debug(f"Watching {root}")
    for extra in extra_files:
        parent = Path(extra).resolve().parent
        if not any(parent == root or root in parent.parents for root in roots):
            observer.schedule(handler, str(parent), recursive=False)
    observer.start()
    return observer
