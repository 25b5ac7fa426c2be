"""Breakpoint token scanning over files matched by glob patterns."""

import glob
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import chain
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence, Union

from ..models.token import BreakpointToken, Direction, TokenSet

logger = logging.getLogger(__name__)

# Classes like media-max-1209:text-black or media-min-640:w-[50%]
TOKEN_PATTERN = re.compile(r"media-(max|min)-([0-9]+):([A-Za-z0-9_\-/\[\].%]+)")


class ScanFileError(Exception):
    """Raised when a source file cannot be read or decoded as UTF-8 text."""
    pass


@dataclass
class ScanReport:
    """Outcome of one scan: tokens plus the files read and skipped."""
    tokens: TokenSet = field(default_factory=dict)
    files: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)


def parse_tokens(text: str) -> List[BreakpointToken]:
    """Extract every breakpoint token from text, in order of appearance.

    Each call uses a fresh iterator so no match position leaks between texts.
    """
    return [
        BreakpointToken(
            direction=Direction(match.group(1)),
            pixels=int(match.group(2)),
            utility_class=match.group(3),
            raw_token=match.group(0),
        )
        for match in TOKEN_PATTERN.finditer(text)
    ]


def _split_top_level(body: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for ch in body:
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
        if ch == ',' and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(ch)
    parts.append(''.join(current))
    return parts


def expand_braces(pattern: str) -> List[str]:
    """Expand {a,b} alternatives in a glob pattern (nested groups allowed)."""
    depth = 0
    start = 0
    for i, ch in enumerate(pattern):
        if ch == '{':
            if depth == 0:
                start = i
            depth += 1
        elif ch == '}' and depth > 0:
            depth -= 1
            if depth == 0:
                options = _split_top_level(pattern[start + 1:i])
                if len(options) < 2:
                    continue
                prefix, suffix = pattern[:start], pattern[i + 1:]
                expanded: List[str] = []
                for option in options:
                    for candidate in expand_braces(prefix + option + suffix):
                        if candidate not in expanded:
                            expanded.append(candidate)
                return expanded
    return [pattern]


def glob_to_regex(pattern: str, prefix: str = '') -> Pattern[str]:
    """Compile a brace-free glob pattern to a regex over '/'-separated paths.

    `**` spans directories, `*` and `?` stay within one path segment.
    `prefix` is matched literally ahead of the pattern.
    """
    out = [re.escape(prefix)]
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith('**/', i):
            out.append('(?:.*/)?')
            i += 3
            continue
        if pattern.startswith('**', i):
            out.append('.*')
            i += 2
            continue
        ch = pattern[i]
        if ch == '*':
            out.append('[^/]*')
        elif ch == '?':
            out.append('[^/]')
        elif ch == '[':
            end = pattern.find(']', i + 2)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1:end]
                if body.startswith('!'):
                    body = '^' + body[1:]
                out.append('[' + body.replace('\\', '\\\\') + ']')
                i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile('(?s:' + ''.join(out) + r')\Z')


def _absolute_pattern(pattern: str, cwd: Path) -> str:
    if os.path.isabs(pattern):
        return pattern
    return os.path.join(glob.escape(str(cwd)), pattern)


def _posix(path: Union[str, Path]) -> str:
    return Path(path).as_posix()


def compile_patterns(patterns: Iterable[str], cwd: Optional[Path] = None) -> List[Pattern[str]]:
    """Compile glob patterns (braces expanded) to regexes over absolute posix paths."""
    base = (cwd or Path.cwd()).resolve()
    compiled = []
    for pattern in patterns:
        for variant in expand_braces(pattern):
            if os.path.isabs(variant):
                compiled.append(glob_to_regex(_posix(os.path.normpath(variant))))
                continue
            # Base directory is matched literally
            root = base
            parts = _posix(os.path.normpath(variant)).split('/')
            while parts and parts[0] in ('.', '..'):
                if parts.pop(0) == '..':
                    root = root.parent
            prefix = _posix(root).rstrip('/') + '/'
            compiled.append(glob_to_regex('/'.join(parts), prefix=prefix))
    return compiled


def matches_any(path: Union[str, Path], compiled: Sequence[Pattern[str]]) -> bool:
    target = _posix(path)
    return any(regex.match(target) for regex in compiled)


def _split_exclusions(patterns: Sequence[str]):
    includes = [p for p in patterns if p and not p.startswith('!')]
    excludes = [p[1:] for p in patterns if p.startswith('!') and len(p) > 1]
    return includes, excludes


def expand_patterns(patterns: Sequence[str], cwd: Optional[Path] = None) -> List[Path]:
    """Resolve glob patterns to a sorted, de-duplicated list of files.

    Patterns are relative to `cwd` (default: process cwd). Directories are
    excluded. Patterns prefixed with '!' remove matching files.
    """
    base = (cwd or Path.cwd()).resolve()
    includes, excludes = _split_exclusions(patterns)
    excluded = compile_patterns(excludes, base)

    found = set()
    for pattern in includes:
        for variant in expand_braces(pattern):
            for match in glob.glob(_absolute_pattern(variant, base), recursive=True):
                path = Path(match)
                if not path.is_file():
                    continue
                if excluded and matches_any(path, excluded):
                    continue
                found.add(path)
    return sorted(found, key=lambda p: p.as_posix())


def read_source_file(path: Path) -> str:
    """Read a source file as UTF-8 text.

    Raises:
        ScanFileError: If the file cannot be opened or decoded
    """
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ScanFileError(f"Could not read file {path}: {e}") from e


def _scan_file(path: Path) -> Optional[List[BreakpointToken]]:
    try:
        return parse_tokens(read_source_file(path))
    except ScanFileError as e:
        logger.warning(f"Warning: {e}. Skipping.")
        return None


def scan_with_report(
    patterns: Union[str, Sequence[str], None],
    raw_sources: Sequence[str] = (),
    cwd: Optional[Path] = None,
    max_workers: Optional[int] = None,
) -> ScanReport:
    """Scan files matched by `patterns` (plus inline raw sources) for breakpoint tokens.

    Files are read in parallel but merged in sorted path order, so the
    resulting TokenSet order is deterministic. First occurrence wins.
    """
    if isinstance(patterns, str):
        patterns = [patterns]
    patterns = list(patterns or [])

    report = ScanReport()
    if not patterns:
        logger.warning(
            "Warning: No content paths specified in the engine configuration. "
            "No files will be scanned for dynamic breakpoints."
        )

    report.files = expand_patterns(patterns, cwd) if patterns else []
    if report.files:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_file = list(executor.map(_scan_file, report.files))
    else:
        per_file = []

    for path, found in zip(report.files, per_file):
        if found is None:
            report.skipped.append(path)

    for found in chain(per_file, (parse_tokens(raw) for raw in raw_sources)):
        for token in found or ():
            report.tokens.setdefault(token.raw_token, token)

    logger.debug(f"Scanned {len(report.files)} file(s), found {len(report.tokens)} unique token(s)")
    return report


def scan(
    patterns: Union[str, Sequence[str], None],
    raw_sources: Sequence[str] = (),
    cwd: Optional[Path] = None,
    max_workers: Optional[int] = None,
) -> TokenSet:
    """Scan glob patterns for breakpoint tokens. See scan_with_report."""
    return scan_with_report(patterns, raw_sources, cwd=cwd, max_workers=max_workers).tokens
