"""Regeneration controller: runs the pipeline once, or repeatedly on file changes."""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .config.engine_config import ConfigError, EngineConfig, load_engine_config
from .config.settings import get_debounce_seconds, get_scan_workers
from .engine.base import CssEngine, EngineError
from .engine.tailwind import TailwindEngine
from .pipeline.assembler import ORDER_SCAN, assemble, count_rules
from .pipeline.post_command import PostCommandError, run_post_command
from .pipeline.resolver import resolve_all
from .pipeline.scanner import scan_with_report
from .pipeline.writer import WriteError, write_output
from .run_summary import RunSummary

logger = logging.getLogger(__name__)

# Controller states
STATE_IDLE = "Idle"
STATE_RUNNING = "Running"
STATE_SUCCESS = "Success"
STATE_FAILED = "Failed"

EngineFactory = Callable[[EngineConfig], CssEngine]


@dataclass
class GenerateOptions:
    """Settings for one generation run (mirrors the CLI flags)."""
    output: Path
    config: Path
    post_command: Optional[str] = None
    order: str = ORDER_SCAN
    cwd: Optional[Path] = None


def generate(options: GenerateOptions, engine_factory: EngineFactory = TailwindEngine) -> RunSummary:
    """Run scan -> resolve -> assemble -> write once for the whole file set.

    Config, engine and write failures end the run as FAILED; they are
    logged and recorded on the summary rather than raised. A failing
    post-command is logged but the run still counts as a success.

    Args:
        options: Output/config paths and optional post-command
        engine_factory: Builds the CSS engine from the loaded config

    Returns:
        RunSummary with status SUCCESS or FAILED
    """
    summary = RunSummary.create(options.config, options.output)
    started = time.perf_counter()

    try:
        # Step 1: Load engine config (reloaded every run so edits are picked up)
        config = load_engine_config(options.config, cwd=options.cwd)

        # Step 2: Scan content files
        t0 = time.perf_counter()
        report = scan_with_report(
            config.content,
            config.raw_sources,
            cwd=options.cwd,
            max_workers=get_scan_workers(),
        )
        summary.durations["scan"] = time.perf_counter() - t0
        summary.files_scanned = len(report.files)
        summary.skipped_files = [str(p) for p in report.skipped]
        summary.token_count = len(report.tokens)

        # Step 3: Resolve utility classes
        t0 = time.perf_counter()
        resolved = []
        if report.tokens:
            engine = engine_factory(config)
            try:
                engine.check()
                resolved = resolve_all(report.tokens.values(), engine)
            finally:
                engine.close()
        summary.durations["resolve"] = time.perf_counter() - t0
        summary.unresolved = [r.token.raw_token for r in resolved if not r.is_resolved]

        # Step 4: Assemble and write
        css = assemble(resolved, options.order)
        write_output(options.output, css)
        summary.rule_count = count_rules(resolved)
    except (ConfigError, EngineError, WriteError) as e:
        logger.error(f"Error: {e}")
        summary.fail(str(e))
        summary.durations["total"] = time.perf_counter() - started
        return summary

    count = summary.rule_count
    logger.info(f"Successfully generated {count} rule{'' if count == 1 else 's'} to {options.output}")

    if options.post_command:
        try:
            run_post_command(options.post_command, cwd=str(options.cwd) if options.cwd else None)
            summary.post_command_ok = True
        except PostCommandError as e:
            # Does not change the run outcome
            logger.error(f"Error executing post-command: {e}")
            summary.post_command_ok = False

    summary.complete()
    summary.durations["total"] = time.perf_counter() - started
    logger.info(f"Done in {summary.durations['total']:.2f}s")
    return summary


class RegenerationController:
    """Serializes pipeline runs.

    `trigger()` may be called from any thread. Triggers arriving while a
    run is in progress collapse into a single follow-up run; bursts within
    `debounce` seconds of the first trigger collapse into one run.
    """

    def __init__(self, run: Callable[[], RunSummary], debounce: Optional[float] = None):
        self._run = run
        self.debounce = get_debounce_seconds() if debounce is None else debounce
        self.state = STATE_IDLE
        self.last_summary: Optional[RunSummary] = None
        self.run_count = 0
        self._listeners: List[Callable[[str], None]] = []
        self._pending = threading.Event()
        self._stopping = threading.Event()
        self._run_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def add_state_listener(self, listener: Callable[[str], None]) -> None:
        """Register a callback invoked with every new state."""
        self._listeners.append(listener)

    def _set_state(self, state: str) -> None:
        self.state = state
        for listener in self._listeners:
            listener(state)

    def run_once(self) -> RunSummary:
        """Execute one full pipeline run in the calling thread."""
        with self._run_lock:
            self._set_state(STATE_RUNNING)
            summary = self._run()
            self.run_count += 1
            self.last_summary = summary
            self._set_state(STATE_SUCCESS if summary.succeeded else STATE_FAILED)
            return summary

    def trigger(self, reason: Optional[str] = None) -> None:
        """Request a regeneration; coalesced with any pending request."""
        if reason:
            logger.info(f"File changed: {reason}, regenerating...")
        self._pending.set()

    def start(self) -> None:
        """Start the background worker that services triggers."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._worker, name="tdb-regeneration", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the worker; an in-flight run is allowed to finish."""
        self._stopping.set()
        self._pending.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _worker(self) -> None:
        while True:
            self._pending.wait()
            if self._stopping.is_set():
                return
            if self.debounce > 0 and self._stopping.wait(self.debounce):
                return
            self._pending.clear()
            try:
                self.run_once()
            except Exception:
                # The watcher outlives any single failed run
                logger.exception("Unexpected error during regeneration")
                self._set_state(STATE_FAILED)
            self._set_state(STATE_IDLE)
