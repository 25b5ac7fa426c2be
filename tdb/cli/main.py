"""CLI interface for tdb: generate media-query CSS for dynamic breakpoint classes."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Fix encoding for Windows console
if sys.platform == "win32":
    try:
        sys.stdout.reconfigure(encoding='utf-8')
    except (AttributeError, ValueError):
        pass  # already configured

from ..config.engine_config import ConfigError, load_engine_config
from ..config.settings import get_app_version
from ..controller import GenerateOptions, RegenerationController, generate
from ..pipeline.assembler import ORDER_SCAN, ORDERS
from ..run_summary import RunSummary
from ..watch.watcher import start_watching

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "./dynamic-breakpoints.css"
DEFAULT_CONFIG = "tailwind.config.js"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tdb",
        description="Generate media-query CSS for media-max-<px>:/media-min-<px>: utility classes"
    )

    parser.add_argument(
        "-o", "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output CSS file path (default: {DEFAULT_OUTPUT})"
    )

    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to the Tailwind config providing `content` globs (default: {DEFAULT_CONFIG})"
    )

    parser.add_argument(
        "-w", "--watch",
        action="store_true",
        help="Watch content files and regenerate on change"
    )

    parser.add_argument(
        "-p", "--post-command",
        default=None,
        help='Command to execute after each successful generation '
             '(e.g. "npx tailwindcss -i ./src/input.css -o ./src/output.css")'
    )

    parser.add_argument(
        "--order",
        choices=ORDERS,
        default=ORDER_SCAN,
        help="Media block order: 'scan' (first seen) or 'pixels' (max-width widest first, then min-width narrowest first)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output"
    )

    parser.add_argument(
        "--check-deps",
        action="store_true",
        help="Check that Tailwind CSS, Node.js and Python dependencies are available, then exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_app_version()}"
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


def _print_summary(summary: RunSummary) -> None:
    if not summary.succeeded:
        return
    if summary.unresolved:
        print(f"  Unresolved: {len(summary.unresolved)} token(s) omitted ({', '.join(summary.unresolved)})")
    if summary.skipped_files:
        print(f"  Skipped: {len(summary.skipped_files)} unreadable file(s)")


def run_watch(options: GenerateOptions) -> int:
    """Generate once, then regenerate on every content change until interrupted.

    Returns:
        Process exit code
    """
    controller = RegenerationController(lambda: generate(options))
    _print_summary(controller.run_once())

    try:
        config = load_engine_config(options.config, cwd=options.cwd)
    except ConfigError as e:
        print(f"Error: Could not load config for watch mode: {e}", file=sys.stderr)
        return 1

    if not config.content:
        logger.warning("Warning: No content paths specified in the engine configuration. "
                       "Watch mode will not track any files.")
        return 0 if controller.last_summary and controller.last_summary.succeeded else 1

    controller.add_state_listener(lambda state: logger.debug(f"State: {state}"))
    controller.start()
    observer = start_watching(controller.trigger, config.content, extra_files=[config.path], cwd=options.cwd)
    print(f"Watching for changes in: {', '.join(config.content)}")

    try:
        while observer.is_alive():
            observer.join(1)
    except KeyboardInterrupt:
        print("\nStopping watch mode.")
    finally:
        observer.stop()
        observer.join()
        controller.stop()
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.check_deps:
        from .check_deps import main as check_deps_main
        sys.exit(check_deps_main())

    options = GenerateOptions(
        output=Path(args.output),
        config=Path(args.config),
        post_command=args.post_command,
        order=args.order,
    )

    if args.watch:
        sys.exit(run_watch(options))

    summary = generate(options)
    _print_summary(summary)
    sys.exit(0 if summary.succeeded else 1)


if __name__ == "__main__":
    main()
