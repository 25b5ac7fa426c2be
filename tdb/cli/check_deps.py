"""Verify that the Tailwind CSS CLI, Node.js and required Python packages are available."""

from __future__ import annotations

import re
import shutil
import subprocess
import sys
from typing import List, Tuple

from ..config.settings import get_node_bin, get_tailwind_bin

_VERSION = re.compile(r"v?(\d+\.\d+\.\d+)")


def _binary_version(cmd: List[str]) -> Tuple[bool, str]:
    """Run `cmd` and return (ok, version or error message)."""
    if shutil.which(cmd[0]) is None:
        return False, f"Not found on PATH: {cmd[0]}"
    try:
        completed = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as e:
        return False, str(e).split("\n")[0].strip()
    match = _VERSION.search((completed.stdout or "") + (completed.stderr or ""))
    return True, f"OK, version {match.group(1)}" if match else "OK"


def check_dependencies() -> List[Tuple[str, bool, str]]:
    """Check required dependencies. Returns list of (name, ok, message)."""
    results: List[Tuple[str, bool, str]] = []

    # --- Python packages ---
    try:
        import yaml
        results.append(("PyYAML", True, "OK"))
    except ImportError as e:
        results.append(("PyYAML", False, f"Missing: {e}"))

    try:
        import watchdog
        results.append(("watchdog (watch mode)", True, "OK"))
    except ImportError as e:
        results.append(("watchdog (watch mode)", False, f"Missing: {e}"))

    # --- External programs ---
    ok, msg = _binary_version([get_tailwind_bin(), "--help"])
    if ok and msg.startswith("OK, version 4"):
        msg += " (tdb needs Tailwind CSS v3; set TAILWINDCSS_VERSION=v3.4.17 for pytailwindcss)"
        ok = False
    results.append(("Tailwind CSS CLI", ok, msg))

    ok, msg = _binary_version([get_node_bin(), "--version"])
    if not ok:
        msg += " (only needed for .js/.cjs/.mjs configs)"
    results.append(("Node.js", ok, msg))

    return results


def run_check(verbose: bool = True) -> bool:
    """Run dependency check, print report, return True if all OK."""
    results = check_dependencies()
    ok_count = sum(1 for _, ok, _ in results if ok)
    all_ok = ok_count == len(results)

    if verbose:
        print("Dependency check\n")
        for name, ok, msg in results:
            if ok and msg == "OK":
                print(f"  {name}: OK")
            else:
                status = "OK" if ok else "MISSING/ERROR"
                print(f"  {name}: {status}  {msg}")
        print()
        if all_ok:
            print("All checked dependencies are available.")
        else:
            print(f"Problems with {len(results) - ok_count} of {len(results)}. Install missing packages with: pip install -e .")

    return all_ok


def main() -> int:
    return 0 if run_check(verbose=True) else 1


if __name__ == "__main__":
    sys.exit(main())
