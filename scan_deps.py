#!/usr/bin/env python3
"""Standalone dependency scanner — list the npm packages a script requires.

Nothing is installed or run.

Usage:
    python scan_deps.py app.js
    python scan_deps.py app.js --json
    python scan_deps.py app.js --command     # print the npm install command
    cat app.js | python scan_deps.py -
"""

from __future__ import annotations

import argparse
import json
import shlex
import sys

from cleanrun.core.logging import setup_logging
from cleanrun.exceptions import CleanRunError
from cleanrun.orchestrator import CleanRunOrchestrator
from cleanrun.scanner.install_set import install_command
from cleanrun.scanner.models import ScanResult


def _print_result(result: ScanResult, as_json: bool, as_command: bool) -> None:
    if as_json:
        print(
            json.dumps(
                {
                    "packages": result.packages,
                    "scanned": result.scanned,
                    "circular": result.circular,
                },
                indent=2,
            )
        )
        return

    if as_command:
        print(shlex.join(install_command(result.packages)))
        return

    if not result.packages:
        print("No packages required.")
        return

    print(f"Found {len(result.packages)} package(s) in {len(result.scanned)} file(s)\n")
    for name in result.packages:
        print(f"  {name}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="List the npm packages a script requires")
    parser.add_argument("entry", help="Entry script, or - to read it from stdin")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    parser.add_argument(
        "--command", action="store_true", dest="as_command", help="Print the npm install command"
    )
    args = parser.parse_args(argv)
    setup_logging()

    orchestrator = CleanRunOrchestrator()
    try:
        entry = orchestrator.load_entry(args.entry)
        result = orchestrator.scanner.scan(entry)
    except CleanRunError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _print_result(result, args.as_json, args.as_command)
    return 0


if __name__ == "__main__":
    sys.exit(main())
