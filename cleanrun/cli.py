"""CLI entry point: cleanrun.

Usage:
    cleanrun script.js --flag value     # install what script.js requires, then run it
    cat script.js | cleanrun -          # script from stdin
    cleanrun -sc -C /tmp/work script.js # quiet npm, clean up afterwards
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from cleanrun.config import DEFAULT_MAX_DEPTH, DEFAULT_NODE, DEFAULT_NPM, RunOptions
from cleanrun.core.logging import setup_logging
from cleanrun.exceptions import CleanRunError
from cleanrun.orchestrator import CleanRunOrchestrator


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        # everything after the entry file belongs to the script
        "allow_interspersed_args": False,
    }
)
@click.option("-s", "--silent", is_flag=True, help="Suppress npm logs")
@click.option("-c", "--clean", is_flag=True, help="Clean up created files after running")
@click.option(
    "-C",
    "--cwd",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working directory for install and module lookup (removed by -c if created)",
)
@click.option("-t", "--temp", is_flag=True, help="Use a fresh temporary working directory")
@click.option("--npm", default=DEFAULT_NPM, show_default=True, help="npm executable")
@click.option("--node", default=DEFAULT_NODE, show_default=True, help="node executable")
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DEPTH,
    help="Fail if local requires nest deeper than this",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.argument("entry_file")
@click.argument("script_args", nargs=-1, type=click.UNPROCESSED)
def main(
    silent: bool,
    clean: bool,
    cwd: Path | None,
    temp: bool,
    npm: str,
    node: str,
    max_depth: int | None,
    verbose: bool,
    entry_file: str,
    script_args: tuple[str, ...],
) -> None:
    """Run ENTRY_FILE with only the npm packages it requires installed.

    ENTRY_FILE is the main script; use - to read it from stdin.
    """
    setup_logging("DEBUG" if verbose else None)

    if cwd is not None and temp:
        raise click.UsageError("-C/--cwd and -t/--temp are mutually exclusive")

    options = RunOptions(
        silent=silent,
        clean=clean,
        cwd=cwd,
        temp=temp,
        npm=npm,
        node=node,
        max_depth=max_depth,
    )
    orchestrator = CleanRunOrchestrator(options)
    stdin = click.get_text_stream("stdin")

    try:
        asyncio.run(orchestrator.run(entry_file, list(script_args), stdin=stdin))
    except CleanRunError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
