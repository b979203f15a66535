"""Run options and environment defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import structlog

log = structlog.get_logger("cleanrun.config")


def _env_max_depth() -> int | None:
    """Parse CLEANRUN_MAX_DEPTH; unset, malformed or non-positive means no cap."""
    raw = os.environ.get("CLEANRUN_MAX_DEPTH")
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        log.warning("config.invalid_max_depth", value=raw)
        return None
    return value if value > 0 else None


# Default executables (overridable via env vars)
DEFAULT_NPM = os.environ.get("CLEANRUN_NPM", "npm")
DEFAULT_NODE = os.environ.get("CLEANRUN_NODE", "node")
DEFAULT_MAX_DEPTH = _env_max_depth()


@dataclass
class RunOptions:
    """Options for a single cleanrun invocation."""

    silent: bool = False
    clean: bool = False
    cwd: Path | None = None  # None -> current directory
    temp: bool = False
    npm: str = DEFAULT_NPM
    node: str = DEFAULT_NODE
    max_depth: int | None = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.temp and self.cwd is not None:
            raise ValueError("cwd and temp are mutually exclusive")
        if self.cwd is not None:
            self.cwd = Path(self.cwd).resolve()
