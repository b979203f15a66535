"""Custom exceptions for cleanrun."""

from __future__ import annotations

from pathlib import Path


class CleanRunError(Exception):
    """Base exception for all cleanrun errors."""

    exit_code = 1


class ResolutionError(CleanRunError):
    """Raised when a local import (or the entry file) cannot be located on disk."""

    def __init__(self, specifier: str, base_dir: Path | str, tried: list[Path] | None = None):
        self.specifier = specifier
        self.base_dir = Path(base_dir)
        self.tried = tried or []
        super().__init__(f"Cannot find module '{specifier}' from {self.base_dir}")


class ScanDepthError(CleanRunError):
    """Raised when local imports nest deeper than the configured limit."""

    def __init__(self, path: str, max_depth: int):
        self.path = path
        self.max_depth = max_depth
        super().__init__(f"Local import depth exceeded {max_depth} at {path}")


class ProcessError(CleanRunError):
    """Raised when a child process fails to start, exits non-zero or is killed."""

    label = "Process"

    def __init__(self, cmd: list[str], returncode: int | None, reason: str | None = None):
        self.cmd = cmd
        self.returncode = returncode
        if reason is None:
            if returncode is not None and returncode < 0:
                reason = f"killed by signal {-returncode}"
            else:
                reason = f"exit {returncode}"
        super().__init__(f"{self.label} failed ({reason}): {' '.join(cmd)}")


class InstallError(ProcessError):
    """Raised when the package installer fails."""

    label = "Install"


class RunError(ProcessError):
    """Raised when the target script exits non-zero; exit status passes through."""

    label = "Run"

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        if self.returncode is None:
            return 1
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode
