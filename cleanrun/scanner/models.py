"""Data models for the dependency scanner."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

STDIN_PATH = "-"


@dataclass(frozen=True)
class SourceUnit:
    """A script to scan: an on-disk file, or an in-memory blob (stdin).

    ``content`` is None for on-disk files; for blobs ``path`` is a virtual
    path that never touches the filesystem.
    """

    path: str
    content: str | None = None

    @classmethod
    def from_file(cls, path: Path | str) -> SourceUnit:
        return cls(path=str(path))

    @classmethod
    def from_text(cls, content: str, virtual_path: str = STDIN_PATH) -> SourceUnit:
        return cls(path=virtual_path, content=content)

    @property
    def is_virtual(self) -> bool:
        return self.content is not None

    @property
    def identity(self) -> str:
        """Key used for cycle detection (the path, never the content)."""
        return self.path

    @property
    def base_dir(self) -> Path:
        """Directory relative imports are resolved against.

        Blobs resolve against the current working directory.
        """
        if self.is_virtual:
            return Path(os.getcwd())
        return Path(self.path).parent

    def read(self) -> str:
        if self.content is not None:
            return self.content
        return Path(self.path).read_text(encoding="utf-8", errors="replace")


@dataclass
class ScanResult:
    """Outcome of one scan: external packages plus bookkeeping of the walk."""

    dependencies: set[str] = field(default_factory=set)
    scanned: list[str] = field(default_factory=list)
    circular: list[str] = field(default_factory=list)

    @property
    def packages(self) -> list[str]:
        """Deduplicated package names in a stable order."""
        return sorted(self.dependencies)
