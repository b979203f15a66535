"""Locate the file a local require() refers to, the way Node.js does."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from cleanrun.exceptions import ResolutionError

logger = logging.getLogger(__name__)

# require.extensions, in lookup order
EXTENSIONS = (".js", ".json", ".node")
INDEX_FILES = tuple(f"index{ext}" for ext in EXTENSIONS)


class ModuleResolver:
    """Resolve relative and absolute require() specifiers to canonical file paths."""

    def resolve(self, specifier: str, base_dir: Path | str) -> Path:
        """Resolve *specifier* against *base_dir*.

        Search order:
          1. the exact path, then the path with each of EXTENSIONS appended
             (skipped when the specifier ends with "/")
          2. the "main" field of <path>/package.json
          3. <path>/index.js, index.json, index.node

        Returns:
            Canonical absolute path (symlinks resolved).

        Raises:
            ResolutionError: no candidate exists.
        """
        base = Path(base_dir)
        target = base / specifier
        tried: list[Path] = []

        if not specifier.endswith("/"):
            found = self._load_as_file(target, tried)
            if found:
                return found

        found = self._load_as_directory(target, tried)
        if found:
            return found

        logger.debug("Unresolved module %r from %s (tried %d candidates)", specifier, base, len(tried))
        raise ResolutionError(specifier, base, tried)

    def resolve_entry(self, path: Path | str) -> Path:
        """Resolve the entry script given on the command line."""
        target = Path(path)
        if not target.is_absolute():
            target = Path.cwd() / target
        return self.resolve(str(target), target.parent)

    def _load_as_file(self, target: Path, tried: list[Path]) -> Path | None:
        candidates = [target] + [Path(f"{target}{ext}") for ext in EXTENSIONS]
        for candidate in candidates:
            tried.append(candidate)
            if candidate.is_file():
                return candidate.resolve()
        return None

    def _load_as_directory(self, target: Path, tried: list[Path]) -> Path | None:
        if not target.is_dir():
            return None

        main = self._package_main(target / "package.json")
        if main:
            main_target = target / main
            found = self._load_as_file(main_target, tried) or self._load_index(main_target, tried)
            if found:
                return found

        return self._load_index(target, tried)

    def _load_index(self, directory: Path, tried: list[Path]) -> Path | None:
        for name in INDEX_FILES:
            candidate = directory / name
            tried.append(candidate)
            if candidate.is_file():
                return candidate.resolve()
        return None

    @staticmethod
    def _package_main(manifest: Path) -> str | None:
        if not manifest.is_file():
            return None
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.debug("Ignoring unreadable %s", manifest)
            return None
        main = data.get("main") if isinstance(data, dict) else None
        return main if isinstance(main, str) and main else None
