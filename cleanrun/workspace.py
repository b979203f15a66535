"""Working directory for install + module lookup, with ownership-aware cleanup."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
MODULES_DIR_NAME = "node_modules"


@dataclass
class Workspace:
    """A working directory plus a record of which artifacts this run created."""

    root: Path
    created_root: bool = False
    created_manifest: bool = False
    created_modules: bool = False

    @property
    def manifest(self) -> Path:
        return self.root / MANIFEST_NAME

    @property
    def modules_dir(self) -> Path:
        return self.root / MODULES_DIR_NAME

    @classmethod
    def prepare(cls, root: Path | str) -> Workspace:
        """Make sure *root* and an empty package.json exist.

        Anything that already existed is left alone by :meth:`cleanup`.
        """
        ws = cls(root=Path(root).resolve())
        if not ws.root.exists():
            ws.root.mkdir(parents=True)
            ws.created_root = True
        ws._ensure_manifest()
        ws.created_modules = not ws.modules_dir.exists()
        logger.debug(
            "Workspace %s (created: root=%s manifest=%s modules=%s)",
            ws.root, ws.created_root, ws.created_manifest, ws.created_modules,
        )
        return ws

    @classmethod
    def temporary(cls) -> Workspace:
        """Prepare a fresh temporary directory owned by this run."""
        ws = cls(root=Path(tempfile.mkdtemp(prefix="cleanrun-")).resolve(), created_root=True)
        ws._ensure_manifest()
        ws.created_modules = True
        return ws

    def _ensure_manifest(self) -> None:
        if not self.manifest.exists():
            self.manifest.write_text("{}", encoding="utf-8")
            self.created_manifest = True

    def owned_paths(self) -> list[Path]:
        """Artifacts created by this run, in removal order."""
        paths = []
        if self.created_modules:
            paths.append(self.modules_dir)
        if self.created_manifest:
            paths.append(self.manifest)
        if self.created_root:
            paths.append(self.root)
        return paths

    def cleanup(self) -> list[Path]:
        """Remove the artifacts this run created; return what was removed.

        Missing paths are ignored. Other failures are logged and the
        remaining paths are still attempted.
        """
        removed: list[Path] = []
        for path in self.owned_paths():
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Failed to remove %s: %s", path, e)
                continue
            removed.append(path)
        return removed
