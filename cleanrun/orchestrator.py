"""Run orchestrator — scan, install, run, clean up."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

import structlog

from cleanrun.config import RunOptions
from cleanrun.process import install_packages, run_script
from cleanrun.progress import PhaseProgress, ProgressTracker
from cleanrun.scanner.models import STDIN_PATH, ScanResult, SourceUnit
from cleanrun.scanner.resolver import ModuleResolver
from cleanrun.scanner.scanner import DependencyScanner
from cleanrun.workspace import Workspace

log = structlog.get_logger("cleanrun.orchestrator")


@dataclass
class RunOutput:
    """Orchestrator return value."""

    packages: list[str]
    workspace: Workspace
    scan: ScanResult


class CleanRunOrchestrator:
    """
    Run a script with only the packages it requires installed.

    Phase 1: scan the entry script and its local requires
    Phase 2: prepare the working directory (package.json, ownership record)
    Phase 3: npm install --no-save <packages>
    Phase 4: node <entry> [args...] with NODE_PATH=<cwd>/node_modules
    Phase 5: remove what phase 2/3 created, if cleaning was requested

    Each phase raises on failure and later phases are not run, except
    cleanup, which runs whether or not install/run succeeded.
    """

    def __init__(
        self,
        options: RunOptions | None = None,
        scanner: DependencyScanner | None = None,
    ) -> None:
        self.options = options or RunOptions()
        self.resolver = ModuleResolver()
        self.scanner = scanner or DependencyScanner(self.resolver, self.options.max_depth)
        self.progress = ProgressTracker()

    def _new_progress(self) -> ProgressTracker:
        """Create a fresh ProgressTracker for each run."""
        tracker = ProgressTracker()
        tracker.callbacks.append(self._log_phase)
        return tracker

    @staticmethod
    def _log_phase(phase: PhaseProgress) -> None:
        log.debug(
            "orchestrator.phase",
            phase=phase.phase,
            status=phase.status,
            duration=phase.duration,
            detail=phase.detail or None,
            error=phase.error,
        )

    def load_entry(self, entry_file: str, stdin: IO[str] | None = None) -> SourceUnit:
        """Turn the command-line entry into a SourceUnit.

        ``-`` reads *stdin* (default: ``sys.stdin``) to the end; anything else
        is resolved like Node resolves a script path.
        """
        if entry_file == STDIN_PATH:
            stream = stdin if stdin is not None else sys.stdin
            return SourceUnit.from_text(stream.read())
        return SourceUnit.from_file(self.resolver.resolve_entry(entry_file))

    def _workspace(self) -> Workspace:
        if self.options.temp:
            return Workspace.temporary()
        return Workspace.prepare(self.options.cwd or Path.cwd())

    async def run(
        self,
        entry_file: str,
        script_args: Sequence[str] = (),
        stdin: IO[str] | None = None,
    ) -> RunOutput:
        """Full pipeline entry point.

        Raises ResolutionError / ScanDepthError before anything is written,
        InstallError before the script is started, RunError when the script
        itself fails.
        """
        progress = self._new_progress()
        self.progress = progress  # expose last run's progress for callers
        structlog.contextvars.bind_contextvars(entry=entry_file)
        try:
            return await self._run(progress, entry_file, script_args, stdin)
        finally:
            structlog.contextvars.unbind_contextvars("entry")

    async def _run(
        self,
        progress: ProgressTracker,
        entry_file: str,
        script_args: Sequence[str],
        stdin: IO[str] | None,
    ) -> RunOutput:
        opts = self.options

        with progress.track("scan") as phase:
            entry = self.load_entry(entry_file, stdin)
            result = self.scanner.scan(entry)
            packages = result.packages
            phase.detail = f"{len(packages)} package(s) from {len(result.scanned)} file(s)"

        with progress.track("prepare") as phase:
            workspace = self._workspace()
            phase.detail = str(workspace.root)

        try:
            if packages:
                with progress.track("install"):
                    await install_packages(
                        packages, workspace.root, npm=opts.npm, silent=opts.silent
                    )
            else:
                progress.skip("install", "no packages required")

            with progress.track("run"):
                await run_script(
                    [entry_file, *script_args],
                    modules_dir=workspace.modules_dir,
                    node=opts.node,
                    stdin=entry.content,
                )
        finally:
            if opts.clean:
                with progress.track("cleanup") as phase:
                    removed = workspace.cleanup()
                    phase.detail = f"removed {len(removed)} path(s)"
            else:
                progress.skip("cleanup", "clean not requested")

        return RunOutput(packages=packages, workspace=workspace, scan=result)
