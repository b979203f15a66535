"""cleanrun: run a Node.js script with only the npm packages it requires."""

__version__ = "0.1.0"

from cleanrun.config import RunOptions
from cleanrun.exceptions import (
    CleanRunError,
    InstallError,
    ResolutionError,
    RunError,
    ScanDepthError,
)
from cleanrun.orchestrator import CleanRunOrchestrator, RunOutput
from cleanrun.scanner import DependencyScanner, ModuleResolver, ScanResult, SourceUnit, scan

__all__ = [
    "CleanRunError",
    "CleanRunOrchestrator",
    "DependencyScanner",
    "InstallError",
    "ModuleResolver",
    "ResolutionError",
    "RunError",
    "RunOptions",
    "RunOutput",
    "ScanDepthError",
    "ScanResult",
    "SourceUnit",
    "scan",
]
