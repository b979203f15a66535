"""Dependency scanner — find the npm packages a script requires."""

from cleanrun.scanner.install_set import ImportKind, classify, install_command, package_name
from cleanrun.scanner.models import ScanResult, SourceUnit
from cleanrun.scanner.resolver import ModuleResolver
from cleanrun.scanner.scanner import DependencyScanner, extract_requires, scan

__all__ = [
    "DependencyScanner",
    "ImportKind",
    "ModuleResolver",
    "ScanResult",
    "SourceUnit",
    "classify",
    "extract_requires",
    "install_command",
    "package_name",
    "scan",
]
