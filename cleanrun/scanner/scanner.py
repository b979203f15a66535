"""DependencyScanner — walk an entry script and its local requires for npm packages."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from cleanrun.exceptions import ScanDepthError
from cleanrun.scanner.install_set import ImportKind, classify, package_name
from cleanrun.scanner.models import ScanResult, SourceUnit
from cleanrun.scanner.resolver import ModuleResolver

log = structlog.get_logger("cleanrun.scanner")

# require("x") / require('x'), matching quotes, no whitespace inside the parens.
# Comments, template literals, concatenated or computed specifiers and
# import/export syntax are not recognised.
REQUIRE_RE = re.compile(r"""\brequire\((['"])([^'"]*)\1""")

# Targets that Node loads without evaluating them as CommonJS source
_LEAF_SUFFIXES = {".json", ".node"}


def extract_requires(code: str) -> list[str]:
    """Return every require() specifier in *code*, in source order."""
    return [m.group(2) for m in REQUIRE_RE.finditer(code)]


@dataclass
class _Frame:
    unit: SourceUnit
    specifiers: Iterator[str]


@dataclass
class _Walk:
    """State of one scan call: visited units, the active path and the result."""

    resolver: ModuleResolver
    max_depth: int | None
    result: ScanResult = field(default_factory=ScanResult)
    visited: set[str] = field(default_factory=set)
    active: set[str] = field(default_factory=set)
    stack: list[_Frame] = field(default_factory=list)

    def enter(self, unit: SourceUnit) -> None:
        key = unit.identity
        if key in self.active:
            log.warning("scanner.possible_circular_dependency", path=key)
            self.result.circular.append(key)
            return
        if key in self.visited:
            log.debug("scanner.already_scanned", path=key)
            return
        if self.max_depth is not None and len(self.stack) >= self.max_depth:
            raise ScanDepthError(key, self.max_depth)

        self.visited.add(key)
        self.active.add(key)
        self.result.scanned.append(key)

        if not unit.is_virtual and Path(unit.path).suffix in _LEAF_SUFFIXES:
            specifiers: list[str] = []
        else:
            specifiers = extract_requires(unit.read())
        log.debug("scanner.unit_scanned", path=key, requires=len(specifiers))
        self.stack.append(_Frame(unit, iter(specifiers)))

    def leave(self) -> None:
        frame = self.stack.pop()
        self.active.discard(frame.unit.identity)

    def handle(self, unit: SourceUnit, specifier: str) -> None:
        if not specifier:
            return
        kind = classify(specifier)
        if kind in (ImportKind.RELATIVE, ImportKind.ABSOLUTE):
            target = self.resolver.resolve(specifier, unit.base_dir)
            self.enter(SourceUnit.from_file(target))
        elif kind in (ImportKind.SCOPED, ImportKind.BARE):
            self.result.dependencies.add(package_name(specifier))


def scan(
    entry: SourceUnit,
    *,
    resolver: ModuleResolver | None = None,
    max_depth: int | None = None,
) -> ScanResult:
    """Scan *entry* and every local module it requires, transitively.

    Local requires are followed depth-first, in the order they appear, before
    the next require of the same unit is looked at. Each unit is read at most
    once; a unit required again while it is still being walked is reported as
    a possible circular dependency and skipped.

    Raises:
        ResolutionError: a local require cannot be located on disk.
        ScanDepthError: local requires nest deeper than *max_depth*.
    """
    walk = _Walk(resolver=resolver or ModuleResolver(), max_depth=max_depth)
    walk.enter(entry)
    while walk.stack:
        frame = walk.stack[-1]
        specifier = next(frame.specifiers, None)
        if specifier is None:
            walk.leave()
            continue
        walk.handle(frame.unit, specifier)

    log.info(
        "scanner.done",
        entry=entry.identity,
        units=len(walk.result.scanned),
        packages=len(walk.result.dependencies),
    )
    return walk.result


class DependencyScanner:
    """Reusable scanner bound to a resolver and depth limit."""

    def __init__(
        self,
        resolver: ModuleResolver | None = None,
        max_depth: int | None = None,
    ) -> None:
        self._resolver = resolver or ModuleResolver()
        self._max_depth = max_depth

    def scan(self, entry: SourceUnit) -> ScanResult:
        return scan(entry, resolver=self._resolver, max_depth=self._max_depth)
