"""Shared pytest fixtures for cleanrun tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from cleanrun.scanner.models import SourceUnit


@pytest.fixture
def write_js(tmp_path: Path):
    """Write a file under tmp_path (creating parents) and return its path."""

    def _write(name: str, content: str = "") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def unit():
    """SourceUnit for an on-disk script, canonicalised the way the resolver does."""

    def _unit(path: Path) -> SourceUnit:
        return SourceUnit.from_file(path.resolve())

    return _unit
