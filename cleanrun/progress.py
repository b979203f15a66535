"""Phase tracking for the scan → prepare → install → run → cleanup pipeline."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

PHASES = ("scan", "prepare", "install", "run", "cleanup")


@dataclass
class PhaseProgress:
    phase: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed" | "skipped"
    started_at: float | None = None
    ended_at: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.started_at is not None and self.ended_at is not None:
            return round(self.ended_at - self.started_at, 3)
        return None


class ProgressTracker:
    """Record the status of each pipeline phase and notify callbacks on change."""

    def __init__(self) -> None:
        self._phases: dict[str, PhaseProgress] = {name: PhaseProgress(name) for name in PHASES}
        self.callbacks: list[Callable[[PhaseProgress], None]] = []

    def __getitem__(self, phase: str) -> PhaseProgress:
        return self._phases[phase]

    @contextmanager
    def track(self, phase: str) -> Iterator[PhaseProgress]:
        """Mark *phase* running for the duration of the block.

        The phase is completed when the block exits normally and failed
        (with the exception message) when it raises; the exception propagates.
        """
        p = self._phases[phase]
        p.status = "running"
        p.started_at = time.monotonic()
        self._notify(p)
        try:
            yield p
        except BaseException as e:
            p.status = "failed"
            p.error = str(e) or type(e).__name__
            raise
        else:
            p.status = "completed"
        finally:
            p.ended_at = time.monotonic()
            self._notify(p)

    def skip(self, phase: str, reason: str) -> None:
        p = self._phases[phase]
        p.status = "skipped"
        p.detail = reason
        self._notify(p)

    def get_summary(self) -> list[dict[str, Any]]:
        return [
            {
                "phase": p.phase,
                "status": p.status,
                "duration": p.duration,
                "detail": p.detail,
                "error": p.error,
            }
            for p in self._phases.values()
        ]

    def _notify(self, p: PhaseProgress) -> None:
        for cb in self.callbacks:
            try:
                cb(p)
            except Exception:
                logger.debug("Progress callback error for phase %s", p.phase, exc_info=True)
