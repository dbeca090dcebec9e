"""Progress reporting for catalog downloads.

Downloads push one :class:`DownloadEvent` per finished mod into a
:class:`ProgressTracker` owned by the caller. The tracker keeps the tally and
forwards each event to registered callbacks; nothing polls shared counters.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadEvent:
    name: str
    ok: bool
    completed: int
    total: int
    error: str | None = None


class ProgressTracker:
    """Track how many mod detail files have been fetched."""

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self.completed = 0
        self.failed: dict[str, str] = {}
        self.start_time: float | None = None
        self.end_time: float | None = None
        self.callbacks: list[Callable[[DownloadEvent], None]] = []

    def start(self, total: int) -> None:
        self.total = total
        self.completed = 0
        self.failed.clear()
        self.start_time = time.monotonic()
        self.end_time = None

    def record(self, name: str, error: str | None = None) -> DownloadEvent:
        self.completed += 1
        if error is not None:
            self.failed[name] = error
        event = DownloadEvent(
            name=name,
            ok=error is None,
            completed=self.completed,
            total=self.total,
            error=error,
        )
        self._notify(event)
        return event

    def finish(self) -> None:
        self.end_time = time.monotonic()

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 2)
        return None

    def get_summary(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "failed": dict(self.failed),
            "duration": self.duration,
        }

    def _notify(self, event: DownloadEvent) -> None:
        for cb in self.callbacks:
            try:
                cb(event)
            except Exception:
                logger.debug("Progress callback error for mod %s", event.name, exc_info=True)
