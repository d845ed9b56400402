"""Run-wide counters shared by every traversal branch."""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    pages_processed: int
    errors: int


class RunStats:
    """Monotonic page and error counters.

    Increment is the only mutation; the lock keeps the counters consistent even
    if a write is ever moved off the event loop thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages_processed = 0
        self._errors = 0

    @property
    def pages_processed(self) -> int:
        return self._pages_processed

    @property
    def errors(self) -> int:
        return self._errors

    def record_page(self) -> None:
        with self._lock:
            self._pages_processed += 1

    def record_error(self) -> None:
        with self._lock:
            self._errors += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(self._pages_processed, self._errors)

    @property
    def exit_code(self) -> int:
        return 0 if self._errors == 0 else 1
