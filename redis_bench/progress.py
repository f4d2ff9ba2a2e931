from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .stats import StatsAggregator
from .workload import OPERATIONS

LOGGER = logging.getLogger("redis_bench.progress")


@dataclass(frozen=True)
class ProgressSnapshot:
    per_worker: list[dict[str, int]]
    totals: dict[str, int]


class ProgressBoard:
    """Per-worker operation counters for live reporting.

    Each worker only ever writes its own slot, so increments take no lock.
    Readers get an eventually consistent copy.
    """

    def __init__(self, workers: int, kinds: tuple[str, ...] = OPERATIONS) -> None:
        self._kinds = kinds
        self._slots: list[dict[str, int]] = [
            {kind: 0 for kind in kinds} for _ in range(workers)
        ]

    def __len__(self) -> int:
        return len(self._slots)

    def increment(self, worker_index: int, kind: str) -> None:
        self._slots[worker_index][kind] += 1

    def worker_counts(self, worker_index: int) -> dict[str, int]:
        return dict(self._slots[worker_index])

    def snapshot(self) -> list[dict[str, int]]:
        return [dict(slot) for slot in self._slots]

    def totals(self) -> dict[str, int]:
        totals = {kind: 0 for kind in self._kinds}
        for slot in self.snapshot():
            for kind, count in slot.items():
                totals[kind] += count
        return totals


class ProgressReporter:
    """Pushes a :class:`ProgressSnapshot` to ``display`` once per interval."""

    def __init__(
        self,
        board: ProgressBoard,
        stats: StatsAggregator,
        display: Callable[[ProgressSnapshot], None],
        interval_s: float = 1.0,
    ) -> None:
        self._board = board
        self._stats = stats
        self._display = display
        self._interval_s = interval_s
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(per_worker=self._board.snapshot(), totals=self._stats.counts())

    def start(self) -> None:
        def runner() -> None:
            self._push()
            while not self._stop_event.wait(self._interval_s):
                self._push()

        thread = threading.Thread(target=runner, name="benchmark-progress", daemon=True)
        thread.start()
        self._thread = thread

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)

    def _push(self) -> None:
        try:
            self._display(self.snapshot())
        except Exception:  # noqa: BLE001
            LOGGER.exception("progress display failed")
        self.ticks += 1
