from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Iterable

from .workload import OPERATIONS


@dataclass(frozen=True)
class LatencySummary:
    min_ms: float = 0.0
    avg_ms: float = 0.0
    max_ms: float = 0.0


@dataclass(frozen=True)
class StatsSnapshot:
    """Point-in-time copy of one operation kind's accumulators.

    ``min_ms`` stays ``inf`` and ``max_ms`` stays ``0`` until the first sample;
    use :meth:`summary` for values safe to display.
    """

    count: int
    total_ms: float
    min_ms: float
    max_ms: float

    @property
    def avg_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_ms / self.count

    def summary(self) -> LatencySummary:
        if self.count == 0:
            return LatencySummary()
        return LatencySummary(min_ms=self.min_ms, avg_ms=self.avg_ms, max_ms=self.max_ms)


class OperationStats:
    """Running count/sum/min/max of latencies for a single operation kind."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._total_ms = 0.0
        self._min_ms = math.inf
        self._max_ms = 0.0

    def record(self, latency_ms: float) -> None:
        with self._lock:
            self._count += 1
            self._total_ms += latency_ms
            if latency_ms < self._min_ms:
                self._min_ms = latency_ms
            if latency_ms > self._max_ms:
                self._max_ms = latency_ms

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                count=self._count,
                total_ms=self._total_ms,
                min_ms=self._min_ms,
                max_ms=self._max_ms,
            )


class StatsAggregator:
    """Per-kind latency statistics shared by every worker of a run.

    Each kind has its own lock, so recording a GET never waits on a SET.
    """

    def __init__(self, kinds: Iterable[str] = OPERATIONS) -> None:
        self._stats = {kind: OperationStats() for kind in kinds}

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(self._stats)

    def record(self, kind: str, latency_ms: float) -> None:
        self._stats[kind].record(latency_ms)

    def snapshot(self, kind: str) -> StatsSnapshot:
        return self._stats[kind].snapshot()

    def snapshots(self) -> dict[str, StatsSnapshot]:
        return {kind: stats.snapshot() for kind, stats in self._stats.items()}

    def counts(self) -> dict[str, int]:
        return {kind: snapshot.count for kind, snapshot in self.snapshots().items()}
