from __future__ import annotations

import logging
import random
import threading
import time
from typing import Sequence

from .config import OperationRatios
from .progress import ProgressBoard
from .stats import StatsAggregator
from .workload import WRITE, random_payload, select_operation

LOGGER = logging.getLogger("redis_bench.worker")


class Worker:
    """One benchmark client: issues weighted random operations until stopped."""

    def __init__(
        self,
        index: int,
        keys: Sequence[str],
        ratios: OperationRatios,
        executor,
        stats: StatsAggregator,
        progress: ProgressBoard,
        ttl: float | None = None,
        value_size: int = 100,
        rng: random.Random | None = None,
    ) -> None:
        if not keys:
            raise ValueError("worker needs at least one key to operate on")
        self.index = index
        self._keys = keys
        self._ratios = ratios
        self._executor = executor
        self._stats = stats
        self._progress = progress
        self._ttl = ttl
        self._value_size = value_size
        self._rng = rng or random.Random()
        self.failures = 0

    def run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.step()

    def step(self) -> bool:
        """Run one operation. Returns whether it succeeded and was recorded."""
        kind = select_operation(self._rng.random(), self._ratios)
        key = self._keys[self._rng.randrange(len(self._keys))]
        value = random_payload(self._rng, self._value_size) if kind == WRITE else None

        started = time.perf_counter()
        result = self._executor.execute(kind, key, value, self._ttl)
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        if not result.ok:
            self.failures += 1
            LOGGER.debug("client %d: %s %s failed: %r", self.index + 1, kind, key, result.error)
            return False

        self._stats.record(kind, elapsed_ms)
        self._progress.increment(self.index, kind)
        return True
