from __future__ import annotations

import logging
import random
import threading
import time
from typing import Callable

from .config import BenchmarkConfig
from .executor import RedisExecutor
from .progress import ProgressBoard, ProgressReporter, ProgressSnapshot
from .report import FinalReport
from .stats import StatsAggregator
from .worker import Worker
from .workload import generate_keys

LOGGER = logging.getLogger("redis_bench.runner")


class BenchmarkRunner:
    """Runs ``config.clients`` workers against one executor for ``config.duration`` seconds.

    Every run owns its own statistics, progress board and stop event, so
    several runners can execute side by side in one process.
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        executor,
        display: Callable[[ProgressSnapshot], None] | None = None,
        report_interval: float = 1.0,
    ) -> None:
        self._config = config
        self._executor = executor
        self._display = display
        self._report_interval = report_interval
        self._stop_event = threading.Event()
        self.stats: StatsAggregator | None = None
        self.progress: ProgressBoard | None = None

    def stop(self) -> None:
        """Ask the current run to stop before its duration elapses."""
        self._stop_event.set()

    def run(self) -> FinalReport:
        config = self._config.validate()
        ratios = config.ratios.normalised()
        self._executor.ping()

        stop_event = threading.Event()
        self._stop_event = stop_event

        keys = generate_keys(config.keys, config.prefix)
        stats = StatsAggregator()
        progress = ProgressBoard(config.clients)
        self.stats = stats
        self.progress = progress

        workers = [
            Worker(
                index=index,
                keys=keys,
                ratios=ratios,
                executor=self._executor,
                stats=stats,
                progress=progress,
                ttl=config.ttl,
                value_size=config.value_size,
                rng=random.Random(config.seed + index) if config.seed is not None else None,
            )
            for index in range(config.clients)
        ]

        worker_errors: list[BaseException] = []
        errors_lock = threading.Lock()

        def worker_runner(worker: Worker) -> None:
            try:
                worker.run(stop_event)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("client %d crashed", worker.index + 1)
                with errors_lock:
                    worker_errors.append(exc)

        LOGGER.info(
            "Starting benchmark: clients=%d keys=%d duration=%.3fs ratios=set:%.2f/get:%.2f/del:%.2f",
            config.clients,
            config.keys,
            config.duration,
            ratios.write,
            ratios.read,
            ratios.delete,
        )

        started_at = time.perf_counter()
        threads = [
            threading.Thread(
                target=worker_runner,
                args=(worker,),
                name=f"benchmark-client-{worker.index + 1}",
                daemon=True,
            )
            for worker in workers
        ]
        for thread in threads:
            thread.start()

        reporter = None
        if self._display is not None:
            reporter = ProgressReporter(progress, stats, self._display, self._report_interval)
            reporter.start()

        stopped_early = False
        try:
            stopped_early = stop_event.wait(timeout=config.duration)
        except KeyboardInterrupt:
            LOGGER.warning("interrupted; stopping clients early")
            stopped_early = True
        finally:
            stop_event.set()
            for thread in threads:
                thread.join()
            if reporter is not None:
                reporter.stop()

        elapsed_s = time.perf_counter() - started_at
        # rates of an interrupted run cover only the time it actually ran
        duration_s = min(elapsed_s, config.duration) if stopped_early else config.duration
        failures = sum(worker.failures for worker in workers)
        if failures:
            LOGGER.info("%d operation(s) failed and were excluded from the statistics", failures)

        return FinalReport.from_stats(
            stats,
            clients=config.clients,
            keys=config.keys,
            duration_s=duration_s,
            elapsed_s=elapsed_s,
            worker_errors=len(worker_errors),
            failures=failures,
        )


def run_benchmark(
    config: BenchmarkConfig,
    display: Callable[[ProgressSnapshot], None] | None = None,
    report_interval: float = 1.0,
) -> FinalReport:
    """Run a benchmark against the Redis server described by ``config``."""
    executor = RedisExecutor.from_config(config)
    try:
        return BenchmarkRunner(config, executor, display, report_interval).run()
    finally:
        executor.close()
