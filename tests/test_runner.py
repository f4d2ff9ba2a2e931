import threading

import pytest

from redis_bench.config import BenchmarkConfig, ConfigError, OperationRatios
from redis_bench.executor import BenchmarkSetupError
from redis_bench.runner import BenchmarkRunner
from redis_bench.stats import LatencySummary
from redis_bench.workload import DELETE, OPERATIONS, READ, WRITE


def _config(**overrides):
    values = dict(
        clients=4,
        keys=10,
        prefix="k_",
        duration=0.2,
        ratios=OperationRatios(write=1.0, read=0.0, delete=0.0),
        seed=42,
    )
    values.update(overrides)
    return BenchmarkConfig(**values)


def test_write_only_run(sleeping_executor):
    runner = BenchmarkRunner(_config(), sleeping_executor)
    report = runner.run()

    assert sleeping_executor.pinged
    assert report.clients == 4
    assert report.keys == 10
    assert report.duration_s == 0.2
    assert report.counts[READ] == 0
    assert report.counts[DELETE] == 0
    assert report.counts[WRITE] > 0
    assert report.worker_errors == 0
    assert report.failures == 0

    latency = report.latency[WRITE]
    assert 0.9 <= latency.min_ms <= latency.avg_ms <= latency.max_ms
    assert latency.avg_ms < 50.0

    # every op takes at least 1ms, so four clients cannot beat ~4 ops per ms
    assert report.counts[WRITE] <= 4 * report.elapsed_s * 1000 + 4
    assert report.ops_per_sec[WRITE] == pytest.approx(report.counts[WRITE] / 0.2)
    assert report.ops_per_sec[READ] == 0.0

    assert report.latency[READ] == LatencySummary()
    assert {call[1] for call in sleeping_executor.calls} <= {f"k_{i}" for i in range(10)}


def test_progress_totals_agree_with_stats(sleeping_executor):
    runner = BenchmarkRunner(
        _config(ratios=OperationRatios(write=0.5, read=0.4, delete=0.1)), sleeping_executor
    )
    report = runner.run()

    assert runner.progress.totals() == report.counts
    assert runner.stats.counts() == report.counts
    assert sum(report.counts.values()) == len(sleeping_executor.calls)


def test_all_operations_failing(failing_executor):
    report = BenchmarkRunner(
        _config(ratios=OperationRatios(0.5, 0.4, 0.1)), failing_executor
    ).run()

    assert report.counts == {kind: 0 for kind in OPERATIONS}
    assert report.ops_per_sec == {kind: 0.0 for kind in OPERATIONS}
    assert all(summary == LatencySummary() for summary in report.latency.values())
    assert report.failures == len(failing_executor.calls)
    assert report.failures > 0


def test_zero_duration_run_returns_report(instant_executor):
    report = BenchmarkRunner(_config(duration=0.0), instant_executor).run()

    assert report.duration_s == 0.0
    assert report.elapsed_s >= 0.0
    assert set(report.counts) == set(OPERATIONS)
    assert report.ops_per_sec == {kind: 0.0 for kind in OPERATIONS}
    assert report.counts[WRITE] == len(instant_executor.calls)


def test_connectivity_failure_is_fatal(instant_executor):
    def refuse():
        raise BenchmarkSetupError("failed to connect to Redis: refused")

    instant_executor.ping = refuse
    with pytest.raises(BenchmarkSetupError):
        BenchmarkRunner(_config(), instant_executor).run()
    assert instant_executor.calls == []


def test_zero_ratios_rejected_before_connecting(instant_executor):
    with pytest.raises(ConfigError):
        BenchmarkRunner(_config(ratios=OperationRatios(0, 0, 0)), instant_executor).run()
    assert not instant_executor.pinged


def test_display_receives_snapshots(sleeping_executor):
    received = []
    runner = BenchmarkRunner(
        _config(clients=3, duration=0.25), sleeping_executor, display=received.append, report_interval=0.05
    )
    report = runner.run()

    assert received
    assert all(len(snapshot.per_worker) == 3 for snapshot in received)
    last = received[-1]
    assert last.totals[WRITE] <= report.counts[WRITE]


def test_stop_ends_run_early(sleeping_executor):
    runner = BenchmarkRunner(_config(duration=30.0), sleeping_executor)
    reports = []
    thread = threading.Thread(target=lambda: reports.append(runner.run()))
    thread.start()
    while not sleeping_executor.calls and thread.is_alive():
        thread.join(timeout=0.01)
    runner.stop()
    thread.join(timeout=10.0)

    assert not thread.is_alive()
    assert reports[0].elapsed_s < 30.0
    assert reports[0].counts[WRITE] > 0


def test_crashing_clients_are_reported(instant_executor):
    def explode(kind, key, value=None, ttl=None):
        raise RuntimeError("bug in executor")

    instant_executor.execute = explode
    report = BenchmarkRunner(_config(clients=2, duration=0.05), instant_executor).run()

    assert report.worker_errors == 2
    assert report.counts == {kind: 0 for kind in OPERATIONS}


def test_concurrent_runs_do_not_interfere(instant_executor, sleeping_executor):
    reports = {}

    def run(name, executor, ratios):
        reports[name] = BenchmarkRunner(_config(ratios=ratios, duration=0.1), executor).run()

    threads = [
        threading.Thread(target=run, args=("writes", instant_executor, OperationRatios(1, 0, 0))),
        threading.Thread(target=run, args=("reads", sleeping_executor, OperationRatios(0, 1, 0))),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert reports["writes"].counts[READ] == 0
    assert reports["reads"].counts[WRITE] == 0
    assert sum(reports["writes"].counts.values()) == len(instant_executor.calls)
    assert sum(reports["reads"].counts.values()) == len(sleeping_executor.calls)


def test_stopped_run_reports_rates_over_time_actually_run(sleeping_executor):
    runner = BenchmarkRunner(_config(clients=2, duration=30.0), sleeping_executor)
    reports = []
    thread = threading.Thread(target=lambda: reports.append(runner.run()))
    thread.start()
    while len(sleeping_executor.calls) < 50 and thread.is_alive():
        thread.join(timeout=0.01)
    runner.stop()
    thread.join(timeout=10.0)

    report = reports[0]
    assert report.duration_s == pytest.approx(report.elapsed_s)
    assert report.duration_s < 30.0
    assert report.ops_per_sec[WRITE] == pytest.approx(report.counts[WRITE] / report.elapsed_s)
    assert "Total time: 30s" not in report.format_text()


def test_completed_run_keeps_configured_duration(instant_executor):
    report = BenchmarkRunner(_config(duration=0.05), instant_executor).run()
    assert report.duration_s == 0.05


def test_runner_can_run_twice(sleeping_executor):
    runner = BenchmarkRunner(_config(duration=0.1), sleeping_executor)
    first = runner.run()
    second = runner.run()

    assert first.counts[WRITE] > 0
    assert second.counts[WRITE] > 0
    assert second.elapsed_s >= 0.1
    assert runner.stats.counts() == second.counts
