import threading
import time

import pytest

from redis_bench.executor import ExecutionResult


class SleepingExecutor:
    """Succeeds every call after sleeping ``latency_s``."""

    def __init__(self, latency_s=0.0):
        self.latency_s = latency_s
        self.calls = []
        self._lock = threading.Lock()
        self.pinged = False

    def ping(self):
        self.pinged = True

    def execute(self, kind, key, value=None, ttl=None):
        if self.latency_s:
            time.sleep(self.latency_s)
        with self._lock:
            self.calls.append((kind, key, value, ttl))
        return ExecutionResult.success()

    def close(self):
        pass


class FailingExecutor(SleepingExecutor):
    def execute(self, kind, key, value=None, ttl=None):
        super().execute(kind, key, value, ttl)
        return ExecutionResult.failure(ConnectionError("connection reset"))


@pytest.fixture
def sleeping_executor():
    return SleepingExecutor(latency_s=0.001)


@pytest.fixture
def instant_executor():
    return SleepingExecutor()


@pytest.fixture
def failing_executor():
    return FailingExecutor(latency_s=0.001)
