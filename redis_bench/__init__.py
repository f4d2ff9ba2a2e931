"""
Load generator for Redis-compatible key-value stores.

This package drives a weighted mix of SET/GET/DEL operations from concurrent
clients against a fixed key space for a bounded duration, and reports
per-operation throughput and latency.
"""

from .config import BenchmarkConfig, ConfigError, OperationRatios
from .report import FinalReport
from .runner import BenchmarkRunner, run_benchmark

__all__ = [
    "BenchmarkConfig",
    "BenchmarkRunner",
    "ConfigError",
    "FinalReport",
    "OperationRatios",
    "run_benchmark",
]
