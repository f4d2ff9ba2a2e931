from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from .stats import LatencySummary, StatsAggregator
from .workload import OPERATIONS, OPERATION_LABELS

REPORT_COLUMNS = [
    "operation",
    "count",
    "ops_per_sec",
    "latency_min_ms",
    "latency_avg_ms",
    "latency_max_ms",
]


@dataclass(frozen=True)
class FinalReport:
    """Outcome of a single benchmark run, built once after every client stopped."""

    clients: int
    keys: int
    duration_s: float
    elapsed_s: float
    counts: dict[str, int]
    ops_per_sec: dict[str, float]
    latency: dict[str, LatencySummary]
    worker_errors: int = 0
    failures: int = 0

    @classmethod
    def from_stats(
        cls,
        stats: StatsAggregator,
        clients: int,
        keys: int,
        duration_s: float,
        elapsed_s: float,
        worker_errors: int = 0,
        failures: int = 0,
    ) -> FinalReport:
        snapshots = stats.snapshots()
        counts = {kind: snapshot.count for kind, snapshot in snapshots.items()}
        return cls(
            clients=clients,
            keys=keys,
            duration_s=duration_s,
            elapsed_s=elapsed_s,
            counts=counts,
            ops_per_sec={kind: _rate(count, duration_s) for kind, count in counts.items()},
            latency={kind: snapshot.summary() for kind, snapshot in snapshots.items()},
            worker_errors=worker_errors,
            failures=failures,
        )

    @property
    def total_operations(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for kind in self._kinds():
            latency = self.latency.get(kind, LatencySummary())
            rows.append(
                {
                    "operation": _label(kind),
                    "count": self.counts.get(kind, 0),
                    "ops_per_sec": self.ops_per_sec.get(kind, 0.0),
                    "latency_min_ms": latency.min_ms,
                    "latency_avg_ms": latency.avg_ms,
                    "latency_max_ms": latency.max_ms,
                }
            )
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)

    def format_text(self) -> str:
        kinds = self._kinds()
        lines = [
            f"Total clients: {self.clients}",
            f"Total keys: {self.keys}",
            f"Total time: {_format_seconds(self.duration_s)}",
        ]
        for kind in kinds:
            lines.append(f"{_label(kind)} operations: {self.counts.get(kind, 0)}")
        for kind in kinds:
            lines.append(f"Average {_label(kind)} ops/sec: {self.ops_per_sec.get(kind, 0.0):.2f}")
        for kind in kinds:
            latency = self.latency.get(kind, LatencySummary())
            lines.append(
                f"{_label(kind)} Latency (ms): "
                f"Min={latency.min_ms:.2f}, Avg={latency.avg_ms:.2f}, Max={latency.max_ms:.2f}"
            )
        return "\n".join(lines)

    def write_json(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path

    def write_csv(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path

    def _kinds(self) -> list[str]:
        extra = [kind for kind in self.counts if kind not in OPERATIONS]
        return [kind for kind in OPERATIONS if kind in self.counts] + extra


def _rate(count: int, duration_s: float) -> float:
    if duration_s <= 0:
        return 0.0
    return count / duration_s


def _label(kind: str) -> str:
    return OPERATION_LABELS.get(kind, kind.upper())


def _format_seconds(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"
