from __future__ import annotations

import sys
from typing import TextIO

from .progress import ProgressSnapshot
from .workload import OPERATIONS, OPERATION_LABELS

CURSOR_UP = "\033[{}A"
CLEAR_LINE = "\033[K"
RESET = "\033[0m"


def format_counts(counts: dict[str, int]) -> str:
    return ", ".join(f"{OPERATION_LABELS[kind]}={counts.get(kind, 0)}" for kind in OPERATIONS)


class TerminalDisplay:
    """Redraws one line per client plus a totals line in place."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._drawn = False

    def __call__(self, snapshot: ProgressSnapshot) -> None:
        if self._drawn:
            self._stream.write(CURSOR_UP.format(len(snapshot.per_worker) + 1))
        self._write_rows(snapshot)
        self._drawn = True

    def finish(self) -> None:
        self._stream.write(RESET)
        self._stream.flush()

    def _write_rows(self, snapshot: ProgressSnapshot) -> None:
        for index, counts in enumerate(snapshot.per_worker, start=1):
            self._stream.write(f"{CLEAR_LINE}Client {index}: {format_counts(counts)}\n")
        self._stream.write(f"{CLEAR_LINE}Total: {format_counts(snapshot.totals)}\n")
        self._stream.flush()
