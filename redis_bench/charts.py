from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .report import FinalReport

LOGGER = logging.getLogger("redis_bench.charts")

sns.set_style("whitegrid")
plt.rcParams["figure.dpi"] = 100
plt.rcParams["savefig.dpi"] = 300
plt.rcParams["font.size"] = 10
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 13
plt.rcParams["legend.fontsize"] = 9

OPERATION_COLORS = {
    "SET": "#2E86AB",
    "GET": "#6A994E",
    "DEL": "#C73E1D",
}

LATENCY_COLORS = ["#6A994E", "#2E86AB", "#F18F01"]


def render_report_chart(report: FinalReport, chart_path: Path) -> Path:
    """Render throughput and latency panels for a finished run."""
    df = report.to_dataframe()
    chart_path.parent.mkdir(parents=True, exist_ok=True)

    fig, (ax_rate, ax_latency) = plt.subplots(1, 2, figsize=(14, 6))
    _render_throughput(df, ax_rate)
    _render_latency(df, ax_latency)

    fig.suptitle(
        f"Redis benchmark: {report.clients} clients, {report.keys} keys, {report.duration_s:g}s",
        fontweight="bold",
    )
    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    LOGGER.info("Rendering chart %s", chart_path)
    return chart_path


def _render_throughput(df, ax: plt.Axes) -> None:
    operations = list(df["operation"])
    bars = ax.bar(
        operations,
        df["ops_per_sec"],
        color=[OPERATION_COLORS.get(op, "#808080") for op in operations],
        alpha=0.8,
        edgecolor="white",
        linewidth=2,
    )
    for bar in bars:
        height = bar.get_height()
        ax.text(
            bar.get_x() + bar.get_width() / 2.0,
            height,
            f"{height:.1f}",
            ha="center",
            va="bottom",
            fontweight="semibold",
        )
    ax.set_ylabel("Throughput (ops/sec)", fontweight="semibold")
    ax.set_title("Throughput by Operation", fontweight="bold", pad=15)
    ax.grid(True, alpha=0.3, axis="y", linestyle="--")


def _render_latency(df, ax: plt.Axes) -> None:
    operations = list(df["operation"])
    columns = [
        ("latency_min_ms", "Min"),
        ("latency_avg_ms", "Avg"),
        ("latency_max_ms", "Max"),
    ]
    x = np.arange(len(operations))
    width = 0.25
    for offset, ((column, label), color) in enumerate(zip(columns, LATENCY_COLORS)):
        ax.bar(
            x + (offset - 1) * width,
            df[column],
            width,
            label=label,
            color=color,
            alpha=0.8,
            edgecolor="white",
        )
    ax.set_xticks(x)
    ax.set_xticklabels(operations)
    ax.set_ylabel("Latency (ms)", fontweight="semibold")
    ax.set_title("Latency by Operation", fontweight="bold", pad=15)
    ax.set_ylim(bottom=0)
    ax.legend(loc="upper right", frameon=True, fancybox=True, shadow=True)
    ax.grid(True, alpha=0.3, axis="y", linestyle="--")
