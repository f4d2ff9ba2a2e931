from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import BenchmarkConfig, ConfigError, OperationRatios, parse_duration
from .display import TerminalDisplay
from .executor import BenchmarkSetupError
from .runner import run_benchmark

LOGGER = logging.getLogger("redis_bench")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    env = os.environ
    parser = argparse.ArgumentParser(description="Redis SET/GET/DEL load benchmark")
    parser.add_argument(
        "--addr", default=env.get("REDIS_ADDR", "localhost:6379"), help="Redis server address"
    )
    parser.add_argument("--pass", dest="password", default=env.get("REDIS_PASSWORD", ""), help="Redis password")
    parser.add_argument("--db", type=int, default=int(env.get("REDIS_DB", "0")), help="Redis database number")
    parser.add_argument(
        "--clients",
        type=int,
        default=int(env.get("BENCHMARK_CLIENTS", "10")),
        help="Number of concurrent clients",
    )
    parser.add_argument(
        "--keys",
        type=int,
        default=int(env.get("BENCHMARK_KEYS", "1000")),
        help="Number of keys to test",
    )
    parser.add_argument("--prefix", default=env.get("BENCHMARK_PREFIX", "benchmark_"), help="Key prefix")
    parser.add_argument(
        "--ttl",
        default=env.get("BENCHMARK_TTL", "60s"),
        help="Key TTL for SET operations, e.g. 60s (0 disables expiry)",
    )
    parser.add_argument(
        "--duration",
        default=env.get("BENCHMARK_DURATION", "10s"),
        help="Test duration, e.g. 10s, 500ms, 1m30s",
    )
    parser.add_argument(
        "--set", dest="set_ratio", type=float, default=0.5, help="Proportion of SET operations"
    )
    parser.add_argument(
        "--get", dest="get_ratio", type=float, default=0.4, help="Proportion of GET operations"
    )
    parser.add_argument(
        "--del", dest="del_ratio", type=float, default=0.1, help="Proportion of DEL operations"
    )
    parser.add_argument(
        "--value-size",
        type=int,
        default=int(env.get("BENCHMARK_VALUE_SIZE", "100")),
        help="Length of the random payload written by SET",
    )
    parser.add_argument(
        "--timeout",
        default=env.get("BENCHMARK_SOCKET_TIMEOUT", "3s"),
        help="Socket timeout for each Redis command",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible operation draws")
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the live per-client progress display",
    )
    parser.add_argument(
        "--output-dir",
        default=env.get("BENCHMARK_OUTPUT_DIR"),
        help="Directory to store report.json, report.csv and report.png",
    )
    parser.add_argument(
        "--log-level",
        default=env.get("BENCHMARK_LOG_LEVEL", "WARNING"),
        help="Logging level",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> BenchmarkConfig:
    timeout = parse_duration(args.timeout)
    return BenchmarkConfig(
        address=args.addr,
        password=args.password,
        db=args.db,
        clients=args.clients,
        keys=args.keys,
        prefix=args.prefix,
        ttl=parse_duration(args.ttl),
        duration=parse_duration(args.duration),
        ratios=OperationRatios(write=args.set_ratio, read=args.get_ratio, delete=args.del_ratio),
        value_size=args.value_size,
        socket_timeout=timeout if timeout > 0 else None,
        seed=args.seed,
    ).validate()


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def write_artefacts(report, output_dir: Path) -> None:
    from .charts import render_report_chart

    LOGGER.info("Benchmark output directory: %s", output_dir)
    json_path = report.write_json(output_dir / "report.json")
    csv_path = report.write_csv(output_dir / "report.csv")
    chart_path = render_report_chart(report, output_dir / "report.png")
    LOGGER.info("Saved %s, %s and %s", json_path, csv_path, chart_path)


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ConfigError as exc:
        LOGGER.error("invalid configuration: %s", exc)
        return 1

    display = None
    if not args.no_progress:
        display = TerminalDisplay()

    print("Starting Redis benchmark...")
    try:
        report = run_benchmark(config, display=display)
    except BenchmarkSetupError as exc:
        LOGGER.error("%s", exc)
        return 1
    finally:
        if display is not None:
            display.finish()

    print("\nBenchmark complete.")
    print(report.format_text())

    if report.worker_errors:
        print(f"\n{report.worker_errors} client(s) stopped early (see log)", file=sys.stderr)

    if args.output_dir:
        write_artefacts(report, Path(args.output_dir))

    return 1 if report.worker_errors else 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
