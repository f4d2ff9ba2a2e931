from __future__ import annotations

import dataclasses
import math
import re
from dataclasses import dataclass

DEFAULT_ADDRESS = "localhost:6379"
DEFAULT_PORT = 6379

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConfigError(ValueError):
    """Raised when a benchmark configuration cannot be used to start a run."""


@dataclass(frozen=True)
class OperationRatios:
    """Relative weights of SET, GET and DEL operations."""

    write: float = 0.5
    read: float = 0.4
    delete: float = 0.1

    @property
    def total(self) -> float:
        return self.write + self.read + self.delete

    def normalised(self) -> OperationRatios:
        for name, value in dataclasses.asdict(self).items():
            if value < 0:
                raise ConfigError(f"{name} ratio must be >= 0, got {value}")
        total = self.total
        if total <= 0:
            raise ConfigError("operation ratios must sum to > 0")
        return OperationRatios(
            write=self.write / total,
            read=self.read / total,
            delete=self.delete / total,
        )


@dataclass(frozen=True)
class BenchmarkConfig:
    """Everything needed to drive one benchmark run against a Redis server."""

    address: str = DEFAULT_ADDRESS
    password: str = ""
    db: int = 0
    clients: int = 10
    keys: int = 1000
    prefix: str = "benchmark_"
    ttl: float = 60.0
    duration: float = 10.0
    ratios: OperationRatios = dataclasses.field(default_factory=OperationRatios)
    value_size: int = 100
    socket_timeout: float | None = 3.0
    seed: int | None = None

    def validate(self) -> BenchmarkConfig:
        if self.clients < 1:
            raise ConfigError(f"clients must be >= 1, got {self.clients}")
        if self.keys < 1:
            raise ConfigError(f"keys must be >= 1, got {self.keys}")
        for name in ("duration", "ttl"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigError(f"{name} must be finite, got {getattr(self, name)}")
        if self.socket_timeout is not None and not math.isfinite(self.socket_timeout):
            raise ConfigError(f"socket timeout must be finite, got {self.socket_timeout}")
        if self.duration < 0:
            raise ConfigError(f"duration must be >= 0, got {self.duration}")
        if self.value_size < 0:
            raise ConfigError(f"value size must be >= 0, got {self.value_size}")
        if self.db < 0:
            raise ConfigError(f"database index must be >= 0, got {self.db}")
        self.ratios.normalised()
        parse_address(self.address)
        return self

    def host_port(self) -> tuple[str, int]:
        return parse_address(self.address)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (port optional, IPv6 hosts in brackets)."""
    address = address.strip()
    if not address:
        raise ConfigError("address must not be empty")

    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port_str = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, _, port_str = address.partition(":")
    else:
        host, port_str = address, ""

    if not port_str:
        return host or "localhost", DEFAULT_PORT
    try:
        port = int(port_str)
    except ValueError as exc:
        raise ConfigError(f"invalid port in address {address!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range in address {address!r}")
    return host or "localhost", port


def parse_duration(value: str | float | int) -> float:
    """Parse ``10s``/``200ms``/``1m30s`` style durations (or bare seconds) into seconds."""
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    if not text:
        raise ConfigError("duration must not be empty")
    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        raise ConfigError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ConfigError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total
