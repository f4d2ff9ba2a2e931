from __future__ import annotations

from dataclasses import dataclass

import redis

from .config import BenchmarkConfig
from .workload import DELETE, READ, WRITE


class BenchmarkSetupError(Exception):
    """Raised when the target store cannot be reached before a run starts."""


@dataclass(frozen=True)
class ExecutionResult:
    ok: bool
    error: BaseException | None = None
    found: bool | None = None

    @classmethod
    def success(cls, found: bool | None = None) -> ExecutionResult:
        return cls(ok=True, found=found)

    @classmethod
    def failure(cls, error: BaseException) -> ExecutionResult:
        return cls(ok=False, error=error)


def create_client(config: BenchmarkConfig) -> redis.Redis:
    host, port = config.host_port()
    return redis.Redis(
        host=host,
        port=port,
        password=config.password or None,
        db=config.db,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_timeout,
    )


class RedisExecutor:
    """Runs single SET/GET/DEL commands and folds redis errors into results."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: BenchmarkConfig) -> RedisExecutor:
        return cls(create_client(config))

    def ping(self) -> None:
        try:
            self._client.ping()
        except redis.RedisError as exc:
            raise BenchmarkSetupError(f"failed to connect to Redis: {exc}") from exc

    def execute(
        self,
        kind: str,
        key: str,
        value: str | None = None,
        ttl: float | None = None,
    ) -> ExecutionResult:
        try:
            if kind == WRITE:
                # sub-millisecond TTLs round up to 1ms so the key still expires
                px = max(1, int(ttl * 1000)) if ttl and ttl > 0 else 0
                self._client.set(key, value if value is not None else "", px=px or None)
                return ExecutionResult.success()
            if kind == READ:
                # a missing key is an expected outcome, not an error
                return ExecutionResult.success(found=self._client.get(key) is not None)
            if kind == DELETE:
                self._client.delete(key)
                return ExecutionResult.success()
        except redis.RedisError as exc:
            return ExecutionResult.failure(exc)
        raise ValueError(f"unknown operation kind: {kind!r}")

    def close(self) -> None:
        self._client.close()
