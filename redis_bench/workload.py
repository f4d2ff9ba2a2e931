from __future__ import annotations

import random
import string

from .config import OperationRatios

WRITE = "set"
READ = "get"
DELETE = "del"

OPERATIONS: tuple[str, ...] = (WRITE, READ, DELETE)

OPERATION_LABELS: dict[str, str] = {
    WRITE: "SET",
    READ: "GET",
    DELETE: "DEL",
}

PAYLOAD_ALPHABET = string.ascii_letters + string.digits


def generate_keys(count: int, prefix: str) -> list[str]:
    """Return ``count`` keys of the form ``<prefix><index>``, zero-based and in order."""
    return [f"{prefix}{index}" for index in range(count)]


def select_operation(draw: float, ratios: OperationRatios) -> str:
    """Map a uniform draw in [0, 1) onto an operation kind.

    ``ratios`` must already be normalised. Any floating point residue past
    ``write + read`` falls through to DEL.
    """
    if draw < ratios.write:
        return WRITE
    if draw < ratios.write + ratios.read:
        return READ
    return DELETE


def random_payload(rng: random.Random, size: int) -> str:
    return "".join(rng.choices(PAYLOAD_ALPHABET, k=size))
