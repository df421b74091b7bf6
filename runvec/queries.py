"""Random query positions for benchmarks, stored as little-endian 64-bit integers."""

from __future__ import annotations

import random
import struct
import sys
from pathlib import Path
from typing import Iterable, Sequence

_PROG = "runvec-queries"
_DEFAULT_SEED = 5489
_U64 = struct.Struct("<Q")


def random_queries(maximum: int, size: int, seed: int | None = _DEFAULT_SEED) -> list[int]:
    """``size`` integers drawn uniformly from ``0 .. maximum`` inclusive."""
    if maximum < 0:
        raise ValueError("maximum must be non-negative")
    if size < 0:
        raise ValueError("size must be non-negative")
    rng = random.Random(seed)
    return [rng.randint(0, maximum) for _ in range(size)]


def write_queries(path: str | Path, values: Iterable[int]) -> None:
    """Write ``values`` as consecutive little-endian unsigned 64-bit integers."""
    values = list(values)
    Path(path).write_bytes(struct.pack(f"<{len(values)}Q", *values))


def read_queries(path: str | Path) -> list[int]:
    """Read the integers written by :func:`write_queries`."""
    data = Path(path).read_bytes()
    if len(data) % _U64.size:
        raise ValueError("query file size is not a multiple of 8 bytes")
    return list(struct.unpack(f"<{len(data) // _U64.size}Q", data))


def _help() -> None:
    print(f"{_PROG} <max> <size> <file>")


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 3:
        _help()
        return 0
    try:
        maximum = int(args[0])
        size = int(args[1])
    except ValueError:
        _help()
        return 1
    if maximum < 1 or size < 0:
        print("error: <max> must be positive and <size> non-negative", file=sys.stderr)
        return 1
    write_queries(args[2], random_queries(maximum - 1, size))
    return 0