"""Random bit vectors for experiments: uniform ones or alternating runs."""

from __future__ import annotations

import math
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from runvec.bitvector import BitVector
from runvec.bitvector_io import store_bitvector

_PROG = "runvec-gen"
_SIZES = (10_000_000, 100_000_000, 1_000_000_000)
_RATIOS = (0.01, 0.02, 0.03, 0.04, 0.05, 0.06, 0.07, 0.08, 0.09)


@dataclass(frozen=True)
class VectorStats:
    """Counts of ones and zeros and the mean length of their runs."""

    ones: int
    zeros: int
    runs1: int
    runs0: int

    @property
    def avg_run1(self) -> float:
        return self.ones / self.runs1 if self.runs1 else math.nan

    @property
    def avg_run0(self) -> float:
        return self.zeros / self.runs0 if self.runs0 else math.nan

    def report(self) -> str:
        return (
            "Stats\n"
            f" - Ones: {self.ones}\n"
            f" - Zeroes: {self.zeros}\n"
            f" - Avg(len-r1): {self.avg_run1:g}\n"
            f" - Avg(len-r0): {self.avg_run0:g}\n"
        )


def generate(size: int, ratio: float, rng: random.Random | None = None) -> BitVector:
    """A vector of ``size`` bits with exactly ``int(size * ratio)`` ones at random places."""
    if size < 0:
        raise ValueError("size must be non-negative")
    if not 0 <= ratio <= 1:
        raise ValueError("ratio must be between 0 and 1")
    rng = random.Random() if rng is None else rng
    n_ones = int(size * ratio)
    return BitVector.from_positions(size, rng.sample(range(size), n_ones))


def _run_length(rng: random.Random, mean: float, stdev: float) -> int:
    low, high = mean - stdev, mean + stdev
    value = min(max(rng.gauss(mean, stdev), low), high)
    return max(int(value), 0)


def generate_runs(
    size: int,
    mean_1: float,
    stdev_1: float,
    mean_0: float,
    stdev_0: float,
    rng: random.Random | None = None,
) -> BitVector:
    """Alternating runs, zeros first, with normally distributed lengths.

    Each length is clamped to ``mean +/- stdev`` and truncated to an integer.
    """
    if size < 0:
        raise ValueError("size must be non-negative")
    if stdev_1 < 0 or stdev_0 < 0:
        raise ValueError("standard deviations must be non-negative")
    if int(mean_0 + stdev_0) < 1 and int(mean_1 + stdev_1) < 1:
        raise ValueError("runs would never reach a length of one")
    rng = random.Random() if rng is None else rng
    bits: list[int] = []
    value = 0
    while len(bits) < size:
        length = _run_length(rng, mean_1, stdev_1) if value else _run_length(rng, mean_0, stdev_0)
        bits.extend([value] * min(length, size - len(bits)))
        value ^= 1
    return BitVector(bits)


def vector_stats(bits: Iterable[object]) -> VectorStats | None:
    """Statistics of a vector, or ``None`` when it is empty."""
    iterator = iter(bits)
    try:
        current = 1 if next(iterator) else 0
    except StopIteration:
        return None
    size = 1
    ones = current
    runs = [0, 0]
    for bit in iterator:
        bit = 1 if bit else 0
        size += 1
        ones += bit
        if bit != current:
            runs[current] += 1
            current = bit
    runs[current] += 1
    return VectorStats(ones=ones, zeros=size - ones, runs1=runs[1], runs0=runs[0])


def _emit(bits: BitVector, file_name: str, directory: Path) -> None:
    store_bitvector(bits, directory / file_name)
    print(file_name)
    stats = vector_stats(bits)
    if stats is not None:
        print(stats.report())


def _exp1(sizes: Sequence[int] = _SIZES, directory: Path = Path(".")) -> None:
    for size in sizes:
        for ratio in _RATIOS:
            bits = generate(size, ratio)
            _emit(bits, f"bit-vector-exp1.{size}.{int(ratio * 100)}.bin", directory)


def _exp2(sizes: Sequence[int] = _SIZES, directory: Path = Path(".")) -> None:
    for size in sizes:
        mean, stdev = 10, 5
        while mean < size:
            bits = generate_runs(size, mean, stdev, mean, stdev)
            _emit(bits, f"bit-vector-exp2.equal.{size}.{mean}.{stdev}.bin", directory)
            mean *= 10
            stdev *= 10
    for size in sizes:
        mean, stdev = 10, 5
        while mean < size:
            mean_1 = max(1.0, mean / 10)
            stdev_1 = max(1.0, stdev / 10)
            bits = generate_runs(size, mean_1, stdev_1, mean, stdev)
            _emit(bits, f"bit-vector-exp2.notequal.{size}.{mean}.{stdev}.bin", directory)
            mean *= 10
            stdev *= 10


def _help() -> None:
    print(f"{_PROG} <exp>")
    print("<exp> can take values 1 (exp1) and 2 (exp2).")


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        _help()
        return 0
    try:
        exp = int(args[0])
    except ValueError:
        exp = 0
    if exp == 1:
        _exp1()
    elif exp == 2:
        _exp2()
    else:
        _help()
        print(f"Exp {exp} is not supported.")
    return 0