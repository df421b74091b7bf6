"""Storing bit vectors on disk and exporting them as comma-separated positions."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Sequence

from runvec.bitvector import BitVector

_PROG = "runvec-roaring"


def _as_bitvector(bits: Iterable[object]) -> BitVector:
    return bits if isinstance(bits, BitVector) else BitVector(bits)


def store_bitvector(bits: Iterable[object], path: str | Path) -> None:
    """Write ``bits`` to ``path`` in the binary form of :class:`BitVector`."""
    Path(path).write_bytes(_as_bitvector(bits).to_bytes())


def load_bitvector(path: str | Path) -> BitVector:
    """Read a bit vector written by :func:`store_bitvector`."""
    return BitVector.from_bytes(Path(path).read_bytes())


def to_roaring_text(bits: Iterable[object]) -> str:
    """Positions of the set bits, then the vector length, comma separated, one line.

    A vector with no set bits gives a line that starts with the comma.
    """
    size = 0
    positions = []
    for size, bit in enumerate(bits, start=1):
        if bit:
            positions.append(str(size - 1))
    return ",".join(positions) + f",{size}\n"


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print(f"{_PROG} <input> <output>")
        return 0
    source, target = args
    try:
        bits = load_bitvector(source)
    except FileNotFoundError:
        print(f"Error: {source} does not exist.")
        return 0
    except (OSError, ValueError) as exc:
        print(f"Error: {source} could not be read: {exc}")
        return 1
    Path(target).write_text(to_roaring_text(bits), encoding="ascii")
    return 0