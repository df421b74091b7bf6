"""Reading integer texts and building suffix arrays and Burrows-Wheeler transforms."""

from __future__ import annotations

import struct
from itertools import pairwise
from pathlib import Path
from typing import Sequence

from runvec.bitvector import BitVector

_FORMATS = {1: "B", 2: "H", 4: "I", 8: "Q"}


def load_symbols(path: str | Path, num_bytes: int = 1) -> list[int]:
    """Read a file as little-endian unsigned integers of ``num_bytes`` bytes each."""
    code = _FORMATS.get(num_bytes)
    if code is None:
        raise ValueError("num_bytes must be 1, 2, 4 or 8")
    data = Path(path).read_bytes()
    if len(data) % num_bytes:
        raise ValueError(f"file size is not a multiple of {num_bytes} bytes")
    return list(struct.unpack(f"<{len(data) // num_bytes}{code}", data))


def remap_symbols(values: Sequence[int]) -> list[int]:
    """Replace each value by an id from 1 upwards, in order of first appearance."""
    ids: dict[int, int] = {}
    return [ids.setdefault(v, len(ids) + 1) for v in values]


def read_text(path: str | Path, num_bytes: int = 1) -> list[int]:
    """Load a file, remap its symbols and append the terminating zero symbol."""
    text = remap_symbols(load_symbols(path, num_bytes))
    text.append(0)
    return text


def build_suffix_array(text: Sequence[int]) -> list[int]:
    """Suffix array of ``text`` by prefix doubling; a proper prefix sorts first."""
    n = len(text)
    if n == 0:
        return []
    dense = {v: r for r, v in enumerate(sorted(set(text)))}
    rank = [dense[v] for v in text]
    sa = list(range(n))
    k = 1
    while True:
        def key(i: int, rank: list[int] = rank, k: int = k) -> tuple[int, int]:
            return rank[i], rank[i + k] if i + k < n else -1

        sa.sort(key=key)
        new_rank = [0] * n
        for prev, cur in pairwise(sa):
            new_rank[cur] = new_rank[prev] + (key(cur) != key(prev))
        rank = new_rank
        if rank[sa[-1]] == n - 1:
            return sa
        k *= 2


def build_bwt(text: Sequence[int]) -> list[int]:
    """Burrows-Wheeler transform: the symbol before each suffix in sorted order."""
    return [text[i - 1] for i in build_suffix_array(text)]


def symbol_bitvectors(text: Sequence[int]) -> list[BitVector]:
    """One bit vector per symbol ``1 .. sigma-1`` marking where it occurs.

    ``text`` is a remapped text whose largest symbol is ``sigma``. That symbol
    gets no vector of its own: its positions are those marked by no vector
    and not holding the zero terminator.
    """
    sigma = max(text, default=0)
    return [BitVector(v == symbol for v in text) for symbol in range(1, sigma)]