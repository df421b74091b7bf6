"""A compressed bit vector that stores each block as a (class, offset) pair.

The class of a block is its number of set bits; the offset identifies the
block among all blocks of that class in the combinatorial number system.
Rank samples every few blocks give fast rank queries.
"""

from __future__ import annotations

import operator
import struct
from functools import lru_cache
from typing import Iterable

from runvec.math_util import ceil_div

DEFAULT_BLOCK_SIZE = 127
MAX_BLOCK_SIZE = 256
_SAMPLE_BLOCKS = 32
_HEADER = struct.Struct("<QQ")
_U64 = struct.Struct("<Q")


@lru_cache(maxsize=None)
def _binomials(t: int) -> tuple[tuple[int, ...], ...]:
    """Table ``C[n][k]`` for ``0 <= n, k <= t``."""
    rows: list[tuple[int, ...]] = []
    prev = [1] + [0] * t
    rows.append(tuple(prev))
    for _ in range(t):
        row = [1] + [prev[k - 1] + prev[k] for k in range(1, t + 1)]
        rows.append(tuple(row))
        prev = row
    return tuple(rows)


def _check_block_size(block_size: int) -> int:
    block_size = operator.index(block_size)
    if not 1 <= block_size <= MAX_BLOCK_SIZE:
        raise ValueError(f"block size must be between 1 and {MAX_BLOCK_SIZE}")
    return block_size


class RRRVector:
    """Read-only bit vector compressed block by block."""

    def __init__(self, bits: Iterable[object] = (), block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        t = _check_block_size(block_size)
        values = [1 if b else 0 for b in bits]
        binom = _binomials(t)
        classes: list[int] = []
        offsets: list[int] = []
        for start in range(0, len(values), t):
            k = 0
            off = 0
            for p, b in enumerate(values[start:start + t]):
                if b:
                    k += 1
                    off += binom[p][k]
            classes.append(k)
            offsets.append(off)
        self._setup(len(values), t, classes, offsets)

    def _setup(self, size: int, t: int, classes: list[int], offsets: list[int]) -> None:
        self._size = size
        self._t = t
        self._classes = classes
        self._offsets = offsets
        self._binom = _binomials(t)
        samples = []
        total = 0
        for block in range(len(classes) + 1):
            if block % _SAMPLE_BLOCKS == 0:
                samples.append(total)
            if block < len(classes):
                total += classes[block]
        self._samples = samples

    @property
    def block_size(self) -> int:
        return self._t

    def _offset_width(self, k: int) -> int:
        return (self._binom[self._t][k] - 1).bit_length()

    def _decode(self, block: int) -> int:
        k = self._classes[block]
        t = self._t
        if k == 0:
            return 0
        if k == t:
            return (1 << t) - 1
        off = self._offsets[block]
        binom = self._binom
        word = 0
        for p in range(t - 1, -1, -1):
            if k == 0:
                break
            c = binom[p][k]
            if c <= off:
                word |= 1 << p
                off -= c
                k -= 1
        return word

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, i: int) -> int:
        i = operator.index(i)
        if i < 0:
            i += self._size
        if not 0 <= i < self._size:
            raise IndexError("bit index out of range")
        block, pos = divmod(i, self._t)
        return (self._decode(block) >> pos) & 1

    def __repr__(self) -> str:
        return f"RRRVector(size={self._size}, block_size={self._t})"

    def rank(self, i: int) -> int:
        """Number of set bits in positions ``[0, i)``."""
        i = operator.index(i)
        if not 0 <= i <= self._size:
            raise IndexError("rank index out of range")
        block, pos = divmod(i, self._t)
        sample = block // _SAMPLE_BLOCKS
        r = self._samples[sample] + sum(self._classes[sample * _SAMPLE_BLOCKS:block])
        if pos:
            r += (self._decode(block) & ((1 << pos) - 1)).bit_count()
        return r

    def size_in_bytes(self) -> int:
        """Bytes of the serialized form plus the rank samples kept in memory."""
        return len(self.to_bytes()) + _U64.size * len(self._samples)

    def to_bytes(self) -> bytes:
        """Serialize as bit length and block size (little-endian u64) and packed fields.

        The packed payload holds every block class in fixed width followed by
        every offset in the width its class needs, least significant bit first.
        """
        class_width = self._t.bit_length()
        fields = [(k, class_width) for k in self._classes]
        fields.extend(
            (off, self._offset_width(k)) for k, off in zip(self._classes, self._offsets)
        )
        total = sum(w for _, w in fields)
        header = _HEADER.pack(self._size, self._t)
        if total == 0:
            return header
        packed = "".join(format(v, f"0{w}b") for v, w in reversed(fields) if w)
        return header + int(packed, 2).to_bytes(ceil_div(total, 8), "little")

    @classmethod
    def from_bytes(cls, data: bytes) -> "RRRVector":
        """Inverse of :meth:`to_bytes`."""
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise ValueError("truncated compressed vector header")
        size, t = _HEADER.unpack_from(data, 0)
        try:
            t = _check_block_size(t)
        except ValueError as exc:
            raise ValueError("invalid block size in compressed vector") from exc
        payload = data[_HEADER.size:]
        n_bits = len(payload) * 8
        stream = format(int.from_bytes(payload, "little"), f"0{n_bits}b") if n_bits else ""
        pos = 0

        def read(width: int) -> int:
            nonlocal pos
            if width == 0:
                return 0
            if pos + width > n_bits:
                raise ValueError("truncated compressed vector data")
            value = int(stream[n_bits - pos - width:n_bits - pos], 2)
            pos += width
            return value

        n_blocks = ceil_div(size, t)
        binom = _binomials(t)
        class_width = t.bit_length()
        classes = [read(class_width) for _ in range(n_blocks)]
        for block, k in enumerate(classes):
            length = min(t, size - block * t)
            if k > length:
                raise ValueError("block class exceeds block length")
        offsets = []
        for k in classes:
            off = read((binom[t][k] - 1).bit_length())
            if off >= binom[t][k]:
                raise ValueError("block offset out of range")
            offsets.append(off)
        if len(payload) != ceil_div(pos, 8):
            raise ValueError("unexpected trailing bytes after compressed vector")
        vector = cls.__new__(cls)
        vector._setup(size, t, classes, offsets)
        if n_blocks:
            tail = size - (n_blocks - 1) * t
            if vector._decode(n_blocks - 1) >> tail:
                raise ValueError("last block holds bits past the vector end")
        return vector