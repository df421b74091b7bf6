"""A plain bit vector with constant-time rank and a compact binary form."""

from __future__ import annotations

import operator
import struct
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from runvec.math_util import ceil_div

WORD_BITS = 64
_WORD_MASK = (1 << WORD_BITS) - 1
_U64 = struct.Struct("<Q")


class BitVector:
    """Immutable sequence of bits stored in 64-bit words, least significant bit first."""

    def __init__(self, bits: Iterable[object] = ()) -> None:
        words: list[int] = []
        size = 0
        for size, bit in enumerate(bits, start=1):
            if bit:
                pos = size - 1
                block = pos >> 6
                while len(words) <= block:
                    words.append(0)
                words[block] |= 1 << (pos & 63)
        words.extend([0] * (ceil_div(size, WORD_BITS) - len(words)))
        self._setup(size, words)

    def _setup(self, size: int, words: list[int]) -> None:
        self._size = size
        self._words = words
        ranks = [0]
        total = 0
        for word in words:
            total += word.bit_count()
            ranks.append(total)
        self._ranks = ranks

    @classmethod
    def _from_words(cls, size: int, words: list[int]) -> "BitVector":
        vector = cls.__new__(cls)
        words = list(words)
        tail = size & 63
        if words and tail:
            words[-1] &= (1 << tail) - 1
        vector._setup(size, words)
        return vector

    @classmethod
    def from_positions(cls, size: int, positions: Iterable[int]) -> "BitVector":
        """Build a vector of ``size`` bits with ones at ``positions``."""
        if size < 0:
            raise ValueError("size must be non-negative")
        words = [0] * ceil_div(size, WORD_BITS)
        for pos in positions:
            pos = operator.index(pos)
            if not 0 <= pos < size:
                raise IndexError(f"position {pos} outside a vector of {size} bits")
            words[pos >> 6] |= 1 << (pos & 63)
        return cls._from_words(size, words)

    @property
    def words(self) -> tuple[int, ...]:
        """The 64-bit words holding the bits."""
        return tuple(self._words)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, i: int) -> int:
        i = operator.index(i)
        if i < 0:
            i += self._size
        if not 0 <= i < self._size:
            raise IndexError("bit index out of range")
        return (self._words[i >> 6] >> (i & 63)) & 1

    def __iter__(self) -> Iterator[int]:
        remaining = self._size
        for word in self._words:
            for offset in range(min(WORD_BITS, remaining)):
                yield (word >> offset) & 1
            remaining -= WORD_BITS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitVector):
            return NotImplemented
        return self._size == other._size and self._words == other._words

    def __repr__(self) -> str:
        ones = sum(self._ranks[-1:])
        return f"BitVector(size={self._size}, ones={ones})"

    def rank(self, i: int) -> int:
        """Number of set bits in positions ``[0, i)``."""
        i = operator.index(i)
        if not 0 <= i <= self._size:
            raise IndexError("rank index out of range")
        block, offset = i >> 6, i & 63
        if offset == 0:
            return self._ranks[block]
        return self._ranks[block] + (self._words[block] & ((1 << offset) - 1)).bit_count()

    def size_in_bytes(self) -> int:
        """Bytes taken by the serialized form."""
        return _U64.size * (1 + len(self._words))

    def to_bytes(self) -> bytes:
        """Serialize as the bit length followed by the words, all little-endian u64."""
        return struct.pack(f"<Q{len(self._words)}Q", self._size, *self._words)

    @classmethod
    def _read(cls, data: bytes, offset: int) -> tuple["BitVector", int]:
        if offset + _U64.size > len(data):
            raise ValueError("truncated bit vector header")
        (size,) = _U64.unpack_from(data, offset)
        offset += _U64.size
        count = ceil_div(size, WORD_BITS)
        end = offset + count * _U64.size
        if end > len(data):
            raise ValueError("truncated bit vector data")
        words = list(struct.unpack_from(f"<{count}Q", data, offset))
        return cls._from_words(size, words), end

    @classmethod
    def from_bytes(cls, data: bytes) -> "BitVector":
        """Inverse of :meth:`to_bytes`."""
        vector, end = cls._read(bytes(data), 0)
        if end != len(data):
            raise ValueError("unexpected trailing bytes after bit vector")
        return vector


def write_bitvectors(path: str | Path, vectors: Sequence[BitVector]) -> None:
    """Write a count followed by each vector's serialized form."""
    with open(path, "wb") as out:
        out.write(_U64.pack(len(vectors)))
        for vector in vectors:
            out.write(vector.to_bytes())


def load_bitvectors(path: str | Path) -> list[BitVector]:
    """Read the vectors written by :func:`write_bitvectors`."""
    data = Path(path).read_bytes()
    if len(data) < _U64.size:
        raise ValueError("truncated bit vector collection")
    (count,) = _U64.unpack_from(data, 0)
    offset = _U64.size
    vectors = []
    for _ in range(count):
        vector, offset = BitVector._read(data, offset)
        vectors.append(vector)
    return vectors