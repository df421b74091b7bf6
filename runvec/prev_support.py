"""Predecessor queries over a bit vector using two levels of samples."""

from __future__ import annotations

import operator
import struct

from runvec.bitvector import BitVector
from runvec.math_util import ceil_div, hi

W = 64
W2 = W * W
_WORD_MASK = (1 << W) - 1
_U64 = struct.Struct("<Q")


def _pattern_words(bits: BitVector, bit: int) -> list[int]:
    words = list(bits.words)
    if bit == 1:
        return words
    size = len(bits)
    inverted = [~word & _WORD_MASK for word in words]
    tail = size & 63
    if inverted and tail:
        inverted[-1] &= (1 << tail) - 1
    return inverted


class PrevSupport:
    """Answers "last position at or before ``idx`` holding ``bit``" queries.

    A query with no such position answers the vector's length.
    """

    def __init__(self, bits: BitVector, bit: int = 1) -> None:
        if bit not in (0, 1):
            raise ValueError("bit pattern must be 0 or 1")
        self._bits = bits
        self._bit = bit
        self._size = len(bits)
        self._words = _pattern_words(bits, bit)
        basic: list[int] = []
        supers: list[int] = []
        pred: int | None = None
        for i, word in enumerate(self._words):
            if i % W == 0:
                supers.append(self._size if pred is None else pred)
            if i == 0:
                basic.append(0)
            else:
                basic.append(W2 if pred is None else min(i * W - pred, W2))
            if word:
                pred = i * W + hi(word)
        self._basic = basic
        self._super = supers

    @property
    def bit(self) -> int:
        return self._bit

    def prev(self, idx: int) -> int:
        """Last position ``p <= idx`` whose bit equals the pattern, else ``len``."""
        idx = operator.index(idx)
        if idx < 0:
            return self._size
        if idx >= self._size:
            raise IndexError("prev index out of range")
        block = idx >> 6
        cleared = self._words[block] & ((1 << ((idx & 63) + 1)) - 1)
        if cleared:
            return (block << 6) + hi(cleared)
        if block == 0:
            return self._size
        dist = self._basic[block]
        if dist < W2:
            return block * W - dist
        return self._super[idx >> 12]

    def __call__(self, idx: int) -> int:
        return self.prev(idx)

    def __len__(self) -> int:
        return self._size

    def to_bytes(self) -> bytes:
        """Serialize the pattern and both sample arrays; the bits are not included."""
        parts = [_U64.pack(self._bit)]
        for samples in (self._basic, self._super):
            parts.append(struct.pack(f"<Q{len(samples)}Q", len(samples), *samples))
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes, bits: BitVector) -> "PrevSupport":
        """Rebuild a structure from :meth:`to_bytes` output over ``bits``."""
        data = bytes(data)
        offset = 0

        def read_u64() -> int:
            nonlocal offset
            if offset + _U64.size > len(data):
                raise ValueError("truncated prev support data")
            (value,) = _U64.unpack_from(data, offset)
            offset += _U64.size
            return value

        def read_array() -> list[int]:
            nonlocal offset
            count = read_u64()
            end = offset + count * _U64.size
            if end > len(data):
                raise ValueError("truncated prev support data")
            values = list(struct.unpack_from(f"<{count}Q", data, offset))
            offset = end
            return values

        bit = read_u64()
        if bit not in (0, 1):
            raise ValueError("bit pattern must be 0 or 1")
        basic = read_array()
        supers = read_array()
        if offset != len(data):
            raise ValueError("unexpected trailing bytes after prev support")
        n_words = ceil_div(len(bits), W)
        if len(basic) != n_words or len(supers) != ceil_div(n_words, W):
            raise ValueError("prev support data does not match the bit vector")
        support = cls.__new__(cls)
        support._bits = bits
        support._bit = bit
        support._size = len(bits)
        support._words = _pattern_words(bits, bit)
        support._basic = basic
        support._super = supers
        return support