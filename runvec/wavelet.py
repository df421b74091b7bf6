"""Wavelet matrix, wavelet tree and Huffman-shaped wavelet tree over integer sequences.

All three answer access and rank queries through plain bit vectors and
store themselves as a short header followed by those bit vectors.
"""

from __future__ import annotations

import heapq
import operator
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from runvec.bitvector import BitVector
from runvec.math_util import ceil_div

_U64 = struct.Struct("<Q")
_MAX_VALUE = (1 << 64) - 1
_MATRIX_MAGIC = b"RVWM"
_TREE_MAGIC = b"RVWT"
_HUFF_MAGIC = b"RVWH"


def _validate(values: Iterable[int]) -> list[int]:
    seq = []
    for value in values:
        value = operator.index(value)
        if not 0 <= value <= _MAX_VALUE:
            raise ValueError("symbols must be unsigned 64-bit integers")
        seq.append(value)
    return seq


def _bitvector_bytes(size: int) -> int:
    return _U64.size * (1 + ceil_div(size, 64))


class _Reader:
    def __init__(self, data: bytes, magic: bytes) -> None:
        if not data.startswith(magic):
            raise ValueError("not a stored structure of the expected kind")
        self._data = data
        self._offset = len(magic)

    def u64(self) -> int:
        if self._offset + _U64.size > len(self._data):
            raise ValueError("truncated structure data")
        (value,) = _U64.unpack_from(self._data, self._offset)
        self._offset += _U64.size
        return value

    def bitvector(self, size: int) -> BitVector:
        end = self._offset + _bitvector_bytes(size)
        if end > len(self._data):
            raise ValueError("truncated structure data")
        vector = BitVector.from_bytes(self._data[self._offset:end])
        if len(vector) != size:
            raise ValueError("bit vector length does not match the structure")
        self._offset = end
        return vector

    def finish(self) -> None:
        if self._offset != len(self._data):
            raise ValueError("unexpected trailing bytes after structure")


def _normalize_index(i: int, size: int) -> int:
    i = operator.index(i)
    if i < 0:
        i += size
    if not 0 <= i < size:
        raise IndexError("index out of range")
    return i


def _check_rank_index(i: int, size: int) -> int:
    i = operator.index(i)
    if not 0 <= i <= size:
        raise IndexError("rank index out of range")
    return i


def _levels_for(seq: list[int]) -> int:
    return max(max(seq).bit_length(), 1) if seq else 0


def _level_at(levels: list[BitVector], level: int) -> BitVector:
    level = operator.index(level)
    if not 0 <= level < len(levels):
        raise IndexError("level out of range")
    return levels[level]


def _leveled_bytes(magic: bytes, size: int, sigma: int, levels: list[BitVector]) -> bytes:
    parts = [magic, struct.pack("<QQQ", size, len(levels), sigma)]
    parts.extend(level.to_bytes() for level in levels)
    return b"".join(parts)


class _LeveledStructure:
    """Shared state and loading for the two fixed-height structures."""

    _magic = b""

    _size: int
    _sigma: int
    _levels: list[BitVector]

    @property
    def sigma(self) -> int:
        """Number of distinct symbols."""
        return self._sigma

    @property
    def levels(self) -> int:
        """Number of bit levels, one per bit of the largest symbol."""
        return len(self._levels)

    @classmethod
    def _read(cls, path: str | Path):
        reader = _Reader(Path(path).read_bytes(), cls._magic)
        size = reader.u64()
        n_levels = reader.u64()
        sigma = reader.u64()
        levels = [reader.bitvector(size) for _ in range(n_levels)]
        reader.finish()
        if (size == 0) != (n_levels == 0):
            raise ValueError("inconsistent level count")
        obj = cls.__new__(cls)
        obj._size = size
        obj._sigma = sigma
        obj._set_levels(levels)
        return obj

    def _set_levels(self, levels: list[BitVector]) -> None:
        self._levels = levels


class WaveletMatrix(_LeveledStructure):
    """Wavelet matrix: each level stably moves zeros before ones."""

    _magic = _MATRIX_MAGIC

    def __init__(self, values: Iterable[int] = ()) -> None:
        seq = _validate(values)
        self._size = len(seq)
        self._sigma = len(set(seq))
        n_levels = _levels_for(seq)
        levels = []
        current = seq
        for level in range(n_levels):
            shift = n_levels - 1 - level
            flags = [(v >> shift) & 1 for v in current]
            levels.append(BitVector(flags))
            current = [v for v, f in zip(current, flags) if not f] + [
                v for v, f in zip(current, flags) if f
            ]
        self._set_levels(levels)

    def _set_levels(self, levels: list[BitVector]) -> None:
        self._levels = levels
        self._zeros = [len(bv) - bv.rank(len(bv)) for bv in levels]

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, i: int) -> int:
        i = _normalize_index(i, self._size)
        value = 0
        for bv, zeros in zip(self._levels, self._zeros):
            bit = bv[i]
            ones = bv.rank(i)
            i = zeros + ones if bit else i - ones
            value = (value << 1) | bit
        return value

    def rank(self, i: int, symbol: int) -> int:
        """Occurrences of ``symbol`` in positions ``[0, i)``."""
        i = _check_rank_index(i, self._size)
        symbol = operator.index(symbol)
        n_levels = len(self._levels)
        if symbol < 0 or symbol.bit_length() > n_levels or n_levels == 0:
            return 0
        start, pos = 0, i
        for level, (bv, zeros) in enumerate(zip(self._levels, self._zeros)):
            if (symbol >> (n_levels - 1 - level)) & 1:
                start = zeros + bv.rank(start)
                pos = zeros + bv.rank(pos)
            else:
                start -= bv.rank(start)
                pos -= bv.rank(pos)
        return pos - start

    def level_bits(self, level: int) -> BitVector:
        """The bit vector stored at ``level`` (0 is the most significant bit)."""
        return _level_at(self._levels, level)

    def size_in_bytes(self) -> int:
        """Bytes of the stored form."""
        return len(_leveled_bytes(self._magic, self._size, self._sigma, self._levels))

    def save(self, path: str | Path) -> None:
        """Write the matrix to ``path``."""
        Path(path).write_bytes(_leveled_bytes(self._magic, self._size, self._sigma, self._levels))

    @classmethod
    def load(cls, path: str | Path) -> "WaveletMatrix":
        """Read a matrix written by :meth:`save`."""
        return cls._read(path)


class WaveletTree(_LeveledStructure):
    """Balanced wavelet tree whose nodes of one level are stored side by side."""

    _magic = _TREE_MAGIC

    def __init__(self, values: Iterable[int] = ()) -> None:
        seq = _validate(values)
        self._size = len(seq)
        self._sigma = len(set(seq))
        n_levels = _levels_for(seq)
        levels = []
        current = seq
        for level in range(n_levels):
            shift = n_levels - 1 - level
            levels.append(BitVector((v >> shift) & 1 for v in current))
            current = sorted(current, key=lambda v, s=shift: v >> s)
        self._set_levels(levels)

    @staticmethod
    def _descend(bv: BitVector, start: int, end: int, pos: int, bit: int) -> tuple[int, int, int]:
        rs = bv.rank(start)
        zeros = (end - start) - (bv.rank(end) - rs)
        ones_before = bv.rank(pos) - rs
        if bit:
            return start + zeros, end, start + zeros + ones_before
        return start, start + zeros, start + (pos - start) - ones_before

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, i: int) -> int:
        i = _normalize_index(i, self._size)
        start, end = 0, self._size
        value = 0
        for bv in self._levels:
            bit = bv[i]
            start, end, i = self._descend(bv, start, end, i, bit)
            value = (value << 1) | bit
        return value

    def rank(self, i: int, symbol: int) -> int:
        """Occurrences of ``symbol`` in positions ``[0, i)``."""
        i = _check_rank_index(i, self._size)
        symbol = operator.index(symbol)
        n_levels = len(self._levels)
        if symbol < 0 or symbol.bit_length() > n_levels or n_levels == 0:
            return 0
        start, end, pos = 0, self._size, i
        for level, bv in enumerate(self._levels):
            bit = (symbol >> (n_levels - 1 - level)) & 1
            start, end, pos = self._descend(bv, start, end, pos, bit)
        return pos - start

    def level_bits(self, level: int) -> BitVector:
        """The bit vector stored at ``level`` (0 is the most significant bit)."""
        return _level_at(self._levels, level)

    def size_in_bytes(self) -> int:
        """Bytes of the stored form."""
        return len(_leveled_bytes(self._magic, self._size, self._sigma, self._levels))

    def save(self, path: str | Path) -> None:
        """Write the tree to ``path``."""
        Path(path).write_bytes(_leveled_bytes(self._magic, self._size, self._sigma, self._levels))

    @classmethod
    def load(cls, path: str | Path) -> "WaveletTree":
        """Read a tree written by :meth:`save`."""
        return cls._read(path)


@dataclass
class _Node:
    weight: int
    symbol: int | None = None
    left: "_Node | None" = None
    right: "_Node | None" = None
    bits: BitVector | None = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def _huffman_shape(freqs: dict[int, int]) -> _Node | None:
    if not freqs:
        return None
    heap = [(count, order, _Node(count, symbol=sym))
            for order, (sym, count) in enumerate(sorted(freqs.items()))]
    heapq.heapify(heap)
    order = len(heap)
    while len(heap) > 1:
        wa, _, a = heapq.heappop(heap)
        wb, _, b = heapq.heappop(heap)
        heapq.heappush(heap, (wa + wb, order, _Node(wa + wb, left=a, right=b)))
        order += 1
    return heap[0][2]


def _codes(root: _Node | None) -> dict[int, tuple[int, ...]]:
    codes: dict[int, tuple[int, ...]] = {}
    stack = [(root, ())] if root is not None else []
    while stack:
        node, code = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = code
        else:
            stack.append((node.left, code + (0,)))
            stack.append((node.right, code + (1,)))
    return codes


def _internal_preorder(root: _Node | None) -> list[_Node]:
    nodes = []
    stack = [root] if root is not None else []
    while stack:
        node = stack.pop()
        if node.is_leaf:
            continue
        nodes.append(node)
        stack.append(node.right)
        stack.append(node.left)
    return nodes


class HuffmanWaveletTree:
    """Wavelet tree shaped by the Huffman code of the symbol frequencies."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        seq = _validate(values)
        self._size = len(seq)
        freqs: dict[int, int] = {}
        for v in seq:
            freqs[v] = freqs.get(v, 0) + 1
        self._freqs = freqs
        self._root = _huffman_shape(freqs)
        self._codes = _codes(self._root)
        stack = [(self._root, seq, 0)] if self._root is not None else []
        while stack:
            node, part, depth = stack.pop()
            if node.is_leaf:
                continue
            flags = [self._codes[v][depth] for v in part]
            node.bits = BitVector(flags)
            stack.append((node.left, [v for v, f in zip(part, flags) if not f], depth + 1))
            stack.append((node.right, [v for v, f in zip(part, flags) if f], depth + 1))

    def __len__(self) -> int:
        return self._size

    @property
    def sigma(self) -> int:
        """Number of distinct symbols."""
        return len(self._freqs)

    def code(self, symbol: int) -> tuple[int, ...]:
        """The Huffman code of ``symbol`` as a tuple of bits."""
        try:
            return self._codes[operator.index(symbol)]
        except KeyError:
            raise KeyError(f"symbol {symbol} does not occur") from None

    def __getitem__(self, i: int) -> int:
        i = _normalize_index(i, self._size)
        node = self._root
        while not node.is_leaf:
            bit = node.bits[i]
            ones = node.bits.rank(i)
            i, node = (ones, node.right) if bit else (i - ones, node.left)
        return node.symbol

    def rank(self, i: int, symbol: int) -> int:
        """Occurrences of ``symbol`` in positions ``[0, i)``."""
        i = _check_rank_index(i, self._size)
        code = self._codes.get(operator.index(symbol))
        if code is None:
            return 0
        node = self._root
        for bit in code:
            ones = node.bits.rank(i)
            i, node = (ones, node.right) if bit else (i - ones, node.left)
        return i

    def _to_bytes(self) -> bytes:
        parts = [_HUFF_MAGIC, struct.pack("<QQ", self._size, len(self._freqs))]
        for sym, count in sorted(self._freqs.items()):
            parts.append(struct.pack("<QQ", sym, count))
        parts.extend(node.bits.to_bytes() for node in _internal_preorder(self._root))
        return b"".join(parts)

    def size_in_bytes(self) -> int:
        """Bytes of the stored form."""
        return len(self._to_bytes())

    def save(self, path: str | Path) -> None:
        """Write the tree to ``path``."""
        Path(path).write_bytes(self._to_bytes())

    @classmethod
    def load(cls, path: str | Path) -> "HuffmanWaveletTree":
        """Read a tree written by :meth:`save`."""
        reader = _Reader(Path(path).read_bytes(), _HUFF_MAGIC)
        size = reader.u64()
        n_symbols = reader.u64()
        freqs: dict[int, int] = {}
        for _ in range(n_symbols):
            sym = reader.u64()
            count = reader.u64()
            if count == 0 or sym in freqs:
                raise ValueError("invalid symbol frequency table")
            freqs[sym] = count
        if sum(freqs.values()) != size:
            raise ValueError("symbol frequencies do not add up to the size")
        root = _huffman_shape(freqs)
        expected = {id(root): size} if root is not None else {}
        for node in _internal_preorder(root):
            length = expected[id(node)]
            if length != node.weight:
                raise ValueError("node sizes do not match the frequencies")
            node.bits = reader.bitvector(length)
            ones = node.bits.rank(length)
            expected[id(node.left)] = length - ones
            expected[id(node.right)] = ones
        reader.finish()
        if root is not None and not root.is_leaf:
            stack = [root]
            while stack:
                node = stack.pop()
                if expected[id(node)] != node.weight:
                    raise ValueError("node sizes do not match the frequencies")
                if not node.is_leaf:
                    stack.extend((node.left, node.right))
        tree = cls.__new__(cls)
        tree._size = size
        tree._freqs = freqs
        tree._root = root
        tree._codes = _codes(root)
        return tree