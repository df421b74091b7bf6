import random
import struct

import pytest

from runvec.bitvector import BitVector, load_bitvectors, write_bitvectors


def _random_bits(size, seed, density=0.3):
    rng = random.Random(seed)
    return [1 if rng.random() < density else 0 for _ in range(size)]


def test_access_matches_input():
    bits = _random_bits(300, 1)
    bv = BitVector(bits)
    assert len(bv) == 300
    assert [bv[i] for i in range(300)] == bits
    assert list(bv) == bits


def test_negative_index_and_out_of_range():
    bv = BitVector([0, 1, 1])
    assert bv[-1] == 1
    with pytest.raises(IndexError):
        bv[3]
    with pytest.raises(IndexError):
        bv[-4]


@pytest.mark.parametrize("size", [0, 1, 63, 64, 65, 128, 1000])
def test_rank_counts_prefix(size):
    bits = _random_bits(size, size)
    bv = BitVector(bits)
    for i in range(size + 1):
        assert bv.rank(i) == sum(bits[:i])


def test_rank_out_of_range():
    bv = BitVector([1, 0])
    with pytest.raises(IndexError):
        bv.rank(3)
    with pytest.raises(IndexError):
        bv.rank(-1)


def test_from_positions_equals_constructor():
    positions = [0, 5, 63, 64, 199]
    bits = [1 if i in positions else 0 for i in range(200)]
    assert BitVector.from_positions(200, positions) == BitVector(bits)


def test_from_positions_rejects_outside():
    with pytest.raises(IndexError):
        BitVector.from_positions(10, [10])


def test_to_bytes_layout():
    assert BitVector([1, 0, 1]).to_bytes() == struct.pack("<QQ", 3, 5)


@pytest.mark.parametrize("size", [0, 7, 64, 130])
def test_bytes_round_trip(size):
    bv = BitVector(_random_bits(size, 7))
    data = bv.to_bytes()
    assert len(data) == bv.size_in_bytes()
    assert BitVector.from_bytes(data) == bv


def test_from_bytes_truncated():
    data = BitVector([1] * 100).to_bytes()
    with pytest.raises(ValueError):
        BitVector.from_bytes(data[:-1])
    with pytest.raises(ValueError):
        BitVector.from_bytes(data[:4])


def test_from_bytes_trailing():
    data = BitVector([1, 1]).to_bytes() + b"\x00"
    with pytest.raises(ValueError):
        BitVector.from_bytes(data)


def test_file_round_trip(tmp_path):
    vectors = [BitVector(_random_bits(n, n)) for n in (0, 10, 100, 1000)]
    path = tmp_path / "vectors.bvs"
    write_bitvectors(path, vectors)
    assert load_bitvectors(path) == vectors


def test_load_truncated_file(tmp_path):
    path = tmp_path / "broken.bvs"
    write_bitvectors(path, [BitVector([1] * 70)])
    path.write_bytes(path.read_bytes()[:-3])
    with pytest.raises(ValueError):
        load_bitvectors(path)