import pytest

from runvec.bwt import build_bwt, remap_symbols
from runvec.wavelet import HuffmanWaveletTree, WaveletMatrix, WaveletTree


def _bwt_sample():
    text = remap_symbols(b"abracadabra mississippi banana")
    text.append(0)
    return build_bwt(text)


SAMPLES = [
    _bwt_sample(),
    [5, 3, 0, 7, 7, 1, 3, 3, 9, 0, 2, 5],
    [4] * 10,
    [0, 0, 0],
    list(range(70)) * 2,
]


@pytest.mark.parametrize("values", SAMPLES)
def test_access_reproduces_values(values):
    for structure in (WaveletMatrix(values), WaveletTree(values), HuffmanWaveletTree(values)):
        assert len(structure) == len(values)
        assert [structure[i] for i in range(len(values))] == values


@pytest.mark.parametrize("values", SAMPLES)
def test_rank_counts_occurrences(values):
    symbols = set(values) | {max(values) + 1, 1000}
    for structure in (WaveletMatrix(values), WaveletTree(values), HuffmanWaveletTree(values)):
        for symbol in symbols:
            for i in range(len(values) + 1):
                assert structure.rank(i, symbol) == values[:i].count(symbol)


def test_sigma_counts_distinct_symbols():
    values = SAMPLES[1]
    distinct = len(set(values))
    assert WaveletMatrix(values).sigma == distinct
    assert WaveletTree(values).sigma == distinct
    assert HuffmanWaveletTree(values).sigma == distinct


@pytest.mark.parametrize("values", SAMPLES + [[]])
def test_save_load_round_trip(values, tmp_path):
    for structure in (WaveletMatrix(values), WaveletTree(values), HuffmanWaveletTree(values)):
        path = tmp_path / f"index.{type(structure).__name__}"
        structure.save(path)
        loaded = type(structure).load(path)
        assert len(loaded) == len(values)
        assert [loaded[i] for i in range(len(values))] == values
        assert loaded.size_in_bytes() == structure.size_in_bytes()
        assert path.stat().st_size == structure.size_in_bytes()
        for symbol in set(values):
            assert loaded.rank(len(values), symbol) == values.count(symbol)


def test_load_rejects_other_kind(tmp_path):
    matrix_path = tmp_path / "matrix.bin"
    WaveletMatrix([1, 2, 3]).save(matrix_path)
    with pytest.raises(ValueError):
        WaveletTree.load(matrix_path)
    with pytest.raises(ValueError):
        HuffmanWaveletTree.load(matrix_path)
    tree_path = tmp_path / "tree.bin"
    WaveletTree([1, 2, 3]).save(tree_path)
    with pytest.raises(ValueError):
        WaveletMatrix.load(tree_path)


def test_load_rejects_truncated_file(tmp_path):
    values = SAMPLES[1]
    for structure in (WaveletMatrix(values), WaveletTree(values), HuffmanWaveletTree(values)):
        path = tmp_path / f"index.{type(structure).__name__}"
        structure.save(path)
        data = path.read_bytes()
        path.write_bytes(data[:-3])
        with pytest.raises(ValueError):
            type(structure).load(path)


def test_negative_symbol_rejected():
    with pytest.raises(ValueError):
        WaveletMatrix([1, -2, 3])
    with pytest.raises(ValueError):
        WaveletTree([1, -2, 3])
    with pytest.raises(ValueError):
        HuffmanWaveletTree([1, -2, 3])


def test_index_errors():
    values = [1, 2, 3]
    for structure in (WaveletMatrix(values), WaveletTree(values), HuffmanWaveletTree(values)):
        with pytest.raises(IndexError):
            structure[3]
        with pytest.raises(IndexError):
            structure.rank(4, 1)
        assert structure[-1] == 3


def test_matrix_and_tree_share_top_level():
    values = SAMPLES[1]
    matrix = WaveletMatrix(values)
    tree = WaveletTree(values)
    assert matrix.levels == tree.levels == max(values).bit_length()
    top = matrix.levels - 1
    assert list(matrix.level_bits(0)) == [(v >> top) & 1 for v in values]
    assert list(tree.level_bits(0)) == list(matrix.level_bits(0))


def test_matrix_levels_preserve_bit_counts():
    values = SAMPLES[0]
    matrix = WaveletMatrix(values)
    levels = matrix.levels
    for level in range(levels):
        bits = matrix.level_bits(level)
        shift = levels - 1 - level
        assert len(bits) == len(values)
        assert bits.rank(len(bits)) == sum((v >> shift) & 1 for v in values)


def test_tree_levels_group_by_prefix():
    values = SAMPLES[1]
    tree = WaveletTree(values)
    levels = tree.levels
    last = list(tree.level_bits(levels - 1))
    ordered = sorted(values, key=lambda v: v >> 1)
    assert last == [v & 1 for v in ordered]


def test_level_bits_out_of_range():
    with pytest.raises(IndexError):
        WaveletMatrix([1, 2]).level_bits(5)
    with pytest.raises(IndexError):
        WaveletTree([1, 2]).level_bits(5)


def test_small_matrix_levels():
    matrix = WaveletMatrix([0, 1, 2, 3])
    assert matrix.levels == 2
    assert list(matrix.level_bits(0)) == [0, 0, 1, 1]


def test_huffman_frequent_symbol_has_shorter_code():
    values = [7] * 20 + [1, 2, 3, 4]
    tree = HuffmanWaveletTree(values)
    assert len(tree.code(7)) < min(len(tree.code(s)) for s in (1, 2, 3, 4))
    with pytest.raises(KeyError):
        tree.code(99)


def test_huffman_single_symbol():
    tree = HuffmanWaveletTree([9, 9, 9])
    assert [tree[i] for i in range(3)] == [9, 9, 9]
    assert tree.rank(2, 9) == 2
    assert tree.rank(3, 8) == 0


def test_empty_structure():
    for structure in (WaveletMatrix([]), WaveletTree([]), HuffmanWaveletTree([])):
        assert len(structure) == 0
        assert structure.rank(0, 1) == 0
        with pytest.raises(IndexError):
            structure[0]