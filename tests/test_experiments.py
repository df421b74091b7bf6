import io

import pytest

from runvec.bitvector import BitVector
from runvec.bwt import build_bwt, read_text, symbol_bitvectors
from runvec.experiments import (
    BitVectorKind,
    main,
    make_bitvector,
    run_bitvectors,
    run_from_bwt,
    run_full,
    run_levels,
)
from runvec.rrr import RRRVector
from runvec.wavelet import HuffmanWaveletTree, WaveletMatrix, WaveletTree


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "text.txt"
    path.write_bytes(b"mississippi banana abracadabra")
    return path


BITS = [1, 0, 0, 1, 1, 1, 0, 1, 0, 0, 0, 1] * 20


@pytest.mark.parametrize("kind", ["plain", "rrr", BitVectorKind.RRR])
def test_make_bitvector_keeps_bits(kind):
    vector = make_bitvector(BITS, kind)
    assert [vector[i] for i in range(len(BITS))] == BITS
    assert vector.rank(len(BITS)) == sum(BITS)


def test_make_bitvector_classes():
    plain = make_bitvector(BITS, "plain")
    rrr = make_bitvector(BITS, "rrr")
    assert plain.to_bytes() == BitVector(BITS).to_bytes()
    assert rrr.to_bytes() == RRRVector(BITS).to_bytes()
    assert rrr.size_in_bytes() == RRRVector(BITS).size_in_bytes()


def test_make_bitvector_rejects_unknown_kind():
    with pytest.raises(ValueError):
        make_bitvector(BITS, "zombit")


@pytest.mark.parametrize("kind", list(BitVectorKind))
def test_run_bitvectors_builds_then_loads(text_file, tmp_path, kind):
    index = tmp_path / f"text.{kind.value}.bvs"
    first_out = io.StringIO()
    built = run_bitvectors(text_file, index, 1, kind, first_out)
    assert index.exists()
    assert "[fail]" in first_out.getvalue()
    expected = symbol_bitvectors(read_text(text_file, 1))
    assert [list(v[i] for i in range(len(v))) for v in built] == [list(e) for e in expected]

    second_out = io.StringIO()
    loaded = run_bitvectors(text_file, index, 1, kind, second_out)
    assert "[fail]" not in second_out.getvalue()
    assert [v.to_bytes() for v in loaded] == [v.to_bytes() for v in built]
    total = sum(v.size_in_bytes() for v in loaded)
    assert f"Size in Bytes : {total}" in second_out.getvalue()


def test_run_bitvectors_rejects_corrupt_index(text_file, tmp_path):
    index = tmp_path / "broken.bvs"
    index.write_bytes(b"\x05")
    with pytest.raises(ValueError):
        run_bitvectors(text_file, index, 1, "plain", io.StringIO())


@pytest.mark.parametrize("structure,cls", [("wm", WaveletMatrix), ("wt", WaveletTree)])
def test_run_levels_matches_structure(text_file, tmp_path, structure, cls):
    index = tmp_path / f"text.{structure}"
    out = io.StringIO()
    sizes = run_levels(text_file, index, "rrr", structure, out)
    reference = cls(build_bwt(read_text(text_file, 1)))
    assert len(sizes) == reference.levels
    assert sizes == [
        RRRVector(reference.level_bits(l)).size_in_bytes() for l in range(reference.levels)
    ]
    text = out.getvalue()
    assert f"sigma: {reference.sigma}" in text
    assert "[fail]" in text
    assert cls.load(index).level_bits(0) == reference.level_bits(0)


def test_run_levels_reuses_index(text_file, tmp_path):
    index = tmp_path / "text.wm"
    first = run_levels(text_file, index, "plain", "wm", io.StringIO())
    out = io.StringIO()
    second = run_levels(text_file, index, "plain", "wm", out)
    assert first == second
    assert "[fail]" not in out.getvalue()
    assert "Size in Bytes WM:" in out.getvalue()


def test_run_levels_rejects_huffman(text_file, tmp_path):
    with pytest.raises(ValueError):
        run_levels(text_file, tmp_path / "x", "plain", "wt_huff", io.StringIO())


@pytest.mark.parametrize("structure", ["wm", "wt", "wt_huff"])
def test_run_full_holds_transform(text_file, tmp_path, structure):
    index = tmp_path / f"text.{structure}"
    out = io.StringIO()
    wavelet = run_full(text_file, index, structure, out)
    bwt = build_bwt(read_text(text_file, 1))
    assert [wavelet[i] for i in range(len(wavelet))] == bwt
    assert (tmp_path / f"text.{structure}.html").exists()
    assert f"Size in Bytes : {wavelet.size_in_bytes()}" in out.getvalue()


def test_run_full_huffman_loads_back(text_file, tmp_path):
    index = tmp_path / "text.wt_huff"
    built = run_full(text_file, index, "wt_huff", io.StringIO())
    loaded = HuffmanWaveletTree.load(index)
    assert [loaded[i] for i in range(len(loaded))] == [built[i] for i in range(len(built))]


def test_run_full_unknown_structure(text_file, tmp_path):
    with pytest.raises(ValueError):
        run_full(text_file, tmp_path / "x", "csa", io.StringIO())


def test_run_from_bwt_uses_file_directly(tmp_path):
    path = tmp_path / "bwt.bin"
    path.write_bytes(bytes([7, 0, 3, 0, 7, 0, 9, 1]))
    index = tmp_path / "bwt.wm"
    out = io.StringIO()
    wavelet = run_from_bwt(path, index, 2, out)
    expected = read_text(path, 2)
    assert [wavelet[i] for i in range(len(wavelet))] == expected
    assert "Reading BWT ... [done]" in out.getvalue()
    again = io.StringIO()
    reloaded = run_from_bwt(path, index, 2, again)
    assert "[fail]" not in again.getvalue()
    assert reloaded.sigma == wavelet.sigma


def test_main_bvs_creates_indexes(text_file):
    assert main(["bvs", str(text_file), "1"]) == 0
    for kind in BitVectorKind:
        assert (text_file.parent / f"{text_file.name}.{kind.value}.bvs").exists()


def test_main_full_and_levels(text_file):
    assert main(["full", str(text_file), "--structure", "wt_huff"]) == 0
    assert (text_file.parent / f"{text_file.name}.wt_huff.html").exists()
    assert main(["levels", str(text_file), "rrr", "--structure", "wt"]) == 0
    assert (text_file.parent / f"{text_file.name}.wt").exists()


def test_main_reports_bad_byte_width(text_file):
    assert main(["bwt", str(text_file), "3"]) == 1


def test_main_rejects_unknown_kind(text_file):
    with pytest.raises(SystemExit):
        main(["levels", str(text_file), "zombit"])