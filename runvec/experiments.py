"""Space experiments over bit vectors built from texts and their transforms.

Each experiment loads a stored index when one exists and otherwise builds it
from the input text and stores it, then reports how many bytes it takes.
"""

from __future__ import annotations

import argparse
import enum
import html
import struct
import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence, TextIO, TypeVar, Union

from runvec.bitvector import BitVector
from runvec.bwt import build_bwt, read_text, symbol_bitvectors
from runvec.rrr import RRRVector
from runvec.wavelet import HuffmanWaveletTree, WaveletMatrix, WaveletTree

_U64 = struct.Struct("<Q")

Vector = Union[BitVector, RRRVector]
Structure = Union[WaveletMatrix, WaveletTree, HuffmanWaveletTree]
_T = TypeVar("_T")


class BitVectorKind(enum.Enum):
    """Bit vector representations an experiment can measure."""

    PLAIN = "plain"
    RRR = "rrr"

    @property
    def label(self) -> str:
        return self.name

    @property
    def vector_class(self) -> type:
        return BitVector if self is BitVectorKind.PLAIN else RRRVector


def make_bitvector(bits: Iterable[object], kind: BitVectorKind | str) -> Vector:
    """Build a bit vector of the given kind holding ``bits``."""
    kind = BitVectorKind(kind)
    return kind.vector_class(bits)


_STRUCTURES: dict[str, tuple[type, str, str]] = {
    "wm": (WaveletMatrix, "WM", "WM"),
    "wt": (WaveletTree, "WT", "WT"),
    "wt_huff": (HuffmanWaveletTree, "WT", "WT_Huff"),
}
_LEVELED = ("wm", "wt")


def _structure_entry(structure: str) -> tuple[type, str, str]:
    try:
        return _STRUCTURES[structure]
    except KeyError:
        raise ValueError(f"unknown structure: {structure!r}") from None


def _write_vectors(path: str | Path, vectors: Sequence[Vector]) -> None:
    with open(path, "wb") as out:
        out.write(_U64.pack(len(vectors)))
        for vector in vectors:
            blob = vector.to_bytes()
            out.write(_U64.pack(len(blob)))
            out.write(blob)


def _load_vectors(path: str | Path, kind: BitVectorKind) -> list[Vector]:
    data = Path(path).read_bytes()
    offset = 0

    def read_u64() -> int:
        nonlocal offset
        if offset + _U64.size > len(data):
            raise ValueError("truncated bit vector collection")
        (value,) = _U64.unpack_from(data, offset)
        offset += _U64.size
        return value

    vectors = []
    for _ in range(read_u64()):
        length = read_u64()
        end = offset + length
        if end > len(data):
            raise ValueError("truncated bit vector collection")
        vectors.append(kind.vector_class.from_bytes(data[offset:end]))
        offset = end
    if offset != len(data):
        raise ValueError("unexpected trailing bytes after bit vector collection")
    return vectors


def _load_or_build(
    load: Callable[[], _T],
    build: Callable[[], _T],
    save: Callable[[_T], None],
    reading: str,
    building: str,
    out: TextIO,
) -> _T:
    out.write(f"Reading {reading} ... ")
    out.flush()
    try:
        obj = load()
    except (OSError, ValueError):
        out.write("[fail]\n")
        out.write(f"Building {building} ... ")
        out.flush()
        obj = build()
        save(obj)
    out.write("[done]\n")
    return obj


def _write_html(structure: Structure, path: str | Path) -> None:
    rows = [
        ("class", type(structure).__name__),
        ("size", len(structure)),
        ("sigma", structure.sigma),
        ("bytes", structure.size_in_bytes()),
    ]
    if isinstance(structure, (WaveletMatrix, WaveletTree)):
        rows.extend(
            (f"level {level} bytes", structure.level_bits(level).size_in_bytes())
            for level in range(structure.levels)
        )
    body = "\n".join(
        f"<tr><th>{html.escape(str(name))}</th><td>{html.escape(str(value))}</td></tr>"
        for name, value in rows
    )
    Path(path).write_text(
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\"><title>"
        f"{html.escape(type(structure).__name__)}</title></head>\n"
        f"<body><table>\n{body}\n</table></body></html>\n",
        encoding="utf-8",
    )


def run_bitvectors(
    file_name: str | Path,
    index_file: str | Path,
    num_bytes: int = 1,
    kind: BitVectorKind | str = BitVectorKind.PLAIN,
    out: TextIO | None = None,
) -> list[Vector]:
    """Per-symbol bit vectors of a text, loaded from ``index_file`` or built and stored."""
    out = sys.stdout if out is None else out
    kind = BitVectorKind(kind)
    out.write("Reading BVS ... ")
    out.flush()
    if not Path(index_file).exists():
        out.write("[fail]\n")
        out.write("Building BVS ... ")
        out.flush()
        text = read_text(file_name, num_bytes)
        vectors = [make_bitvector(bv, kind) for bv in symbol_bitvectors(text)]
        _write_vectors(index_file, vectors)
    else:
        vectors = _load_vectors(index_file, kind)
    out.write("[done]\n")
    out.write(f"Size in Bytes : {sum(v.size_in_bytes() for v in vectors)}\n")
    return vectors


def run_levels(
    file_name: str | Path,
    index_file: str | Path,
    kind: BitVectorKind | str = BitVectorKind.PLAIN,
    structure: str = "wm",
    out: TextIO | None = None,
) -> list[int]:
    """Build a wavelet structure over the text's transform and size each level as ``kind``."""
    out = sys.stdout if out is None else out
    kind = BitVectorKind(kind)
    if structure not in _LEVELED:
        raise ValueError(f"structure must be one of {', '.join(_LEVELED)}")
    cls, reading, building = _structure_entry(structure)
    wavelet = _load_or_build(
        lambda: cls.load(index_file),
        lambda: cls(build_bwt(read_text(file_name, 1))),
        lambda obj: obj.save(index_file),
        reading,
        building,
        out,
    )
    out.write(f"sigma: {wavelet.sigma}\n")
    if structure == "wm":
        out.write(f"Size in Bytes WM: {wavelet.size_in_bytes()}\n")
    sizes = []
    for level in range(wavelet.levels):
        out.write(f"Building bitvector at level={level} ...")
        out.flush()
        bits = wavelet.level_bits(level)
        out.write("[done]\n")
        out.write(f"Compressing bitvector at level={level} ...")
        out.flush()
        vector = make_bitvector(bits, kind)
        out.write("[done]\n")
        size = vector.size_in_bytes()
        out.write(f"Size in Bytes at level={level}: {size}\n")
        sizes.append(size)
    return sizes


def run_full(
    file_name: str | Path,
    index_file: str | Path,
    structure: str = "wm",
    out: TextIO | None = None,
) -> Structure:
    """Build a whole wavelet structure over the text's transform and report its size."""
    out = sys.stdout if out is None else out
    cls, reading, building = _structure_entry(structure)
    wavelet = _load_or_build(
        lambda: cls.load(index_file),
        lambda: cls(build_bwt(read_text(file_name, 1))),
        lambda obj: obj.save(index_file),
        reading,
        building,
        out,
    )
    out.write(f"sigma: {wavelet.sigma}\n")
    out.write(f"Size in Bytes : {wavelet.size_in_bytes()}\n")
    _write_html(wavelet, f"{index_file}.html")
    return wavelet


def run_from_bwt(
    file_name: str | Path,
    index_file: str | Path,
    num_bytes: int = 1,
    out: TextIO | None = None,
) -> WaveletMatrix:
    """Build a wavelet matrix directly over a file that already holds a transform."""
    out = sys.stdout if out is None else out
    out.write("Reading WM ... ")
    out.flush()
    try:
        wavelet = WaveletMatrix.load(index_file)
    except (OSError, ValueError):
        out.write("[fail]\n")
        out.write("Reading BWT ... ")
        out.flush()
        bwt = read_text(file_name, num_bytes)
        out.write("[done]\n")
        out.write("Building WM ... ")
        out.flush()
        wavelet = WaveletMatrix(bwt)
        wavelet.save(index_file)
    out.write("[done]\n")
    out.write(f"sigma: {wavelet.sigma}\n")
    out.write(f"Size in Bytes : {wavelet.size_in_bytes()}\n")
    _write_html(wavelet, f"{index_file}.html")
    return wavelet


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runvec-exp", description="Measure the space of succinct structures over a text."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    kinds = [k.value for k in BitVectorKind]

    bvs = sub.add_parser("bvs", help="one bit vector per symbol of the text")
    bvs.add_argument("file")
    bvs.add_argument("num_bytes", type=int)

    levels = sub.add_parser("levels", help="size of each wavelet level as a bit vector")
    levels.add_argument("file")
    levels.add_argument("kind", choices=kinds)
    levels.add_argument("--structure", choices=list(_LEVELED), default="wm")

    full = sub.add_parser("full", help="size of a whole wavelet structure")
    full.add_argument("file")
    full.add_argument("--structure", choices=list(_STRUCTURES), default="wm")

    bwt = sub.add_parser("bwt", help="wavelet matrix over a stored transform")
    bwt.add_argument("file")
    bwt.add_argument("num_bytes", type=int)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    out = sys.stdout
    try:
        if args.command == "bvs":
            for kind in BitVectorKind:
                out.write(f"---- {kind.label} ----\n")
                run_bitvectors(args.file, f"{args.file}.{kind.value}.bvs", args.num_bytes, kind, out)
        elif args.command == "levels":
            kind = BitVectorKind(args.kind)
            out.write(f"---- {kind.label} ----\n")
            run_levels(args.file, f"{args.file}.{args.structure}", kind, args.structure, out)
        elif args.command == "full":
            run_full(args.file, f"{args.file}.{args.structure}", args.structure, out)
        else:
            run_from_bwt(args.file, f"{args.file}.bwt.wm", args.num_bytes, out)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0