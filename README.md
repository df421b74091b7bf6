# runvec

Bit vectors and the structures built on them, in plain Python using only
the standard library.

## Modules

- `runvec.bitvector`
  - `BitVector`: an immutable bit vector stored in 64-bit words. It supports
    `len()`, indexing and iteration, and `rank(i)` counts the ones in `[0, i)`.
    Build one from any iterable of truthy or falsy values, or with
    `BitVector.from_positions(size, positions)`. `to_bytes()` and
    `from_bytes()` give a binary form: the length, then the words, as
    little-endian u64. `size_in_bytes()` is the size of that form.
  - `write_bitvectors(path, vectors)` and `load_bitvectors(path)` store
    several vectors in one file.
- `runvec.rrr.RRRVector(bits, block_size=127)`: a compressed bit vector.
  Each block is stored as its count of ones and an index among the blocks
  with that count. It supports access, `rank`, `size_in_bytes`, `to_bytes`
  and `from_bytes`. Block sizes run from 1 to 256.
- `runvec.prev_support.PrevSupport(bits, bit=1)`: `prev(idx)`, also reached
  by calling the object, returns the last position at or before `idx` that
  holds `bit`. When there is none, it returns the vector's length. The
  sample arrays serialise with `to_bytes()` and `from_bytes(data, bits)`.
- `runvec.partition`: `optimal_variable(blocks, size, eps1=0.03, eps2=0.3)`
  and `optimal_sparse_variable(...)` split a sequence of `BlockType` values
  (`RUN0`, `RUN1`, `MIXED`) into segments of least cost. Each returns a
  `Partition` holding the segment end positions and the total cost in bits.
  In the sparse variant, runs of zeros cost one bit less than runs of ones.
- `runvec.math_util`: `ceil_div`, and `hi` / `lo`, the positions of the
  highest and lowest set bits.
- `runvec.bwt`:
  - `load_symbols(path, num_bytes)` reads little-endian 1-, 2-, 4- or
    8-byte symbols.
  - `remap_symbols` renumbers values from 1 in order of first appearance.
  - `read_text` does both and then appends a terminating `0`.
  - `build_suffix_array` and `build_bwt` produce the suffix array and the
    transform.
  - `symbol_bitvectors(text)` returns one `BitVector` for each symbol from
    `1` to `sigma - 1`.
- `runvec.wavelet`: `WaveletMatrix`, `WaveletTree` and `HuffmanWaveletTree`
  over sequences of unsigned 64-bit integers. All three support access,
  `rank(i, symbol)`, `sigma`, `size_in_bytes()`, `save(path)` and
  `load(path)`.
  - The matrix and the balanced tree also expose `levels` and
    `level_bits(level)`.
  - The Huffman-shaped tree exposes `code(symbol)`.
- `runvec.experiments`: space measurements. `BitVectorKind` is `plain` or
  `rrr`, and `make_bitvector(bits, kind)` builds a vector of that kind. The
  functions are:
  - `run_bitvectors`
  - `run_levels`
  - `run_full`
  - `run_from_bwt`

  Each loads its index file if it can. Otherwise it builds the index from
  the input text and stores it. Each writes its progress and sizes to a
  text stream. `run_full` and `run_from_bwt` also write an HTML summary
  next to the index file.
- `runvec.generators`:
  - `generate(size, ratio, rng)` returns a vector with exactly
    `int(size * ratio)` ones.
  - `generate_runs(size, mean_1, stdev_1, mean_0, stdev_0, rng)` returns
    alternating runs, starting with zeros. Run lengths are normally
    distributed, clamped to mean ± stdev and truncated to integers.
  - `vector_stats(bits)` returns a `VectorStats`.
- `runvec.queries`: `random_queries(maximum, size, seed=5489)` draws values
  in `0..maximum` inclusive. `write_queries` and `read_queries` store them
  as little-endian u64.
- `runvec.bitvector_io`: `store_bitvector` and `load_bitvector` save and read
  a single vector. `to_roaring_text(bits)` gives the positions of the ones,
  then the length, comma separated on one line.

## Installing

```
pip install .
pip install ".[test]"   # with pytest
pytest
```

## Example

```python
from runvec.bitvector import BitVector
from runvec.bwt import build_bwt, read_text
from runvec.wavelet import WaveletMatrix

bv = BitVector.from_positions(10, [1, 4, 5])
bv.rank(5)   # 2
bv[4]        # 1

text = read_text("input.txt", 1)
wm = WaveletMatrix(build_bwt(text))
wm.rank(len(wm), 1)
```

## Commands

- `runvec-exp bvs <file> <num_bytes>`: per-symbol bit vectors of the text,
  in both kinds. They are stored in `<file>.plain.bvs` and `<file>.rrr.bvs`.
- `runvec-exp levels <file> {plain,rrr} [--structure {wm,wt}]`: builds a
  wavelet matrix or tree over the transform of the text, stored in
  `<file>.wm` or `<file>.wt`. It reports the size of each level stored as
  the chosen kind.
- `runvec-exp full <file> [--structure {wm,wt,wt_huff}]`: the size of the
  whole structure, stored in `<file>.<structure>` with an `.html` summary.
- `runvec-exp bwt <file> <num_bytes>`: a wavelet matrix over a file that
  already holds a transform. It is stored in `<file>.bwt.wm`.
- `runvec-roaring <input> <output>`: writes the text export of a stored bit
  vector.
- `runvec-gen <exp>`: writes experiment vectors to the current directory.
  These are large: 10^7, 10^8 and 10^9 bits.
  - `1`: uniform ones at ratios from 1% to 9%.
  - `2`: runs of growing mean length.
- `runvec-queries <max> <size> <file>`: writes `<size>` random positions
  below `<max>`.

## What it does not do

The only bit vector representations are plain and block-compressed. There
are no run-length or hybrid representations. Bit vectors answer access,
rank and (through `PrevSupport`) predecessor queries. There are no select
or successor queries. Stored files use this package's own binary layout.