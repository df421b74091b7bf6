[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "runvec"
version = "0.1.0"
description = "Plain and block-compressed bit vectors, predecessor support, wavelet structures, BWT tools and bit-vector experiment utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bit vector",
    "succinct data structures",
    "rank",
    "predecessor",
    "wavelet matrix",
    "wavelet tree",
    "huffman",
    "burrows-wheeler",
    "suffix array",
    "rrr",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
runvec-exp = "runvec.experiments:main"
runvec-roaring = "runvec.bitvector_io:main"
runvec-gen = "runvec.generators:main"
runvec-queries = "runvec.queries:main"

[tool.hatch.build.targets.wheel]
packages = ["runvec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
