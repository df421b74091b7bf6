"""Plain and compressed bit vectors, predecessor support, partitioning, wavelet structures and BWT tools."""

__version__ = "0.1.0"