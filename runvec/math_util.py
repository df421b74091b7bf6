"""Small integer helpers used by the succinct structures."""

from __future__ import annotations

import operator


def ceil_div(x: int, d: int) -> int:
    """Return ``x / d`` rounded up, for non-negative ``x`` and positive ``d``."""
    return (x + d - 1) // d


def hi(x: int) -> int:
    """Position of the most significant set bit of ``x``, or 0 when ``x`` is 0."""
    x = operator.index(x)
    if x < 0:
        raise ValueError("hi() is defined for non-negative integers only")
    if x == 0:
        return 0
    return x.bit_length() - 1


def lo(x: int) -> int:
    """Position of the least significant set bit of ``x``, or 0 when ``x`` is 0."""
    x = operator.index(x)
    if x < 0:
        raise ValueError("lo() is defined for non-negative integers only")
    if x == 0:
        return 0
    return (x & -x).bit_length() - 1