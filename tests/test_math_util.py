import pytest

from runvec.math_util import ceil_div, hi, lo


def test_ceil_div_rounds_up():
    assert ceil_div(10, 3) == 4


def test_ceil_div_exact_and_zero():
    assert ceil_div(9, 3) == 3
    assert ceil_div(0, 5) == 0


@pytest.mark.parametrize("d", [1, 2, 7, 64, 4096])
def test_ceil_div_invariant(d):
    for x in range(0, 5000, 13):
        q = ceil_div(x, d)
        assert q * d >= x
        assert (q - 1) * d < x or q == 0


def test_hi_of_top_bit():
    assert hi(1 << 63) == 63


def test_hi_and_lo_of_zero():
    assert hi(0) == 0
    assert lo(0) == 0


def test_lo_of_power_of_two():
    assert lo(8) == 3


def test_hi_invariant():
    for x in range(1, 3000):
        h = hi(x)
        assert (1 << h) <= x < (1 << (h + 1))


def test_lo_invariant():
    for x in range(1, 3000):
        low = lo(x)
        assert (x >> low) & 1 == 1
        assert x & ((1 << low) - 1) == 0


def test_negative_rejected():
    with pytest.raises(ValueError):
        hi(-1)
    with pytest.raises(ValueError):
        lo(-4)