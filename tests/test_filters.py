"""Window functions, moving average and windowed FIR low-pass.

Run: pytest tests/test_filters.py
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from primitives.filters import apply_fir_kernel_at, fir_kernel, fir_lowpass, simple_moving_average
from primitives.windows import WindowFunction, apply_window, window
from specsyn.errors import UnknownStrategy


# ---- Windows ----

def test_parse_window_ids():
    assert WindowFunction.parse("hann") == WindowFunction.HANN
    assert WindowFunction.parse("blackmanHarris") == WindowFunction.BLACKMAN_HARRIS
    assert WindowFunction.parse("none", allow_none=True) is None
    with pytest.raises(UnknownStrategy):
        WindowFunction.parse("none")
    with pytest.raises(UnknownStrategy):
        WindowFunction.parse("kaiser")


def test_all_windows_symmetric():
    for wf in WindowFunction:
        w = window(wf, 31)
        assert len(w) == 31
        assert np.allclose(w, w[::-1]), f"{wf} not symmetric"
        assert np.isclose(w[15], np.max(w)), f"{wf} peak not centered"


def test_parabolic_window():
    assert np.allclose(window(WindowFunction.PARABOLIC, 5), [0, 0.75, 1, 0.75, 0])


def test_apply_window():
    x = np.ones(8)
    assert np.allclose(apply_window(x, WindowFunction.RECT), x)
    assert apply_window(x, WindowFunction.HANN)[0] == 0.0


# ---- Moving average ----

def test_sma_edges():
    a = np.array([1.0, 2.0, 3.0, 4.0])
    assert np.allclose(simple_moving_average(a, 3), [1.5, 2, 3, 3.5])
    assert np.allclose(simple_moving_average(a, 4), [2, 2.5, 3, 3.5])


def test_sma_constant():
    assert np.allclose(simple_moving_average(np.full(100, 7.0), 11), 7.0)


def test_sma_quiet_tail_after_peak():
    a = np.concatenate((np.full(100, 1e8), np.full(1000, 1e-12)))
    out = simple_moving_average(a, 50)
    assert np.all(out > 0)
    assert np.allclose(out[-500:], 1e-12, rtol=1e-9, atol=0)


def test_sma_width_one_is_copy():
    a = np.arange(5.0)
    out = simple_moving_average(a, 1)
    assert np.array_equal(out, a) and out is not a


# ---- FIR low-pass ----

def test_fir_kernel_unit_sum():
    for wf in (WindowFunction.HANN, WindowFunction.BLACKMAN, WindowFunction.FLAT_TOP):
        assert np.isclose(fir_kernel(wf, 51).sum(), 1.0)


def test_fir_constant_preserved():
    for wf in (WindowFunction.HANN, WindowFunction.PARABOLIC, WindowFunction.RECT):
        assert np.allclose(fir_lowpass(np.full(60, 3.0), 15, wf), 3.0)


def test_fir_pass_through():
    a = np.random.default_rng(0).standard_normal(50)
    assert np.array_equal(fir_lowpass(a, 15, None), a)


def test_fir_smooths():
    rng = np.random.default_rng(1)
    a = rng.standard_normal(2000)
    out = fir_lowpass(a, 41, WindowFunction.HANN)
    assert np.std(out) < 0.5 * np.std(a)


def test_apply_kernel_at_matches_full_filter():
    a = np.random.default_rng(2).standard_normal(300)
    k = fir_kernel(WindowFunction.BLACKMAN, 21)
    full = fir_lowpass(a, 21, WindowFunction.BLACKMAN)
    for p in (0, 5, 150, 299):
        assert np.isclose(apply_fir_kernel_at(a, p, k), full[p])
