"""Spectral energy distribution.

Run: pytest tests/test_distrib.py
"""

import os
import sys

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from specsyn.engine.adjust import build_distrib_parms
from specsyn.engine.distrib import DistribParms, compute_distrib
from specsyn.state.app_state import AppState
from specsyn.state.curves import array_function


def const(v):
    return array_function(lambda x: np.full(np.shape(x), v, dtype=np.float64))


def test_max_is_zero():
    dp = DistribParms(const(-10.0), const(220.0), 0.0, 1.0)
    dist = compute_distrib(dp)
    assert len(dist) == 500
    assert np.isclose(np.max(dist), 0.0)


def test_harmonic_slots():
    # d = 11 Hz per slot, f0 = 1100 Hz -> harmonics land in slots 100, 200, 300, 400
    dp = DistribParms(const(0.0), const(1100.0), 0.0, 0.1,
                      distrib_max_freq=5500.0, distrib_res=500, step_width=0.01)
    dist = compute_distrib(dp)
    finite = np.flatnonzero(np.isfinite(dist))
    assert list(finite) == [100, 200, 300, 400]
    assert np.allclose(dist[finite], 0.0)


def test_even_shift():
    dp = DistribParms(const(0.0), const(1100.0), -10.0, 0.1, step_width=0.01)
    dist = compute_distrib(dp)
    assert np.isclose(dist[100], 0.0)
    assert np.isclose(dist[200], -10.0)
    assert np.isclose(dist[300], 0.0)
    assert np.isclose(dist[400], -10.0)


def test_unvoiced_steps_skipped():
    f0 = array_function(lambda t: np.where(np.asarray(t) < 0.5, 10.0, 1100.0))
    dp = DistribParms(const(0.0), f0, 0.0, 1.0, step_width=0.01)
    dist = compute_distrib(dp)
    assert list(np.flatnonzero(np.isfinite(dist))) == [100, 200, 300, 400]


def test_from_default_state():
    dist = compute_distrib(build_distrib_parms(AppState()))
    assert np.isclose(np.nanmax(dist), 0.0)
    # Slot 0 is never filled
    assert dist[0] == -np.inf


def test_zero_resolution():
    dp = DistribParms(const(0.0), const(1100.0), 0.0, 0.1, distrib_res=0, step_width=0.01)
    assert len(compute_distrib(dp)) == 0


def test_scalar_curve_functions():
    # Plain float -> float functions, called once per step
    dp = DistribParms(lambda t: 0.0, lambda t: 1100.0 if t < 0.05 else 10.0, 0.0, 0.1,
                      step_width=0.01)
    dist = compute_distrib(dp)
    assert list(np.flatnonzero(np.isfinite(dist))) == [100, 200, 300, 400]
