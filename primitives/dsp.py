"""Numba-based DSP kernels and level conversions used by the synthesizer and analyses."""

import math

import numpy as np
from numba import njit

TWO_PI = 2.0 * np.pi


def round_half_up(x):
    """Round halves toward +inf (1.5 -> 2, 2.5 -> 3, -1.5 -> -1).

    Scalars give an int, arrays an int64 array.
    """
    if np.ndim(x) == 0:
        return int(math.floor(x + 0.5))
    return np.floor(np.asarray(x, dtype=np.float64) + 0.5).astype(np.int64)


@njit(cache=True)
def accumulate_phase(f0, voiced, sample_rate):
    """Running fundamental phase for each sample, wrapped to [0, 2pi).

    out[p] is the phase used at sample p. The phase advances by
    2pi * f0 / sample_rate after each voiced sample and holds still on
    unvoiced samples.
    """
    n = len(f0)
    out = np.zeros(n)
    w = 0.0
    for p in range(n):
        out[p] = w
        if not voiced[p]:
            continue
        w += TWO_PI * f0[p] / sample_rate
        while w >= TWO_PI:
            w -= TWO_PI
    return out


def db_to_amplitude_or_0(db, min_db=-200.0):
    """dB -> linear amplitude. Non-finite values and values below min_db give 0."""
    db = np.asarray(db, dtype=np.float64)
    ok = np.isfinite(db) & (db >= min_db)
    return np.where(ok, 10.0 ** (np.where(ok, db, 0.0) / 20.0), 0.0)


def db_to_power_or_0(db, min_db=-200.0):
    """dB -> power. Non-finite values and values below min_db give 0."""
    db = np.asarray(db, dtype=np.float64)
    ok = np.isfinite(db) & (db >= min_db)
    return np.where(ok, 10.0 ** (np.where(ok, db, 0.0) / 10.0), 0.0)


def power_to_db(p):
    """Power -> dB. Zero power gives -inf."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return 10.0 * np.log10(np.asarray(p, dtype=np.float64))


def amplitude_to_db(a):
    with np.errstate(divide="ignore", invalid="ignore"):
        return 20.0 * np.log10(np.abs(np.asarray(a, dtype=np.float64)))
