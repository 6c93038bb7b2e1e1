"""Smoothing filters for spectra and envelopes: moving average, windowed FIR low-pass."""

import numpy as np
from scipy.signal import convolve

from primitives.windows import WindowFunction, window


def simple_moving_average(a, width: int) -> np.ndarray:
    """Centered moving average.

    Sample i is the mean of a[i-d1 : i+d2+1] with d1 = (width-1)//2 and
    d2 = width-1-d1, taken over the samples that exist, so the edges are
    averaged over a shorter window instead of being zero-padded.
    """
    a = np.asarray(a, dtype=np.float64)
    n = len(a)
    if n == 0 or width <= 1:
        return a.copy()
    d1 = (width - 1) // 2
    d2 = width - 1 - d1
    # Direct sums stay exact for quiet samples next to a loud peak
    sums = convolve(a, np.ones(width), mode="full", method="direct")[d2:d2 + n]
    idx = np.arange(n)
    lo = np.maximum(idx - d1, 0)
    hi = np.minimum(idx + d2 + 1, n)
    return sums / (hi - lo)


def fir_kernel(wf: WindowFunction, width: int) -> np.ndarray:
    """Window-shaped low-pass kernel with unit sum."""
    k = window(wf, max(1, int(width)))
    s = k.sum()
    if s == 0:
        return np.ones(1)
    return k / s


def fir_lowpass(a, width: int, wf: WindowFunction | None) -> np.ndarray:
    """Windowed FIR low-pass, centered, renormalized at the array edges.

    wf=None passes the input through unchanged.
    """
    a = np.asarray(a, dtype=np.float64)
    if wf is None or len(a) == 0 or width <= 1:
        return a.copy()
    k = fir_kernel(wf, width)
    out = convolve(a, k, mode="same")
    # Kernel mass that overlaps the array at each position
    norm = convolve(np.ones_like(a), k, mode="same")
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(norm > 0, out / norm, 0.0)
    return out


def apply_fir_kernel_at(a: np.ndarray, p: int, kernel: np.ndarray) -> float:
    """Value of the kernel-filtered signal at position p (kernel centered on p).

    Only the part of the kernel that overlaps the array contributes, and the
    result is renormalized by that part's mass.
    """
    n = len(a)
    m = len(kernel)
    start = p - (m - 1) // 2
    lo = max(0, start)
    hi = min(n, start + m)
    if hi <= lo:
        return 0.0
    k = kernel[lo - start:hi - start]
    s = k.sum()
    if s == 0:
        return 0.0
    return float(np.dot(a[lo:hi], k) / s)
