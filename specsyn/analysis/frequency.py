"""Fundamental frequency curve analysis with librosa's pYIN tracker."""

from __future__ import annotations

import logging

import librosa
import numpy as np

from primitives.dsp import round_half_up
from specsyn.state.curves import Curve

log = logging.getLogger(__name__)

# Search range used when no reference f0 is given
ESTIMATE_FMIN = 50.0
ESTIMATE_FMAX = 2000.0


def _frame_length(sample_rate: float, fmin: float) -> int:
    """Power of two covering three periods of fmin, at least 2048."""
    n = 2048
    while n < 3 * sample_rate / fmin:
        n *= 2
    return n


def estimate_f0_reference(signal, sample_rate: float) -> float:
    """Median YIN f0 over the whole signal, NaN when nothing periodic is found."""
    y = np.asarray(signal, dtype=np.float64)
    f0 = librosa.yin(y, fmin=ESTIMATE_FMIN, fmax=min(ESTIMATE_FMAX, sample_rate / 2),
                     sr=sample_rate,
                     frame_length=_frame_length(sample_rate, ESTIMATE_FMIN))
    f0 = f0[np.isfinite(f0)]
    if len(f0) == 0:
        return float('nan')
    est = float(np.median(f0))
    log.info("estimated f0 reference %.1f Hz", est)
    return est


def analyze_frequency_curve(signal, sample_rate: float, f0_reference: float,
                            step_width: float) -> Curve:
    """f0 knots (t, Hz) one per step, tracked between f0_reference/2 and f0_reference*2.

    Unvoiced frames are dropped, so the curve has gaps where the recording
    has no pitch.
    """
    if not f0_reference > 0:
        raise ValueError(f"f0 reference must be positive, got {f0_reference}.")
    y = np.asarray(signal, dtype=np.float64)
    hop = max(1, round_half_up(step_width * sample_rate))
    fmin = f0_reference / 2
    fmax = min(f0_reference * 2, sample_rate / 2)
    f0, voiced, _ = librosa.pyin(y, fmin=fmin, fmax=fmax, sr=sample_rate,
                                 frame_length=_frame_length(sample_rate, fmin),
                                 hop_length=hop)
    t = np.arange(len(f0)) * hop / sample_rate
    ok = voiced & np.isfinite(f0)
    log.info("frequency analysis: %d frames, %d voiced", len(f0), int(ok.sum()))
    return Curve.from_arrays(t[ok], f0[ok])
