"""Harmonic synthesizer: PCM buffer from spectrum, amplitude and f0 curves.

Per sample p (t = p / sample_rate):
    1. a0 = amplitude(t) in dB -> linear (0 when non-finite or below -200 dB)
    2. f0 = frequency(t); non-finite or <= 25 Hz is silence and the phase holds
    3. H = floor((sample_rate/2 - 1000) / f0) harmonics
    4. each harmonic h takes its level from the odd or even envelope at f0*h
    5. value = a0 * sum(a_h * sin(h*phase)) / sum(a_h)

Dividing by the summed harmonic amplitudes keeps the overall level tied to
the amplitude curve regardless of how many harmonics are active.

The curve functions are evaluated vectorized over blocks of samples. Only the
phase recurrence is sequential and runs in a numba kernel.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from primitives.dsp import accumulate_phase, db_to_amplitude_or_0, round_half_up
from specsyn.engine.params import (
    AGC_CLIP_LEVEL,
    AVERAGE_F0_DB_RANGE,
    AVERAGE_F0_STEP,
    MIN_DB,
    MIN_F0,
    NYQUIST_GUARD_HZ,
    RENDER_BLOCK_SIZE,
)
from specsyn.state.curves import CurveFunction, evaluate

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesizerParms:
    spectrum_function_odd: CurveFunction      # Hz -> dB, odd numbered harmonics
    spectrum_function_even: CurveFunction     # Hz -> dB, even numbered harmonics
    amplitude_function: CurveFunction         # s -> dB
    frequency_function: CurveFunction         # s -> Hz
    duration: float                           # s
    sample_rate: float
    agc_rms_level: float = 0.0                # 0 disables AGC


def sample_count(duration: float, sample_rate: float) -> int:
    n = duration * sample_rate
    return max(0, round_half_up(n)) if np.isfinite(n) else 0


def harmonic_count(f0, sample_rate: float):
    """Number of harmonics that stay NYQUIST_GUARD_HZ below Nyquist."""
    f0 = np.asarray(f0, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        h = np.floor((sample_rate / 2 - NYQUIST_GUARD_HZ) / f0)
    h = np.where(np.isfinite(h) & (h > 0), h, 0).astype(np.int64)
    return int(h) if h.ndim == 0 else h


def _render_block(parms: SynthesizerParms, t: np.ndarray, f0: np.ndarray,
                  voiced: np.ndarray, phase: np.ndarray) -> np.ndarray:
    out = np.zeros(len(t))
    if not voiced.any():
        return out
    a0 = db_to_amplitude_or_0(evaluate(parms.amplitude_function, t[voiced]), MIN_DB)
    f0v = f0[voiced]
    hc = harmonic_count(f0v, parms.sample_rate)
    h_max = int(hc.max()) if len(hc) else 0
    if h_max == 0:
        return out

    h = np.arange(1, h_max + 1, dtype=np.float64)
    freqs = f0v[:, None] * h[None, :]                    # (samples, harmonics)
    levels = np.full(freqs.shape, -np.inf)
    levels[:, 0::2] = evaluate(parms.spectrum_function_odd, freqs[:, 0::2])
    levels[:, 1::2] = evaluate(parms.spectrum_function_even, freqs[:, 1::2])
    amps = db_to_amplitude_or_0(levels, MIN_DB)
    amps[h[None, :] > hc[:, None]] = 0.0

    analytic = amps.sum(axis=1)
    signal = (amps * np.sin(phase[voiced][:, None] * h[None, :])).sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        value = np.where(analytic > 0, a0 * signal / analytic, 0.0)
    out[voiced] = value
    return out


def synthesize(parms: SynthesizerParms) -> np.ndarray:
    """Render the PCM buffer. Never raises for NaN, Inf or negative curve values."""
    t0 = time.perf_counter()
    sr = parms.sample_rate
    n = sample_count(parms.duration, sr)
    signal = np.zeros(n)
    if n == 0:
        return signal

    t = np.arange(n) / sr
    f0 = np.empty(n)
    for start in range(0, n, RENDER_BLOCK_SIZE):
        end = min(start + RENDER_BLOCK_SIZE, n)
        f0[start:end] = evaluate(parms.frequency_function, t[start:end])
    with np.errstate(invalid="ignore"):
        voiced = np.isfinite(f0) & (f0 > MIN_F0)
    phase = accumulate_phase(np.where(voiced, f0, 0.0), voiced, float(sr))

    for start in range(0, n, RENDER_BLOCK_SIZE):
        end = min(start + RENDER_BLOCK_SIZE, n)
        signal[start:end] = _render_block(parms, t[start:end], f0[start:end],
                                          voiced[start:end], phase[start:end])

    if parms.agc_rms_level > 0:
        signal = adjust_gain(signal, parms.agc_rms_level)

    elapsed = time.perf_counter() - t0
    rtf = parms.duration / elapsed if elapsed > 0 else float('inf')
    log.info("render %.1fs audio in %.3fs (%d Hz, %.0fx RT)",
             parms.duration, elapsed, sr, rtf)
    return signal


def adjust_gain(buf: np.ndarray, target_rms: float) -> np.ndarray:
    """Scale to the target RMS without reaching full scale. Returns a new array."""
    buf = np.asarray(buf, dtype=np.float64)
    if len(buf) == 0:
        return buf.copy()
    rms = float(np.sqrt(np.mean(buf * buf)))
    if rms == 0 or not np.isfinite(rms):
        return buf.copy()
    r = target_rms / rms
    max_abs = float(np.max(np.abs(buf)))
    if r * max_abs >= 1:
        r = AGC_CLIP_LEVEL / max_abs
    return buf * r


def compute_average_f0(parms: SynthesizerParms) -> float:
    """Amplitude-weighted average f0, sampled every 5 ms.

    Only points with an amplitude within AVERAGE_F0_DB_RANGE and a voiced f0
    count. Each is weighted by its level above the lower range bound.
    Returns NaN when no point qualifies.
    """
    lo, hi = AVERAGE_F0_DB_RANGE
    steps = int(np.floor(parms.duration / AVERAGE_F0_STEP)) if parms.duration > 0 else 0
    if steps <= 0:
        return float('nan')
    t = np.arange(steps) * AVERAGE_F0_STEP
    a_db = evaluate(parms.amplitude_function, t)
    f0 = evaluate(parms.frequency_function, t)
    with np.errstate(invalid="ignore"):
        ok = (np.isfinite(a_db) & (a_db >= lo) & (a_db <= hi)
              & np.isfinite(f0) & (f0 > MIN_F0))
    if not ok.any():
        return float('nan')
    w = a_db[ok] - lo
    w_sum = w.sum()
    if w_sum <= 0:
        return float('nan')
    return float((f0[ok] * w).sum() / w_sum)
