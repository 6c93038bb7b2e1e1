"""Amplitude curve analysis: signal energy low-passed and sampled once per step."""

from __future__ import annotations

import numpy as np

from primitives.dsp import power_to_db, round_half_up
from primitives.filters import apply_fir_kernel_at, fir_kernel
from primitives.windows import WindowFunction
from specsyn.state.curves import Curve

# A Blackman kernel of width n has its first spectral minimum at 3/n cycles
# per sample. With n = step_width * sample_rate that minimum lands at
# 3/step_width Hz, which keeps ripple from f0*2 low at short steps.
KERNEL_WINDOW = WindowFunction.BLACKMAN


def analyze_amplitude_curve(signal, sample_rate: float, step_width: float) -> Curve:
    """Knots (t, dB) at t = step/2, 3*step/2, ... up to duration - step/2."""
    if step_width <= 0:
        raise ValueError(f"Amplitude step width must be positive, got {step_width}.")
    signal = np.asarray(signal, dtype=np.float64)
    energy = signal * signal
    duration = len(energy) / sample_rate
    kernel = fir_kernel(KERNEL_WINDOW, max(1, round_half_up(step_width * sample_rate)))
    xs = []
    ys = []
    k = 0
    while True:
        t = step_width / 2 + k * step_width
        if t > duration - step_width / 2:
            break
        k += 1
        v = apply_fir_kernel_at(energy, round_half_up(t * sample_rate), kernel)
        y = float(power_to_db(v))
        if np.isfinite(y):
            xs.append(t)
            ys.append(y)
    return Curve.from_arrays(xs, ys)
