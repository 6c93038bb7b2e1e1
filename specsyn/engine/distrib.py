"""Spectral energy distribution of a harmonic sound.

Given only the amplitude and f0 curves, estimates which frequency regions the
harmonics pass through and with how much power, so the spectrum curve can be
shown against the regions that matter for the synthesis. Element i of the
result covers [i*d, (i+1)*d) with d = distrib_max_freq / distrib_res and is
in dB relative to the strongest slot (max is 0).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from primitives.dsp import db_to_power_or_0, power_to_db
from specsyn.engine.params import (
    DISTRIB_MAX_FREQ,
    DISTRIB_RES,
    DISTRIB_STEP,
    MIN_DB,
    MIN_F0,
)
from specsyn.state.curves import CurveFunction, evaluate

# Guards the slot index against f0*h landing a rounding error below a slot edge
_SLOT_EPS = 1e-6


@dataclass(frozen=True)
class DistribParms:
    amplitude_function: CurveFunction     # s -> dB
    frequency_function: CurveFunction     # s -> Hz
    even_ampl_shift: float                # dB added for even numbered harmonics
    duration: float                       # s
    distrib_max_freq: float = DISTRIB_MAX_FREQ
    distrib_res: int = DISTRIB_RES
    step_width: float = DISTRIB_STEP      # s


def compute_distrib(dp: DistribParms) -> np.ndarray:
    res = int(dp.distrib_res)
    if res <= 0:
        return np.zeros(0)
    dist = np.zeros(res)
    steps = int(np.floor(dp.duration / dp.step_width)) if dp.duration > 0 else 0
    if steps > 0:
        t = np.arange(steps) * dp.step_width
        a0_db = evaluate(dp.amplitude_function, t)
        f0 = evaluate(dp.frequency_function, t)
        with np.errstate(invalid="ignore"):
            voiced = np.isfinite(f0) & (f0 > MIN_F0)
        a0_db = a0_db[voiced]
        f0 = f0[voiced]
        power_odd = db_to_power_or_0(a0_db, MIN_DB)
        power_even = db_to_power_or_0(a0_db + dp.even_ampl_shift, MIN_DB)
        d = dp.distrib_max_freq / res
        harmonics = np.floor(dp.distrib_max_freq / f0).astype(np.int64)
        h_max = int(harmonics.max()) if len(harmonics) else 0
        for h in range(1, h_max + 1):
            active = harmonics >= h
            idx = np.floor((f0[active] * h + _SLOT_EPS) / d).astype(np.int64)
            power = (power_even if h % 2 == 0 else power_odd)[active]
            ok = (idx > 0) & (idx < res)
            np.add.at(dist, idx[ok], power[ok])
    dist_db = power_to_db(dist)
    # All slots empty gives -inf everywhere and the shift yields NaN
    with np.errstate(invalid="ignore"):
        return dist_db - np.max(dist_db)
