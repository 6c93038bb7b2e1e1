"""Spectral envelope analysis.

The windowed FFT magnitude spectrum of a recording is smoothed into a dB
envelope with one of two methods, then sampled at a fixed frequency step to
give the knots of the spectrum curve:

  smaPwrLog2   moving average on power values, then two moving averages on
               dB values with successively halved widths
  firLpPwrLog  windowed FIR low-pass on power values, then a second one on
               dB values clipped to -100 dB

Filter widths are given relative to the reference f0, so the smoothing spans
about one harmonic spacing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from primitives.dsp import amplitude_to_db, power_to_db, round_half_up
from primitives.filters import fir_lowpass, simple_moving_average
from primitives.windows import WindowFunction, apply_window
from specsyn.errors import InsufficientSmoothingWidth, UnknownStrategy
from specsyn.state.curves import Curve, CurveFunction, array_function

log = logging.getLogger(__name__)

MIN_SMA_WIDTH = 8
LOG_FLOOR_DB = -100.0


class SmoothingMethod(Enum):
    SMA_PWR_LOG2 = "smaPwrLog2"
    FIR_LP_PWR_LOG = "firLpPwrLog"

    @classmethod
    def parse(cls, id: str) -> SmoothingMethod:
        try:
            return cls(id)
        except ValueError:
            raise UnknownStrategy(f"Unknown spectrum smoothing method '{id}'.") from None


@dataclass(frozen=True)
class SpectrumAnalysisParms:
    f0_reference: float
    method: SmoothingMethod = SmoothingMethod.SMA_PWR_LOG2
    width1: float = 1.0                           # relative to f0_reference
    func1: WindowFunction | None = WindowFunction.PARABOLIC
    width2: float = 1.5                           # relative to f0_reference
    func2: WindowFunction | None = WindowFunction.PARABOLIC
    max_freq: float = 5500.0                      # Hz
    step_width: float = 50.0                      # Hz
    window_func: WindowFunction = WindowFunction.HANN

    @classmethod
    def from_params(cls, params: dict, f0_reference: float) -> SpectrumAnalysisParms:
        """Build from an analysis params dict keyed by attribute name.

        Strategy and window ids are parsed here, so unknown ids raise
        UnknownStrategy before any signal is processed.
        """
        return cls(
            f0_reference=f0_reference,
            method=SmoothingMethod.parse(params["spec_method"]),
            width1=params["spec_width1"],
            func1=WindowFunction.parse(params["spec_func1"], allow_none=True),
            width2=params["spec_width2"],
            func2=WindowFunction.parse(params["spec_func2"], allow_none=True),
            max_freq=params["spec_max_freq"],
            step_width=params["spec_step_width"],
            window_func=WindowFunction.parse(params["spec_window_func"]),
        )


@dataclass(frozen=True)
class SpectrumAnalysisResult:
    knots: Curve
    spectrum: np.ndarray            # smoothed dB spectrum
    scaling_factor: float           # bins per Hz

    @property
    def spectrum_function(self) -> CurveFunction:
        """Smoothed spectrum as a function Hz -> dB (NaN outside the spectrum)."""
        return spectrum_function(self.spectrum, self.scaling_factor)


# ── Smoothing ─────────────────────────────────────────────────────────

def smooth_spectrum_sma_pwr_log2(spectrum: np.ndarray, width: int) -> np.ndarray:
    if width < MIN_SMA_WIDTH:
        raise InsufficientSmoothingWidth(
            f"Spectrum smoothing width {width} is below {MIN_SMA_WIDTH} bins. "
            f"Use a longer signal or a larger width.")
    power = simple_moving_average(spectrum * spectrum, width)
    log1 = power_to_db(power)
    width2 = round_half_up(width / 2)
    log2 = simple_moving_average(log1, width2)
    width3 = round_half_up(width2 / 2)
    return simple_moving_average(log2, width3)


def smooth_spectrum_fir_lp_pwr_log(spectrum: np.ndarray, width1: int,
                                   func1: WindowFunction | None, width2: int,
                                   func2: WindowFunction | None) -> np.ndarray:
    a = fir_lowpass(spectrum * spectrum, width1, func1)
    # Windows with negative lobes (flat top) can push power below 0
    a = np.maximum(a, 0.0)
    a = np.maximum(power_to_db(a), LOG_FLOOR_DB)
    return fir_lowpass(a, width2, func2)


def create_smoothed_spectrum(spectrum: np.ndarray, scaling_factor: float,
                             parms: SpectrumAnalysisParms) -> np.ndarray:
    width1 = round_half_up(parms.width1 * parms.f0_reference * scaling_factor)
    width2 = round_half_up(parms.width2 * parms.f0_reference * scaling_factor)
    log.debug("smoothing %s width1=%d width2=%d", parms.method.value, width1, width2)
    if parms.method == SmoothingMethod.SMA_PWR_LOG2:
        return smooth_spectrum_sma_pwr_log2(spectrum, width1)
    if parms.method == SmoothingMethod.FIR_LP_PWR_LOG:
        return smooth_spectrum_fir_lp_pwr_log(spectrum, width1, parms.func1,
                                              width2, parms.func2)
    raise UnknownStrategy(f"Unknown spectrum smoothing method '{parms.method}'.")


# ── Knots ─────────────────────────────────────────────────────────────

def get_avg_spectrum_points(spectrum: np.ndarray, scaling_factor: float,
                            step_width: float, max_freq: float) -> Curve:
    n = len(spectrum)
    steps = int(np.ceil(max_freq / step_width)) if step_width > 0 else 0
    f = np.arange(1, steps + 1) * step_width
    f = f[f < max_freq]
    i = round_half_up(f * scaling_factor)
    ok = (i > 0) & (i < n)
    f, i = f[ok], i[ok]
    y = spectrum[i]
    finite = np.isfinite(y)
    return Curve.from_arrays(f[finite], y[finite])


def spectrum_function(spectrum: np.ndarray, scaling_factor: float) -> CurveFunction:
    n = len(spectrum)

    @array_function
    def fn(f):
        i = np.floor(np.asarray(f, dtype=np.float64) * scaling_factor + 0.5)
        ok = np.isfinite(i) & (i >= 0) & (i < n)
        idx = np.where(ok, i, 0).astype(np.int64)
        return np.where(ok, spectrum[idx] if n else np.nan, np.nan)

    return fn


# ── Entry points ──────────────────────────────────────────────────────

def _magnitude_spectrum(signal, sample_rate: float,
                        wf: WindowFunction | None) -> tuple[np.ndarray, float]:
    signal = np.asarray(signal, dtype=np.float64)
    signal = signal[:len(signal) // 2 * 2]
    windowed = signal if wf is None else apply_window(signal, wf)
    spectrum = np.abs(np.fft.rfft(windowed))
    return spectrum, len(windowed) / sample_rate


def analyze_spectrum(signal, sample_rate: float,
                     parms: SpectrumAnalysisParms) -> SpectrumAnalysisResult:
    spectrum, scaling_factor = _magnitude_spectrum(signal, sample_rate, parms.window_func)
    smoothed = create_smoothed_spectrum(spectrum, scaling_factor, parms)
    knots = get_avg_spectrum_points(smoothed, scaling_factor,
                                    parms.step_width, parms.max_freq)
    log.info("spectrum analysis: %d bins, %d knots", len(spectrum), len(knots))
    return SpectrumAnalysisResult(knots, smoothed, scaling_factor)


def output_spectrum(signal, sample_rate: float,
                    wf: WindowFunction = WindowFunction.RECT) -> tuple[np.ndarray, float]:
    """dB magnitude spectrum of a synthesized buffer and its bins-per-Hz factor."""
    spectrum, scaling_factor = _magnitude_spectrum(
        signal, sample_rate, None if wf == WindowFunction.RECT else wf)
    return amplitude_to_db(spectrum), scaling_factor
