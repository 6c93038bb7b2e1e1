"""Runs the enabled analyses on a recording and collects the curve updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from primitives.dsp import round_half_up
from specsyn.analysis.amplitude import analyze_amplitude_curve
from specsyn.analysis.frequency import analyze_frequency_curve, estimate_f0_reference
from specsyn.analysis.spectrum import SpectrumAnalysisParms, analyze_spectrum
from specsyn.engine.params import ANALYSIS_SCHEMA, default_analysis_params
from specsyn.state.app_state import AppState
from specsyn.state.curves import Curve, CurveFunction

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    f0_reference: float
    spectrum_curve: Curve | None = None
    amplitude_curve: Curve | None = None
    frequency_curve: Curve | None = None
    orig_spectrum_function: CurveFunction | None = None

    def apply_to(self, state: AppState) -> AppState:
        """New state with the analyzed curves in place of the old ones."""
        changes = {}
        if self.spectrum_curve is not None:
            changes["spectrum_curve"] = self.spectrum_curve
        if self.amplitude_curve is not None:
            changes["amplitude_curve"] = self.amplitude_curve
        if self.frequency_curve is not None:
            changes["frequency_curve"] = self.frequency_curve
        return state.replace(**changes)


def select_segment(signal, sample_rate: float, start: float | None = None,
                   end: float | None = None) -> np.ndarray:
    """Samples between start and end [s], clamped to the signal."""
    signal = np.asarray(signal, dtype=np.float64)
    n = len(signal)
    i1 = 0 if start is None else max(0, min(n, round_half_up(start * sample_rate)))
    i2 = n if end is None else max(0, min(n, round_half_up(end * sample_rate)))
    return signal[i1:i2]


def analyze(signal, sample_rate: float, params: dict | None = None) -> AnalysisResult:
    """Analyze a mono recording.

    params is an analysis params dict (see ANALYSIS_SCHEMA); missing entries
    take their defaults. An f0_reference of 0 is estimated from the signal.
    """
    p = default_analysis_params()
    if params:
        p.update(ANALYSIS_SCHEMA.validate_and_clamp(params))
    signal = np.asarray(signal, dtype=np.float64)

    f0_ref = p["f0_reference"]
    needs_f0 = p["spec_enabled"] or p["freq_enabled"]
    if needs_f0 and not f0_ref > 0:
        f0_ref = estimate_f0_reference(signal, sample_rate)
        if not np.isfinite(f0_ref):
            raise ValueError("No f0 reference given and none could be estimated "
                             "from the signal.")

    # Parse strategy ids before doing any work
    spec_parms = SpectrumAnalysisParms.from_params(p, f0_ref) if p["spec_enabled"] else None

    spectrum_curve = amplitude_curve = frequency_curve = None
    orig_fn = None
    if spec_parms is not None:
        spec = analyze_spectrum(signal, sample_rate, spec_parms)
        spectrum_curve = spec.knots
        orig_fn = spec.spectrum_function
    if p["ampl_enabled"]:
        amplitude_curve = analyze_amplitude_curve(signal, sample_rate, p["ampl_step_width"])
    if p["freq_enabled"]:
        frequency_curve = analyze_frequency_curve(signal, sample_rate, f0_ref,
                                                  p["freq_step_width"])
    log.info("analyzed %.2fs at %d Hz (f0 reference %.1f Hz)",
             len(signal) / sample_rate, sample_rate, f0_ref)
    return AnalysisResult(f0_ref, spectrum_curve, amplitude_curve,
                          frequency_curve, orig_fn)
