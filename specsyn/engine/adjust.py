"""Scalar controls applied on top of the edited curves.

The f0 multiplier scales the frequency curve, the spectrum multiplier and
shift stretch and move the spectral envelope along the frequency axis, and the
even amplitude shift lifts or lowers the even numbered harmonics. At their
default values the curve functions are returned unchanged.
"""

from __future__ import annotations

from specsyn.engine.distrib import DistribParms
from specsyn.engine.params import DEFAULT_DURATION, DISTRIB_MAX_FREQ, DISTRIB_RES, DISTRIB_STEP
from specsyn.engine.synth import SynthesizerParms
from specsyn.state.app_state import AppState
from specsyn.state.curves import (
    Curve,
    CurveFunction,
    array_function,
    curve_function,
    evaluate,
)


def adjusted_frequency_function(fn: CurveFunction, f0_multiplier: float) -> CurveFunction:
    if f0_multiplier == 1:
        return fn
    return array_function(lambda t: evaluate(fn, t) * f0_multiplier)


def adjusted_spectrum_function(fn: CurveFunction, spec_multiplier: float,
                               spec_shift: float) -> CurveFunction:
    if spec_multiplier == 1 and spec_shift == 0:
        return fn
    return array_function(lambda f: evaluate(fn, f / spec_multiplier - spec_shift))


def even_spectrum_function(fn: CurveFunction, even_ampl_shift: float) -> CurveFunction:
    if even_ampl_shift == 0:
        return fn
    return array_function(lambda f: evaluate(fn, f) + even_ampl_shift)


def synthesis_duration(amplitude_curve: Curve, frequency_curve: Curve) -> float:
    """Sound duration: the shorter of the two time curves."""
    a = amplitude_curve.last_x
    f = frequency_curve.last_x
    return min(DEFAULT_DURATION if a is None else a,
               DEFAULT_DURATION if f is None else f)


def build_synthesizer_parms(state: AppState) -> SynthesizerParms:
    spectrum_fn = adjusted_spectrum_function(
        curve_function(state.spectrum_curve), state.spec_multiplier, state.spec_shift)
    return SynthesizerParms(
        spectrum_function_odd=spectrum_fn,
        spectrum_function_even=even_spectrum_function(spectrum_fn, state.even_ampl_shift),
        amplitude_function=curve_function(state.amplitude_curve),
        frequency_function=adjusted_frequency_function(
            curve_function(state.frequency_curve), state.f0_multiplier),
        duration=synthesis_duration(state.amplitude_curve, state.frequency_curve),
        sample_rate=state.sample_rate,
        agc_rms_level=state.agc_rms_level,
    )


def build_distrib_parms(state: AppState, distrib_max_freq: float = DISTRIB_MAX_FREQ,
                        distrib_res: int = DISTRIB_RES,
                        step_width: float = DISTRIB_STEP) -> DistribParms:
    return DistribParms(
        amplitude_function=curve_function(state.amplitude_curve),
        frequency_function=adjusted_frequency_function(
            curve_function(state.frequency_curve), state.f0_multiplier),
        even_ampl_shift=state.even_ampl_shift,
        duration=synthesis_duration(state.amplitude_curve, state.frequency_curve),
        distrib_max_freq=distrib_max_freq,
        distrib_res=distrib_res,
        step_width=step_width,
    )
