"""Amplitude, frequency and combined analysis of synthetic recordings.

Run: pytest tests/test_analysis.py
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from specsyn.analysis.amplitude import analyze_amplitude_curve
from specsyn.analysis.analyze import analyze, select_segment
from specsyn.analysis.frequency import analyze_frequency_curve, estimate_f0_reference
from specsyn.state.app_state import AppState

SR = 44100


def make_tone(f0=220.0, seconds=1.0, amp=0.5, n_harmonics=8):
    t = np.arange(int(SR * seconds)) / SR
    x = np.zeros_like(t)
    for h in range(1, n_harmonics + 1):
        x += np.sin(2 * np.pi * f0 * h * t) / h
    return amp * x / np.max(np.abs(x))


# ---- Amplitude ----

def test_amplitude_tracks_sine_level():
    t = np.arange(SR) / SR
    x = 0.5 * np.sin(2 * np.pi * 440 * t)
    knots = analyze_amplitude_curve(x, SR, 0.025)
    assert len(knots) in (39, 40)
    assert np.isclose(knots.x[0], 0.0125)
    expected = 10 * np.log10(0.5 ** 2 / 2)
    assert np.all(np.abs(knots.y[1:-1] - expected) < 0.2)


def test_amplitude_follows_step():
    t = np.arange(SR) / SR
    x = np.sin(2 * np.pi * 440 * t) * np.where(t < 0.5, 0.5, 0.05)
    knots = analyze_amplitude_curve(x, SR, 0.025)
    early = knots.y[knots.x < 0.4]
    late = knots.y[knots.x > 0.6]
    assert np.all(early - late.mean() > 18)


def test_amplitude_silence_dropped():
    knots = analyze_amplitude_curve(np.zeros(SR // 2), SR, 0.025)
    assert len(knots) == 0


# ---- Frequency ----

def test_estimate_f0_reference():
    assert abs(estimate_f0_reference(make_tone(220.0), SR) - 220.0) < 220.0 * 0.03


def test_frequency_curve():
    knots = analyze_frequency_curve(make_tone(220.0), SR, 220.0, 0.025)
    assert len(knots) > 20
    assert np.all(np.diff(knots.x) > 0)
    assert abs(np.median(knots.y) - 220.0) < 220.0 * 0.02
    # Knot times are multiples of the hop
    hop = 1103                              # 0.025 * SR = 1102.5 rounds half up
    assert np.allclose(knots.x * SR / hop, np.round(knots.x * SR / hop))


def test_frequency_needs_reference():
    with pytest.raises(ValueError):
        analyze_frequency_curve(make_tone(), SR, 0.0, 0.025)


# ---- Combined ----

def test_analyze_all():
    x = make_tone(200.0)
    result = analyze(x, SR, {"f0Reference": 200})
    assert result.f0_reference == 200
    assert len(result.spectrum_curve) > 50
    assert len(result.amplitude_curve) > 30
    assert len(result.frequency_curve) > 20
    assert np.isfinite(result.orig_spectrum_function(np.array([1000.0]))[0])

    state = result.apply_to(AppState())
    assert state.spectrum_curve == result.spectrum_curve
    assert state.frequency_curve == result.frequency_curve


def test_analyze_amplitude_only():
    result = analyze(make_tone(), SR, {"analSpecEnabled": False, "analFreqEnabled": "false"})
    assert result.spectrum_curve is None
    assert result.frequency_curve is None
    assert result.amplitude_curve is not None
    state = result.apply_to(AppState())
    assert state.spectrum_curve == AppState().spectrum_curve


def test_select_segment():
    x = np.arange(SR, dtype=np.float64)
    seg = select_segment(x, SR, 0.5, 2.0)
    assert len(seg) == SR // 2
    assert seg[0] == SR // 2
    assert len(select_segment(x, SR)) == SR
