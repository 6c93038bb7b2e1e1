"""URL state: default omission, round trips, fallback to defaults.

Run: pytest tests/test_app_state.py
"""

import logging
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from specsyn.errors import ParameterDecodeError, StructuralDecodeError
from specsyn.state.app_state import (
    DEFAULT_AMPLITUDE_CURVE,
    AppState,
    decode_app_state,
    decode_app_state_url_parms,
    decode_app_state_url_parms_or_default,
    encode_app_state,
    encode_app_state_url_parms,
    format_number,
)
from specsyn.state.codec import CurveDataType, base64url_encode, deflate, encode_curve_data
from specsyn.state.curves import Curve


def test_defaults_encode_to_empty():
    assert encode_app_state(AppState()) == {}
    assert encode_app_state_url_parms(AppState()) == ""


def test_empty_decodes_to_defaults():
    assert decode_app_state_url_parms("") == AppState()
    assert decode_app_state_url_parms("#") == AppState()
    assert decode_app_state({}) == AppState()


def test_default_curves():
    state = AppState()
    assert state.spectrum_curve.to_pairs()[0] == (70.0, -62.0)
    assert state.amplitude_curve.last_x == 3.0
    assert state.frequency_curve.to_pairs() == [(0.0, 200.0), (1.5, 600.0), (3.0, 200.0)]


def test_only_changed_scalars_written():
    state = AppState().replace(sample_rate=48000, f0_multiplier=0.5)
    params = encode_app_state(state)
    assert params == {"sampleRate": "48000", "f0Multiplier": "0.5"}


def test_nan_scalar_omitted():
    assert encode_app_state(AppState().replace(spec_shift=float("nan"))) == {}


def test_format_number():
    assert format_number(44100.0) == "44100"
    assert format_number(0.2) == "0.2"
    assert format_number(-3) == "-3"


def test_url_round_trip():
    state = AppState().replace(
        agc_rms_level=0.25,
        spec_multiplier=1.5,
        spec_shift=-100,
        even_ampl_shift=-6,
        reference="Vowel a, male & adult",
        frequency_curve=Curve.from_pairs([(0, 110), (0.5, 220), (2, 110)]),
    )
    s = encode_app_state_url_parms(state)
    assert "frequencyCurve=" in s
    assert "%26" in s               # '&' in the reference is escaped
    out = decode_app_state_url_parms("#" + s)
    assert out.agc_rms_level == 0.25
    assert out.spec_multiplier == 1.5
    assert out.spec_shift == -100
    assert out.even_ampl_shift == -6
    assert out.reference == "Vowel a, male & adult"
    assert np.allclose(out.frequency_curve.x, [0, 0.5, 2])
    assert np.allclose(out.frequency_curve.y, [110, 220, 110])
    assert out.spectrum_curve == state.spectrum_curve


def test_curve_separator_is_literal():
    state = AppState().replace(amplitude_curve=Curve.from_pairs([(0, -20), (1, -20)]))
    s = encode_app_state_url_parms(state)
    assert "*" in s
    assert "%2A" not in s


def test_curve_close_to_default_omitted():
    pairs = [(x + 1e-9, y) for x, y in DEFAULT_AMPLITUDE_CURVE.to_pairs()]
    state = AppState().replace(amplitude_curve=Curve.from_pairs(pairs))
    assert encode_app_state(state) == {}


def test_empty_value_is_absent():
    assert decode_app_state_url_parms("sampleRate=&ref=") == AppState()


def test_invalid_number():
    with pytest.raises(ParameterDecodeError):
        decode_app_state_url_parms("sampleRate=abc")
    with pytest.raises(ParameterDecodeError):
        decode_app_state_url_parms("specShift=NaN")


def test_invalid_curve_structure():
    with pytest.raises(StructuralDecodeError):
        decode_app_state_url_parms("spectrumCurve=abc")


def test_or_default_falls_back(caplog):
    with caplog.at_level(logging.WARNING):
        state = decode_app_state_url_parms_or_default("f0Multiplier=2&spectrumCurve=a*b*c")
    assert state == AppState()
    assert "Invalid URL state" in caplog.text


def test_or_default_oversized_varint():
    x = base64url_encode(deflate(b"\xff" * 200 + b"\x01"))
    y = encode_curve_data([-20.0], CurveDataType.DB)
    state = decode_app_state_url_parms_or_default(f"amplitudeCurve={x}*{y}")
    assert state == AppState()


def test_or_default_passes_valid_state():
    s = encode_app_state_url_parms(AppState().replace(f0_multiplier=2))
    assert s == "f0Multiplier=2"
    assert decode_app_state_url_parms_or_default(s).f0_multiplier == 2
