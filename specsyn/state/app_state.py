"""Application state <-> flat parameter map / URL fragment.

Only values that differ from their defaults are written, so the URL for an
unchanged state is empty. Decoding fills every missing key with its default.
Curves are compressed with the curve codec, each slot with a fixed pair of
quantization types.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Mapping
from urllib.parse import parse_qsl, urlencode

from shared.params import ParamType
from specsyn.engine.params import (
    DEFAULT_AMPLITUDE_KNOTS,
    DEFAULT_FREQUENCY_KNOTS,
    DEFAULT_SPECTRUM_KNOTS,
    STATE_SCHEMA,
)
from specsyn.errors import ParameterDecodeError, StateDecodeError
from specsyn.state.codec import CurveDataType, decode_curve, encode_curve
from specsyn.state.curves import Curve

log = logging.getLogger(__name__)

DEFAULT_SPECTRUM_CURVE = Curve.from_pairs(DEFAULT_SPECTRUM_KNOTS)
DEFAULT_AMPLITUDE_CURVE = Curve.from_pairs(DEFAULT_AMPLITUDE_KNOTS)
DEFAULT_FREQUENCY_CURVE = Curve.from_pairs(DEFAULT_FREQUENCY_KNOTS)

_DEFAULTS = STATE_SCHEMA.default_params()


@dataclass(frozen=True)
class AppState:
    sample_rate: float = _DEFAULTS["sample_rate"]
    agc_rms_level: float = _DEFAULTS["agc_rms_level"]
    f0_multiplier: float = _DEFAULTS["f0_multiplier"]
    spec_multiplier: float = _DEFAULTS["spec_multiplier"]
    spec_shift: float = _DEFAULTS["spec_shift"]
    even_ampl_shift: float = _DEFAULTS["even_ampl_shift"]
    reference: str = _DEFAULTS["reference"]
    spectrum_curve: Curve = field(default=DEFAULT_SPECTRUM_CURVE)
    amplitude_curve: Curve = field(default=DEFAULT_AMPLITUDE_CURVE)
    frequency_curve: Curve = field(default=DEFAULT_FREQUENCY_CURVE)

    def replace(self, **changes) -> AppState:
        return replace(self, **changes)


@dataclass(frozen=True)
class CurveSlot:
    key: str
    attr: str
    x_type: CurveDataType
    y_type: CurveDataType
    default: Curve


CURVE_SLOTS = [
    CurveSlot("spectrumCurve", "spectrum_curve",
              CurveDataType.FREQ_ASC, CurveDataType.DB, DEFAULT_SPECTRUM_CURVE),
    CurveSlot("amplitudeCurve", "amplitude_curve",
              CurveDataType.TIME_ASC, CurveDataType.DB, DEFAULT_AMPLITUDE_CURVE),
    CurveSlot("frequencyCurve", "frequency_curve",
              CurveDataType.TIME_ASC, CurveDataType.FREQ, DEFAULT_FREQUENCY_CURVE),
]


def format_number(v: float) -> str:
    """Shortest text form: integers without a fraction, floats via repr."""
    v = float(v)
    if v.is_integer():
        return str(int(v))
    return repr(v)


def parse_number(key: str, s: str) -> float:
    try:
        v = float(s)
    except ValueError:
        raise ParameterDecodeError(
            f'Invalid value "{s}" for numeric URL parameter "{key}".') from None
    if not math.isfinite(v):
        raise ParameterDecodeError(
            f'Invalid value "{s}" for numeric URL parameter "{key}".')
    return v


# ── Flat map ──────────────────────────────────────────────────────────

def encode_app_state(state: AppState) -> dict[str, str]:
    params: dict[str, str] = {}
    for p in STATE_SCHEMA:
        value = getattr(state, p.attr)
        if p.type == ParamType.STR:
            if value and value != p.default:
                params[p.key] = str(value)
            continue
        if value is None or math.isnan(value) or value == p.default:
            continue
        params[p.key] = format_number(value)
    for slot in CURVE_SLOTS:
        curve = getattr(state, slot.attr)
        if curve is None or curve.is_close(slot.default):
            continue
        params[slot.key] = encode_curve(curve, slot.x_type, slot.y_type)
    return params


def decode_app_state(params: Mapping[str, str]) -> AppState:
    values = {}
    for p in STATE_SCHEMA:
        s = params.get(p.key)
        if not s:
            continue
        if p.type == ParamType.STR:
            values[p.attr] = s
        else:
            values[p.attr] = parse_number(p.key, s)
    for slot in CURVE_SLOTS:
        s = params.get(slot.key)
        if not s:
            continue
        values[slot.attr] = decode_curve(s, slot.x_type, slot.y_type)
    return AppState(**values)


# ── URL fragment ──────────────────────────────────────────────────────

def encode_app_state_url_parms(state: AppState) -> str:
    return urlencode(encode_app_state(state), safe="*")


def decode_app_state_url_parms(s: str) -> AppState:
    if s.startswith("#"):
        s = s[1:]
    # Later duplicates win, as with URLSearchParams.set().
    params = dict(parse_qsl(s, keep_blank_values=True))
    return decode_app_state(params)


def decode_app_state_url_parms_or_default(s: str) -> AppState:
    """Decode a URL fragment, falling back to the default state as a whole on error."""
    try:
        return decode_app_state_url_parms(s)
    except StateDecodeError as exc:
        log.warning("Invalid URL state, using defaults: %s", exc)
        return AppState()
