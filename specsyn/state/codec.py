"""Curve knot compression for URL state.

Pipeline per coordinate array (x values and y values are encoded separately):

    quantize -> differentiate -> zig-zag (non-ascending types only)
    -> varint -> raw deflate (level 9) -> base64url (no padding)

The two encoded arrays are joined as "x-part*y-part". Decoding runs the exact
inverse. Quantization is the only lossy step: a value survives a round trip
within half a quantization step after clamping to the type's range.

The byte format matches the SpecSyn web application, so URL fragments can be shared
between the two.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
import zlib
from dataclasses import dataclass
from enum import Enum

import numpy as np

from primitives.dsp import round_half_up
from specsyn.errors import (
    EncodingInvariantViolation,
    NonAscendingCurveError,
    PayloadDecodeError,
    StructuralDecodeError,
)
from specsyn.state.curves import Curve

SEPARATOR = "*"
DEFLATE_LEVEL = 9

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")
VARINT_MAX_BYTES = 5
UINT32_LIMIT = 1 << 32
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


@dataclass(frozen=True)
class QuantizationProfile:
    decimal_digits: int
    ascending: bool
    min_value: float
    max_value: float

    @property
    def step(self) -> float:
        return 10.0 ** -self.decimal_digits


class CurveDataType(Enum):
    TIME_ASC = "timeAsc"      # time values in seconds, ascending
    FREQ = "freq"             # frequency values in Hz
    FREQ_ASC = "freqAsc"      # frequency values in Hz, ascending
    DB = "db"                 # dB values

    @property
    def profile(self) -> QuantizationProfile:
        return PROFILES[self]


PROFILES = {
    CurveDataType.TIME_ASC: QuantizationProfile(3, True, 0.0, 36000.0),
    CurveDataType.FREQ:     QuantizationProfile(0, False, 0.0, 100000.0),
    CurveDataType.FREQ_ASC: QuantizationProfile(0, True, 0.0, 100000.0),
    CurveDataType.DB:       QuantizationProfile(1, False, -200.0, 200.0),
}


# ── Stages ────────────────────────────────────────────────────────────

def quantize(x: float, decimal_digits: int, min_value: float, max_value: float) -> int:
    """Clamp and scale to a fixed-point integer, rounding halves up. NaN maps to 0."""
    if math.isnan(x):
        return 0
    x2 = max(min_value, min(max_value, x))
    return round_half_up(x2 * 10 ** decimal_digits)


def dequantize(i: int, decimal_digits: int) -> float:
    return i / 10 ** decimal_digits


def differentiate(a: list[int]) -> list[int]:
    return [a[i] - (a[i - 1] if i > 0 else 0) for i in range(len(a))]


def integrate(a: list[int]) -> list[int]:
    out = []
    acc = 0
    for v in a:
        acc += v
        out.append(acc)
    return out


def wrap_sign(i: int) -> int:
    return -i * 2 + 1 if i < 0 else i * 2


def unwrap_sign(i: int) -> int:
    return -(i >> 1) if i & 1 else i >> 1


def varint_encode(values: list[int]) -> bytes:
    """Unsigned LEB128: low 7 bits first, high bit set on every byte but the last."""
    out = bytearray()
    for v in values:
        if v < 0:
            raise EncodingInvariantViolation(f"Negative varint value {v}.")
        while v >= 0x80:
            out.append((v & 0x7F) | 0x80)
            v >>= 7
        out.append(v)
    return bytes(out)


def varint_decode(data: bytes) -> list[int]:
    """Values are unsigned 32-bit; longer or larger varints are rejected."""
    out = []
    value = 0
    shift = 0
    pending = False
    for b in data:
        if shift >= 7 * VARINT_MAX_BYTES:
            raise PayloadDecodeError("Varint longer than 5 bytes.")
        value |= (b & 0x7F) << shift
        if b & 0x80:
            shift += 7
            pending = True
        else:
            if value >= UINT32_LIMIT:
                raise PayloadDecodeError(f"Varint value {value} exceeds 32 bits.")
            out.append(value)
            value = 0
            shift = 0
            pending = False
    if pending:
        raise PayloadDecodeError("Truncated varint stream.")
    return out


def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def base64url_decode(s: str) -> bytes:
    if not _BASE64URL_RE.match(s):
        raise PayloadDecodeError("Invalid character in base64url payload.")
    padded = s + "=" * (-len(s) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise PayloadDecodeError(f"Invalid base64url payload: {exc}") from exc


def deflate(data: bytes) -> bytes:
    """Raw DEFLATE stream (no zlib header or checksum)."""
    compressor = zlib.compressobj(DEFLATE_LEVEL, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def inflate(data: bytes) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        out = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as exc:
        raise PayloadDecodeError(f"Corrupt compressed payload: {exc}") from exc
    if not decompressor.eof:
        raise PayloadDecodeError("Truncated compressed payload.")
    return out


# ── Arrays ────────────────────────────────────────────────────────────

def encode_curve_data(values, data_type: CurveDataType) -> str:
    p = data_type.profile
    q = [quantize(float(v), p.decimal_digits, p.min_value, p.max_value) for v in values]
    d = differentiate(q)
    if not p.ascending:
        d = [wrap_sign(v) for v in d]
    return base64url_encode(deflate(varint_encode(d)))


def decode_curve_data(s: str, data_type: CurveDataType) -> np.ndarray:
    p = data_type.profile
    d = varint_decode(inflate(base64url_decode(s)))
    if not p.ascending:
        d = [unwrap_sign(v) for v in d]
    q = integrate(d)
    if any(v < INT32_MIN or v > INT32_MAX for v in q):
        raise PayloadDecodeError("Decoded value out of 32-bit range.")
    return np.array([dequantize(v, p.decimal_digits) for v in q], dtype=np.float64)


# ── Curves ────────────────────────────────────────────────────────────

def encode_curve(curve: Curve, x_type: CurveDataType, y_type: CurveDataType) -> str:
    x_str = encode_curve_data(curve.x, x_type)
    y_str = encode_curve_data(curve.y, y_type)
    return x_str + SEPARATOR + y_str


def decode_curve(s: str, x_type: CurveDataType, y_type: CurveDataType) -> Curve:
    parts = s.split(SEPARATOR)
    if len(parts) != 2:
        raise StructuralDecodeError(
            f"Invalid encoded curve knots value structure ({len(parts)} parts).")
    x_vals = decode_curve_data(parts[0], x_type)
    y_vals = decode_curve_data(parts[1], y_type)
    if len(x_vals) != len(y_vals):
        raise StructuralDecodeError(
            f"Length mismatch of encoded curve knots x/y components "
            f"({len(x_vals)} vs {len(y_vals)}).")
    try:
        return Curve.from_arrays(x_vals, y_vals)
    except NonAscendingCurveError as exc:
        raise StructuralDecodeError(str(exc)) from exc
