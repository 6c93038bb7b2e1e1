"""Exception hierarchy for SpecSyn.

Decode-path errors derive from StateDecodeError so that the URL state boundary
can fall back to defaults with a single except clause.
"""

from __future__ import annotations


class SpecSynError(Exception):
    """Base error for SpecSyn."""


class StateDecodeError(SpecSynError):
    """Raised when an encoded application state cannot be restored."""


class StructuralDecodeError(StateDecodeError):
    """Raised when an encoded curve has the wrong shape (part count, x/y lengths)."""


class PayloadDecodeError(StateDecodeError):
    """Raised when an encoded curve payload is not valid base64url/deflate/varint data."""


class ParameterDecodeError(StateDecodeError):
    """Raised when a numeric state parameter does not hold a number."""


class EncodingInvariantViolation(SpecSynError):
    """Raised when a negative value reaches the varint encoder.

    This is a logic defect upstream of the encoder, never a user input error.
    """


class InsufficientSmoothingWidth(SpecSynError):
    """Raised when a moving-average smoothing width is below the usable minimum."""


class UnknownStrategy(SpecSynError):
    """Raised for an unrecognized smoothing method or window function id."""


class NonAscendingCurveError(SpecSynError, ValueError):
    """Raised when curve points are not in ascending x order."""
