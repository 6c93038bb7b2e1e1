"""Window functions by id.

The id set is closed: parse() turns a string id into a WindowFunction and
raises UnknownStrategy for anything else, so an unknown id fails where
parameters are read and never inside a numeric loop.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from scipy.signal import windows as sw

from specsyn.errors import UnknownStrategy

NONE_ID = "none"


class WindowFunction(Enum):
    RECT = "rect"
    TRIANGULAR = "triangular"
    HANN = "hann"
    HAMMING = "hamming"
    BLACKMAN = "blackman"
    BLACKMAN_HARRIS = "blackmanHarris"
    NUTTALL = "nuttall"
    FLAT_TOP = "flatTop"
    PARABOLIC = "parabolic"

    @classmethod
    def parse(cls, id: str, allow_none: bool = False) -> WindowFunction | None:
        """Window id -> WindowFunction. "none" gives None when allow_none is set."""
        if allow_none and id == NONE_ID:
            return None
        try:
            return cls(id)
        except ValueError:
            raise UnknownStrategy(f"Unknown window function id '{id}'.") from None


def _parabolic(n: int) -> np.ndarray:
    if n == 1:
        return np.ones(1)
    x = 2.0 * np.arange(n) / (n - 1) - 1.0
    return 1.0 - x * x


def window(wf: WindowFunction, n: int) -> np.ndarray:
    """Symmetric window of length n."""
    if n <= 0:
        return np.zeros(0)
    if wf == WindowFunction.RECT:
        return np.ones(n)
    if wf == WindowFunction.TRIANGULAR:
        return sw.triang(n, sym=True)
    if wf == WindowFunction.HANN:
        return sw.hann(n, sym=True)
    if wf == WindowFunction.HAMMING:
        return sw.hamming(n, sym=True)
    if wf == WindowFunction.BLACKMAN:
        return sw.blackman(n, sym=True)
    if wf == WindowFunction.BLACKMAN_HARRIS:
        return sw.blackmanharris(n, sym=True)
    if wf == WindowFunction.NUTTALL:
        return sw.nuttall(n, sym=True)
    if wf == WindowFunction.FLAT_TOP:
        return sw.flattop(n, sym=True)
    if wf == WindowFunction.PARABOLIC:
        return _parabolic(n)
    raise UnknownStrategy(f"Unknown window function '{wf}'.")


def apply_window(signal: np.ndarray, wf: WindowFunction) -> np.ndarray:
    """Multiply a signal by a window of its own length. Returns a new array."""
    signal = np.asarray(signal, dtype=np.float64)
    return signal * window(wf, len(signal))
