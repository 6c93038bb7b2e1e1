"""Curve points, ascending curves and curve functions.

A Curve is the knot list of an editable function curve. Every curve in SpecSyn
is ordered by ascending x, which the codec relies on for its delta encoding, so
the ordering is checked when a Curve is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from specsyn.errors import NonAscendingCurveError

# Curve function: float in, float out. Functions marked with array_function
# also take an ndarray and return values of the same shape.
CurveFunction = Callable[[float], float]


@dataclass(frozen=True)
class CurvePoint:
    x: float
    y: float


@dataclass(frozen=True)
class Curve:
    """Immutable knot sequence with non-decreasing x."""

    points: tuple[CurvePoint, ...] = ()

    def __post_init__(self):
        points = tuple(self.points)
        for i in range(1, len(points)):
            if points[i].x < points[i - 1].x:
                raise NonAscendingCurveError(
                    f"Curve x values must be ascending, got {points[i - 1].x} "
                    f"before {points[i].x} at index {i}.")
        object.__setattr__(self, "points", points)

    @classmethod
    def from_pairs(cls, pairs: Iterable, sort: bool = False) -> Curve:
        """Build a curve from (x, y) pairs.

        With sort=True the points are stably sorted by x instead of rejected.
        """
        points = [CurvePoint(float(x), float(y)) for x, y in pairs]
        if sort:
            points.sort(key=lambda p: p.x)
        return cls(tuple(points))

    @classmethod
    def from_arrays(cls, x, y) -> Curve:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if x.shape != y.shape:
            raise ValueError(f"x/y shape mismatch: {x.shape} vs {y.shape}")
        return cls(tuple(CurvePoint(float(a), float(b)) for a, b in zip(x, y)))

    @property
    def x(self) -> np.ndarray:
        return np.array([p.x for p in self.points], dtype=np.float64)

    @property
    def y(self) -> np.ndarray:
        return np.array([p.y for p in self.points], dtype=np.float64)

    @property
    def last_x(self) -> float | None:
        return self.points[-1].x if self.points else None

    def to_pairs(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self.points]

    def is_close(self, other: Curve, eps: float = 1e-6) -> bool:
        """True if both curves have the same length and all coordinates match within eps."""
        if len(self) != len(other):
            return False
        for p1, p2 in zip(self.points, other.points):
            if abs(p1.x - p2.x) > eps or abs(p1.y - p2.y) > eps:
                return False
        return True

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, i):
        return self.points[i]


def array_function(fn):
    """Mark a curve function as taking ndarray arguments elementwise."""
    fn.accepts_arrays = True
    return fn


def curve_function(curve: Curve) -> CurveFunction:
    """Piecewise-linear function through the curve knots.

    Outside the knot range (and for an empty curve) the function returns NaN,
    which the synthesizer treats as silence.
    """
    xp = curve.x
    fp = curve.y

    if len(xp) == 0:
        @array_function
        def empty(x):
            return np.full(np.shape(x), np.nan)
        return empty

    @array_function
    def f(x):
        x = np.asarray(x, dtype=np.float64)
        return np.interp(x, xp, fp, left=np.nan, right=np.nan)

    return f


def evaluate(fn: CurveFunction, x) -> np.ndarray:
    """Evaluate a curve function over an array of arguments.

    Array functions get the whole array and their result is broadcast to its
    shape. Plain scalar functions are called once per element.
    """
    x = np.asarray(x, dtype=np.float64)
    if getattr(fn, "accepts_arrays", False):
        y = np.asarray(fn(x), dtype=np.float64)
        return np.broadcast_to(y, x.shape)
    if x.size == 0:
        return np.empty(x.shape)
    return np.vectorize(fn, otypes=[np.float64])(x)
