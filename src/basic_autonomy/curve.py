"""Parametric curve fitting and curvature evaluation."""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np
from scipy.interpolate import CubicSpline, splev, splprep

from basic_autonomy.config import CurveFitMethod
from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.geometry import compute_arc_lengths, distance, remove_consecutive_duplicates
from basic_autonomy.types import Point

logger = logging.getLogger(__name__)

MIN_FIT_POINTS = 4
CLOSED_PATH_TOLERANCE = 1e-6
DEGENERATE_SPEED_SQ = 1e-12
DEFAULT_DEGENERATE_CURVATURE = 0.0


@runtime_checkable
class Curve(Protocol):
    """Curve parameterized over [0, 1].

    Both methods accept a scalar or an array of parameters and return an
    array whose last axis holds (x, y).
    """

    def evaluate(self, t: float | np.ndarray) -> np.ndarray: ...

    def derivative(self, order: int, t: float | np.ndarray) -> np.ndarray: ...


class CubicSplineCurve:
    """Interpolating cubic spline over normalized chord length."""

    def __init__(self, points: np.ndarray, periodic: bool = False):
        """Fit the spline.

        Args:
            points: Distinct ordered positions [N, 2]; for periodic fits the
                last row must equal the first
            periodic: Fit a closed curve
        """
        s = compute_arc_lengths(points)
        self._spline = CubicSpline(
            s / s[-1], points, axis=0, bc_type="periodic" if periodic else "not-a-knot"
        )

    def evaluate(self, t: float | np.ndarray) -> np.ndarray:
        return self._spline(t)

    def derivative(self, order: int, t: float | np.ndarray) -> np.ndarray:
        return self._spline(t, order)


class BSplineCurve:
    """Interpolating cubic B-spline (FITPACK) over normalized chord length."""

    def __init__(self, points: np.ndarray, periodic: bool = False):
        s = compute_arc_lengths(points)
        self._tck, _ = splprep([points[:, 0], points[:, 1]], u=s / s[-1], s=0, k=3, per=periodic)

    def evaluate(self, t: float | np.ndarray) -> np.ndarray:
        return np.stack(splev(t, self._tck), axis=-1)

    def derivative(self, order: int, t: float | np.ndarray) -> np.ndarray:
        return np.stack(splev(t, self._tck, der=order), axis=-1)


_FITTERS: dict[CurveFitMethod, type] = {
    CurveFitMethod.CUBIC_SPLINE: CubicSplineCurve,
    CurveFitMethod.BSPLINE: BSplineCurve,
}


def compute_fit(
    points: Sequence[Point],
    method: CurveFitMethod = CurveFitMethod.CUBIC_SPLINE,
) -> Curve:
    """Fit a curve through ordered points.

    A path whose last point returns to its first point is fitted as a closed
    curve.

    Args:
        points: Ordered positions
        method: Fitting strategy

    Returns:
        Curve passing through the points, parameterized over [0, 1]

    Raises:
        InvalidArgumentError: If fewer than 4 distinct points are given
    """
    distinct = remove_consecutive_duplicates(points)
    closed = len(distinct) > 1 and distance(distinct[0], distinct[-1]) < CLOSED_PATH_TOLERANCE
    num_distinct = len(distinct) - 1 if closed else len(distinct)
    if num_distinct < MIN_FIT_POINTS:
        raise InvalidArgumentError(
            f"Curve fit requires at least {MIN_FIT_POINTS} distinct points, got {num_distinct}"
        )

    xy = np.array(distinct, dtype=float)
    if closed:
        xy[-1] = xy[0]

    logger.debug(f"Fitting {method.value} through {len(xy)} points (closed={closed})")
    return _FITTERS[method](xy, periodic=closed)


def compute_curvature_at(curve: Curve, t: float) -> float:
    """Curvature of the curve at parameter t.

    Returns DEFAULT_DEGENERATE_CURVATURE where the first derivative vanishes.
    """
    dx, dy = curve.derivative(1, t)
    ddx, ddy = curve.derivative(2, t)
    speed_sq = dx * dx + dy * dy
    if speed_sq < DEGENERATE_SPEED_SQ:
        return DEFAULT_DEGENERATE_CURVATURE
    return float(abs(dx * ddy - dy * ddx) / speed_sq**1.5)


def compute_curvatures(curve: Curve, params: np.ndarray) -> np.ndarray:
    """Vectorized compute_curvature_at over an array of parameters."""
    d1 = curve.derivative(1, params)
    d2 = curve.derivative(2, params)
    speed_sq = d1[:, 0] ** 2 + d1[:, 1] ** 2
    cross = np.abs(d1[:, 0] * d2[:, 1] - d1[:, 1] * d2[:, 0])
    degenerate = speed_sq < DEGENERATE_SPEED_SQ
    safe_speed_sq = np.where(degenerate, 1.0, speed_sq)
    return np.where(degenerate, DEFAULT_DEGENERATE_CURVATURE, cross / safe_speed_sq**1.5)


def compute_tangent_orientations(curve: Curve, params: np.ndarray) -> np.ndarray:
    """Heading of the curve tangent at each parameter [rad]."""
    d1 = curve.derivative(1, params)
    return np.arctan2(d1[:, 1], d1[:, 0])
