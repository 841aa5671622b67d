"""Geometry utility functions."""

from collections.abc import Sequence

import numpy as np

from basic_autonomy.errors import EmptyInputError, InvalidArgumentError
from basic_autonomy.types import Point, PointSpeedPair, VehicleState


def distance(p1: Point, p2: Point) -> float:
    """2点間のユークリッド距離を計算.

    Args:
        p1: 点1の座標
        p2: 点2の座標

    Returns:
        距離 [m]
    """
    return float(np.hypot(p2[0] - p1[0], p2[1] - p1[1]))


def as_position(item: Point | PointSpeedPair | VehicleState) -> Point:
    """Extract an (x, y) position from a point, point/speed pair or vehicle state."""
    if isinstance(item, PointSpeedPair):
        return item.point
    if isinstance(item, VehicleState):
        return item.position
    return (float(item[0]), float(item[1]))


def to_array(points: Sequence[Point | PointSpeedPair]) -> np.ndarray:
    """Stack positions into an [N, 2] array."""
    if len(points) == 0:
        return np.zeros((0, 2))
    return np.array([as_position(p) for p in points], dtype=float)


def compute_arc_lengths(points: Sequence[Point] | np.ndarray) -> np.ndarray:
    """Cumulative distance along a polyline, starting at 0.

    Args:
        points: Ordered positions, [N, 2]

    Returns:
        Array of N cumulative distances [m]
    """
    xy = np.asarray(points, dtype=float).reshape(-1, 2)
    s = np.zeros(len(xy))
    if len(xy) > 1:
        s[1:] = np.cumsum(np.hypot(np.diff(xy[:, 0]), np.diff(xy[:, 1])))
    return s


def split_point_speed_pairs(
    points: Sequence[PointSpeedPair],
) -> tuple[list[Point], list[float]]:
    """Split point/speed pairs into parallel position and speed lists."""
    return [p.point for p in points], [p.speed for p in points]


def get_nearest_point_index(
    points: Sequence[Point | PointSpeedPair],
    reference: Point | VehicleState,
) -> int:
    """Index of the point closest to the reference position.

    Ties resolve to the lowest index.

    Raises:
        EmptyInputError: If points is empty
    """
    if len(points) == 0:
        raise EmptyInputError("Cannot search for the nearest point in an empty sequence")

    ref = as_position(reference)
    xy = to_array(points)
    dist = np.hypot(xy[:, 0] - ref[0], xy[:, 1] - ref[1])
    return int(np.argmin(dist))


def get_nearest_index_by_downtrack(downtracks: Sequence[float], target: float) -> int:
    """Index of the downtrack value closest to target (lowest index on ties)."""
    if len(downtracks) == 0:
        raise EmptyInputError("Cannot search for the nearest downtrack in an empty sequence")
    return int(np.argmin(np.abs(np.asarray(downtracks, dtype=float) - target)))


def remove_consecutive_duplicates(points: Sequence[Point], tol: float = 1e-9) -> list[Point]:
    """Drop points equal to their predecessor within tol."""
    result: list[Point] = []
    for p in points:
        if result and distance(result[-1], p) <= tol:
            continue
        result.append(p)
    return result


def downsample(items: Sequence, ratio: int) -> list:
    """Keep every ratio-th item, always keeping the last one."""
    if ratio < 1:
        raise InvalidArgumentError(f"Downsample ratio must be >= 1, got {ratio}")
    result = list(items[::ratio])
    if len(items) > 0 and (len(items) - 1) % ratio != 0:
        result.append(items[-1])
    return result


def moving_average_filter(values: Sequence[float], window_size: int) -> np.ndarray:
    """Centered moving average with a window that shrinks at the ends.

    Even window sizes are widened by one so the window stays centered. The
    first value is kept unchanged.
    """
    data = np.asarray(values, dtype=float)
    if window_size <= 1 or len(data) < 3:
        return data.copy()

    if window_size % 2 == 0:
        window_size += 1
    half = window_size // 2

    cumsum = np.concatenate(([0.0], np.cumsum(data)))
    idx = np.arange(len(data))
    lo = np.maximum(idx - half, 0)
    hi = np.minimum(idx + half + 1, len(data))
    filtered = (cumsum[hi] - cumsum[lo]) / (hi - lo)
    filtered[0] = data[0]
    return filtered


def headings_from_points(points: Sequence[Point] | np.ndarray) -> np.ndarray:
    """Heading of each point towards its successor; the last repeats the previous."""
    xy = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(xy) < 2:
        return np.zeros(len(xy))
    yaw = np.arctan2(np.diff(xy[:, 1]), np.diff(xy[:, 0]))
    return np.append(yaw, yaw[-1])


__all__ = [
    "as_position",
    "compute_arc_lengths",
    "distance",
    "downsample",
    "get_nearest_index_by_downtrack",
    "get_nearest_point_index",
    "headings_from_points",
    "moving_average_filter",
    "remove_consecutive_duplicates",
    "split_point_speed_pairs",
    "to_array",
]
