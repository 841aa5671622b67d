"""Acceleration-bounded speed profiles."""

from collections.abc import Sequence

import numpy as np

from basic_autonomy.errors import InvalidArgumentError

MIN_CURVATURE = 1e-9


def _validate(downtracks: Sequence[float], speeds: Sequence[float], max_accel: float) -> None:
    if len(downtracks) != len(speeds):
        raise InvalidArgumentError(
            f"downtracks and speeds differ in length ({len(downtracks)} != {len(speeds)})"
        )
    if max_accel <= 0:
        raise InvalidArgumentError(f"max_accel must be positive, got {max_accel}")


def forward_speed_pass(
    downtracks: Sequence[float], speeds: Sequence[float], max_accel: float
) -> np.ndarray:
    """Cap each speed by what is reachable accelerating from the previous point."""
    _validate(downtracks, speeds, max_accel)
    d = np.asarray(downtracks, dtype=float)
    v = np.asarray(speeds, dtype=float)
    out = np.empty_like(v)
    if len(v) == 0:
        return out

    out[0] = v[0]
    for i in range(1, len(v)):
        reachable = np.sqrt(out[i - 1] ** 2 + 2.0 * max_accel * (d[i] - d[i - 1]))
        out[i] = min(v[i], reachable)
    return out


def backward_speed_pass(
    downtracks: Sequence[float], speeds: Sequence[float], max_accel: float
) -> np.ndarray:
    """Cap each speed by what still allows braking to the next point's speed."""
    _validate(downtracks, speeds, max_accel)
    d = np.asarray(downtracks, dtype=float)
    v = np.asarray(speeds, dtype=float)
    out = np.empty_like(v)
    if len(v) == 0:
        return out

    out[-1] = v[-1]
    for i in range(len(v) - 2, -1, -1):
        reachable = np.sqrt(out[i + 1] ** 2 + 2.0 * max_accel * (d[i + 1] - d[i]))
        out[i] = min(v[i], reachable)
    return out


def optimize_speed(
    downtracks: Sequence[float], speeds: Sequence[float], max_accel: float
) -> np.ndarray:
    """Smooth a speed profile so no segment exceeds max_accel.

    The first speed is returned unchanged since it is the speed the vehicle
    is already committed to.

    Args:
        downtracks: Cumulative distances [m]
        speeds: Target speeds at each downtrack [m/s]
        max_accel: Acceleration/deceleration bound [m/s^2]

    Returns:
        Optimized speeds

    Raises:
        InvalidArgumentError: If lengths differ or max_accel <= 0
    """
    forward = forward_speed_pass(downtracks, speeds, max_accel)
    backward = backward_speed_pass(downtracks, speeds, max_accel)
    result = np.minimum(forward, backward)
    if len(result) > 0:
        result[0] = speeds[0]
    return result


def curvature_speed_limits(curvatures: Sequence[float], lateral_accel_limit: float) -> np.ndarray:
    """Highest speed keeping lateral acceleration within the limit.

    Straight sections (curvature below MIN_CURVATURE) are unbounded.
    """
    k = np.abs(np.asarray(curvatures, dtype=float))
    limits = np.full_like(k, np.inf)
    curved = k > MIN_CURVATURE
    limits[curved] = np.sqrt(lateral_accel_limit / k[curved])
    return limits


def speed_to_time(downtracks: Sequence[float], speeds: Sequence[float]) -> np.ndarray:
    """Relative arrival time at each point assuming constant acceleration per segment.

    Raises:
        InvalidArgumentError: If lengths differ or a segment has zero speed at both ends
    """
    if len(downtracks) != len(speeds):
        raise InvalidArgumentError(
            f"downtracks and speeds differ in length ({len(downtracks)} != {len(speeds)})"
        )
    d = np.asarray(downtracks, dtype=float)
    v = np.asarray(speeds, dtype=float)
    if len(d) == 0:
        return np.zeros(0)

    mean_speed = v[:-1] + v[1:]
    if np.any(mean_speed <= 0.0):
        stop = int(np.argmax(mean_speed <= 0.0))
        raise InvalidArgumentError(f"Segment {stop} cannot be traversed at zero speed")

    dt = 2.0 * np.diff(d) / mean_speed
    return np.concatenate(([0.0], np.cumsum(dt)))
