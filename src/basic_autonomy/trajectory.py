"""Trajectory composition from point/speed geometry."""

import logging
from collections.abc import Sequence

import numpy as np

from basic_autonomy.config import DetailedTrajConfig
from basic_autonomy.curve import (
    MIN_FIT_POINTS,
    compute_curvatures,
    compute_fit,
    compute_tangent_orientations,
)
from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.geometry import (
    compute_arc_lengths,
    get_nearest_point_index,
    moving_average_filter,
    split_point_speed_pairs,
)
from basic_autonomy.speed import curvature_speed_limits, optimize_speed, speed_to_time
from basic_autonomy.stitching import attach_past_points, constrain_to_time_boundary
from basic_autonomy.types import (
    DEFAULT_CONTROLLER_PLUGIN,
    ComposedTrajectory,
    Point,
    PointSpeedPair,
    TrajectoryPoint,
    VehicleState,
)

logger = logging.getLogger(__name__)


def trajectory_from_points_times_orientations(
    points: Sequence[Point] | np.ndarray,
    times: Sequence[float],
    yaws: Sequence[float],
    start_time: float,
    desired_controller_plugin: str = DEFAULT_CONTROLLER_PLUGIN,
) -> list[TrajectoryPoint]:
    """Stamp positions with absolute arrival times and headings.

    Args:
        points: Positions
        times: Arrival times relative to start_time [s], non-decreasing
        yaws: Headings [rad]
        start_time: Absolute time of the first point [s]
        desired_controller_plugin: Controller plugin that executes the points

    Returns:
        One TrajectoryPoint per input sample

    Raises:
        InvalidArgumentError: If lengths differ or times decrease
    """
    if not len(points) == len(times) == len(yaws):
        raise InvalidArgumentError(
            f"points, times and yaws differ in length ({len(points)}, {len(times)}, {len(yaws)})"
        )
    if len(times) > 1 and np.any(np.diff(np.asarray(times, dtype=float)) < 0):
        raise InvalidArgumentError("Relative times must be non-decreasing")

    return [
        TrajectoryPoint(
            x=float(p[0]),
            y=float(p[1]),
            yaw=float(yaw),
            target_time=start_time + float(t),
            controller_plugin_name=desired_controller_plugin,
        )
        for p, t, yaw in zip(points, times, yaws, strict=True)
    ]


def _first_stop_index(speeds: np.ndarray) -> int | None:
    stopped = np.flatnonzero(speeds[1:] <= 0.0)
    return int(stopped[0]) + 1 if len(stopped) > 0 else None


def _compose_trajectory(
    points: Sequence[PointSpeedPair],
    state: VehicleState,
    state_time: float,
    detailed_config: DetailedTrajConfig,
    ending_state: VehicleState | None,
    previous_points: Sequence[PointSpeedPair] | None,
) -> ComposedTrajectory:
    nearest_pt_index = get_nearest_point_index(points, state)
    future_points = list(points[nearest_pt_index + 1 :])
    time_bound_points = constrain_to_time_boundary(
        future_points, detailed_config.trajectory_time_length
    )

    if previous_points:
        past_source = previous_points
        past_index = get_nearest_point_index(previous_points, state)
    else:
        past_source = points
        past_index = nearest_pt_index
    back_and_future = attach_past_points(
        past_source, time_bound_points, past_index, detailed_config.back_distance
    )

    logger.debug(
        f"nearest={nearest_pt_index} future={len(future_points)} "
        f"time_bound={len(time_bound_points)} stitched={len(back_and_future)}"
    )

    curve_points, speed_limits = split_point_speed_pairs(back_and_future)
    fit_curve = compute_fit(curve_points, detailed_config.curve_fit_method)

    # Sample the curve at roughly the resample step
    input_downtracks = compute_arc_lengths(curve_points)
    num_segments = max(
        int(np.ceil(input_downtracks[-1] / detailed_config.curve_resample_step_size)),
        MIN_FIT_POINTS,
    )
    params = np.linspace(0.0, 1.0, num_segments + 1)
    samples = fit_curve.evaluate(params)
    downtracks = compute_arc_lengths(samples)
    yaws = compute_tangent_orientations(fit_curve, params)

    curvatures = moving_average_filter(
        compute_curvatures(fit_curve, params), detailed_config.curvature_moving_average_window_size
    )

    # Input speeds are carried over by arc-length fraction
    fraction = downtracks / downtracks[-1]
    speeds = np.interp(fraction * input_downtracks[-1], input_downtracks, speed_limits)
    speeds = moving_average_filter(speeds, detailed_config.speed_moving_average_window_size)

    ideal_speeds = np.minimum(
        speeds, curvature_speed_limits(curvatures, detailed_config.lateral_accel_limit)
    )
    max_speed = detailed_config.max_speed if detailed_config.max_speed is not None else np.inf
    ideal_speeds = np.clip(ideal_speeds, detailed_config.minimum_speed, max_speed)

    optimized = optimize_speed(downtracks, ideal_speeds, detailed_config.max_accel)

    end = len(samples)
    if ending_state is not None:
        end = max(get_nearest_point_index(samples, ending_state) + 1, 2)
    stop = _first_stop_index(optimized[:end])
    if stop is not None:
        end = stop + 1

    samples, yaws, downtracks, optimized = (
        samples[:end],
        yaws[:end],
        downtracks[:end],
        optimized[:end],
    )
    times = speed_to_time(downtracks, optimized)

    trajectory = trajectory_from_points_times_orientations(
        samples, times, yaws, state_time, detailed_config.desired_controller_plugin
    )
    final_state = VehicleState(
        x=float(samples[-1][0]),
        y=float(samples[-1][1]),
        yaw=float(yaws[-1]),
        velocity=float(optimized[-1]),
    )

    logger.debug(
        f"Composed {len(trajectory)} points over {downtracks[-1]:.2f}m in {times[-1]:.2f}s"
    )
    return ComposedTrajectory(
        points=trajectory, committed_points=back_and_future, ending_state=final_state
    )


def compose_lanefollow_trajectory_from_path(
    points: Sequence[PointSpeedPair],
    state: VehicleState,
    state_time: float,
    detailed_config: DetailedTrajConfig,
    ending_state: VehicleState | None = None,
    previous_points: Sequence[PointSpeedPair] | None = None,
) -> ComposedTrajectory:
    """Fit, speed-optimize, stitch and stamp a lane following geometry.

    Args:
        points: Geometry profile points
        state: Current vehicle state
        state_time: Absolute time of the vehicle state [s]
        detailed_config: Kinematic limits and smoothing parameters
        ending_state: When given, points past its position (the buffer) are dropped
        previous_points: Points committed in the previous cycle, used as look-back source

    Returns:
        ComposedTrajectory
    """
    return _compose_trajectory(
        points, state, state_time, detailed_config, ending_state, previous_points
    )


def compose_lanechange_trajectory_from_path(
    points: Sequence[PointSpeedPair],
    state: VehicleState,
    state_time: float,
    ending_state: VehicleState,
    detailed_config: DetailedTrajConfig,
    previous_points: Sequence[PointSpeedPair] | None = None,
) -> ComposedTrajectory:
    """Fit, speed-optimize, stitch and stamp a lane change geometry.

    The terminal buffer beyond ending_state is trimmed, and the returned
    ending state reports the position, heading and speed expected when the
    lane change completes.
    """
    composed = _compose_trajectory(
        points, state, state_time, detailed_config, ending_state, previous_points
    )
    logger.info(
        f"Lane change trajectory: {len(composed)} points, "
        f"ends at ({composed.ending_state.x:.2f}, {composed.ending_state.y:.2f}) "
        f"with {composed.ending_state.velocity:.2f}m/s"
    )
    return composed
