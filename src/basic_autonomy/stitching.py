"""Time windowing and continuity stitching of point/speed sequences."""

import logging
from collections.abc import Sequence

from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.geometry import distance
from basic_autonomy.types import PointSpeedPair

logger = logging.getLogger(__name__)


def constrain_to_time_boundary(
    points: Sequence[PointSpeedPair], max_time: float
) -> list[PointSpeedPair]:
    """Keep the prefix of points reachable strictly before max_time.

    Each segment takes segment_length / speed of its trailing point. A point
    with zero speed cannot be reached, so it and everything after it is cut.

    Args:
        points: Ordered point/speed pairs
        max_time: Time budget [s]

    Returns:
        Prefix of points whose cumulative time is below max_time
    """
    if len(points) == 0 or max_time <= 0:
        return []

    result = [points[0]]
    total_time = 0.0
    for prev, cur in zip(points, points[1:], strict=False):
        if cur.speed <= 0.0:
            break
        total_time += distance(prev.point, cur.point) / cur.speed
        if total_time >= max_time:
            break
        result.append(cur)

    logger.debug(f"Time boundary {max_time:.2f}s kept {len(result)}/{len(points)} points")
    return result


def attach_past_points(
    points_set: Sequence[PointSpeedPair],
    future_points: Sequence[PointSpeedPair],
    nearest_pt_index: int,
    back_distance: float,
) -> list[PointSpeedPair]:
    """Prepend already-driven points to the points ahead of the vehicle.

    Walks back from nearest_pt_index and keeps every earlier point of
    points_set within back_distance (measured along the polyline), then
    appends future_points. A first future point that repeats the last past
    point is dropped.

    Args:
        points_set: Sequence supplying the past points
        future_points: Points ahead of the vehicle
        nearest_pt_index: Index in points_set nearest the vehicle
        back_distance: Look-back distance [m]

    Returns:
        Past points followed by future points
    """
    if not 0 <= nearest_pt_index < len(points_set):
        raise InvalidArgumentError(
            f"nearest_pt_index {nearest_pt_index} out of range for {len(points_set)} points"
        )

    min_i = nearest_pt_index
    total_dist = 0.0
    for i in range(nearest_pt_index, 0, -1):
        total_dist += distance(points_set[i].point, points_set[i - 1].point)
        if total_dist > back_distance:
            break
        min_i = i - 1

    back_and_future = list(points_set[min_i : nearest_pt_index + 1])
    future = list(future_points)
    if future and distance(future[0].point, back_and_future[-1].point) == 0.0:
        future = future[1:]
    back_and_future.extend(future)
    return back_and_future
