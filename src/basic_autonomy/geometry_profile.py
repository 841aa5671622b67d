"""Raw point/speed extraction from maneuvers over a road network."""

import logging
from collections.abc import Sequence
from typing import Literal

import numpy as np

from basic_autonomy.config import DetailedTrajConfig, GeneralTrajConfig, TrajectoryType
from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.geometry import (
    compute_arc_lengths,
    distance,
    downsample,
    get_nearest_index_by_downtrack,
    headings_from_points,
    remove_consecutive_duplicates,
)
from basic_autonomy.road_network import Lanelet, RoadNetwork
from basic_autonomy.types import (
    GeometryProfile,
    Maneuver,
    ManeuverType,
    Point,
    PointSpeedPair,
    VehicleState,
)

logger = logging.getLogger(__name__)

ROUTE_SAMPLE_SPACING = 1.0  # [m]
LANELET_CONNECTION_TOLERANCE = 0.1  # [m]
DOWNTRACK_TOLERANCE = 1e-6  # [m]

_ALLOWED_MANEUVERS = {
    TrajectoryType.INLANECRUISING: {ManeuverType.LANE_FOLLOWING},
    TrajectoryType.COOPERATIVE_LANECHANGE: {ManeuverType.LANE_FOLLOWING, ManeuverType.LANE_CHANGE},
}


def _blend_weights(fractions: np.ndarray, blend: str) -> np.ndarray:
    if blend == "smoothstep":
        return fractions * fractions * (3 - 2 * fractions)
    return fractions


def _resample_polyline(points: Sequence[Point], count: int) -> np.ndarray:
    """Resample a polyline to count points evenly spaced by arc length."""
    xy = np.asarray(points, dtype=float)
    s = compute_arc_lengths(xy)
    targets = np.linspace(0.0, s[-1], count)
    return np.column_stack((np.interp(targets, s, xy[:, 0]), np.interp(targets, s, xy[:, 1])))


def _extend_without_duplicate(geometry: list, segment: Sequence, key=lambda p: p) -> None:
    items = list(segment)
    if geometry and items and distance(key(geometry[-1]), key(items[0])) <= DOWNTRACK_TOLERANCE:
        items = items[1:]
    geometry.extend(items)


def _find_lanelet_index(path: Sequence[Lanelet], lanelet_id: int) -> int:
    for i, lanelet in enumerate(path):
        if lanelet.id == lanelet_id:
            return i
    raise InvalidArgumentError(f"Lanelet {lanelet_id} is not on the route")


def _is_connected(previous: Lanelet, following: Lanelet) -> bool:
    return (
        distance(previous.centerline[-1], following.centerline[0]) <= LANELET_CONNECTION_TOLERANCE
    )


def create_lanechange_path(
    start_lanelet: Lanelet,
    end_lanelet: Lanelet,
    blend: Literal["linear", "smoothstep"] = "linear",
) -> list[Point]:
    """Blend two adjacent centerlines into a lane change path.

    Both centerlines are resampled to a common point count. Point i moves
    from the start centerline towards the destination centerline with weight
    w(i / (n - 1)), so the path begins at the start centerline's first point
    and ends at the destination centerline's last point.

    Args:
        start_lanelet: Lanelet the vehicle leaves
        end_lanelet: Adjacent lanelet the vehicle enters
        blend: Weight profile, linear or smoothstep

    Returns:
        Lane change path points
    """
    count = max(len(start_lanelet.centerline), len(end_lanelet.centerline))
    start_line = _resample_polyline(start_lanelet.centerline, count)
    end_line = _resample_polyline(end_lanelet.centerline, count)

    w = _blend_weights(np.linspace(0.0, 1.0, count), blend)[:, np.newaxis]
    path = (1.0 - w) * start_line + w * end_line
    return [(float(x), float(y)) for x, y in path]


def _clip_to_downtracks(
    lanelet: Lanelet,
    starting_downtrack: float,
    ending_downtrack: float,
    road_network: RoadNetwork,
) -> Lanelet:
    """Cut a lanelet's centerline to a downtrack range, interpolating both ends."""
    xy = np.asarray(road_network.centerline_of(lanelet), dtype=float)
    d = np.maximum.accumulate([road_network.downtrack_at((x, y)) for x, y in xy])
    lo = max(starting_downtrack, d[0])
    hi = min(ending_downtrack, d[-1])
    if hi <= lo:
        return lanelet

    targets = np.concatenate(([lo], d[(d > lo) & (d < hi)], [hi]))
    clipped = np.column_stack((np.interp(targets, d, xy[:, 0]), np.interp(targets, d, xy[:, 1])))
    return Lanelet.from_points(
        lanelet.id,
        remove_consecutive_duplicates([(x, y) for x, y in clipped]),
        lanelet.turn_direction,
    )


def _collect_route_geom(
    starting_downtrack: float,
    starting_lane_id: int,
    ending_downtrack: float,
    road_network: RoadNetwork,
    blend: Literal["linear", "smoothstep"],
    allow_lane_change: bool,
) -> list[Point]:
    path = road_network.shortest_path()
    start_idx = _find_lanelet_index(path, starting_lane_id)

    span: list[Lanelet] = []
    for lanelet in path[start_idx:]:
        centerline = road_network.centerline_of(lanelet)
        if span and road_network.downtrack_at(centerline[0]) >= ending_downtrack:
            break
        if span and not allow_lane_change and not _is_connected(span[-1], lanelet):
            break
        span.append(lanelet)

    geometry: list[Point] = []
    i = 0
    while i < len(span):
        current = span[i]
        nxt = span[i + 1] if i + 1 < len(span) else None
        if nxt is not None and not _is_connected(current, nxt):
            logger.debug(f"Bridging lanelet {current.id} to adjacent lanelet {nxt.id}")
            # The lane change completes within the requested downtrack range
            bridge = create_lanechange_path(
                _clip_to_downtracks(current, starting_downtrack, ending_downtrack, road_network),
                _clip_to_downtracks(nxt, starting_downtrack, ending_downtrack, road_network),
                blend,
            )
            _extend_without_duplicate(geometry, bridge)
            i += 2
        else:
            _extend_without_duplicate(geometry, road_network.centerline_of(current))
            i += 1

    return [
        p
        for p in geometry
        if starting_downtrack - DOWNTRACK_TOLERANCE
        <= road_network.downtrack_at(p)
        <= ending_downtrack + DOWNTRACK_TOLERANCE
    ]


def create_route_geom(
    starting_downtrack: float,
    starting_lane_id: int,
    ending_downtrack: float,
    road_network: RoadNetwork,
    blend: Literal["linear", "smoothstep"] = "linear",
    allow_lane_change: bool = True,
) -> list[Point]:
    """Geometry along the route between two downtracks, starting in a given lane.

    Lanelets are taken from the shortest path beginning at starting_lane_id
    until one starts at or after ending_downtrack. Connected lanelets
    contribute their centerlines; a lanelet followed by a laterally adjacent
    one is replaced by the lane change path between them, blended over the
    part of both lanelets inside the downtrack range. Without
    allow_lane_change the span ends at the first lanelet that is not
    connected to its predecessor.

    Raises:
        InvalidArgumentError: If the lane is not on the route or no point lies in range
    """
    clipped = _collect_route_geom(
        starting_downtrack,
        starting_lane_id,
        ending_downtrack,
        road_network,
        blend,
        allow_lane_change,
    )
    if not clipped:
        raise InvalidArgumentError(
            f"No route geometry between downtracks {starting_downtrack:.2f} "
            f"and {ending_downtrack:.2f} from lanelet {starting_lane_id}"
        )
    return clipped


def _sample_reference_line(
    starting_downtrack: float, ending_downtrack: float, road_network: RoadNetwork
) -> list[Point]:
    downtracks = np.arange(starting_downtrack, ending_downtrack, ROUTE_SAMPLE_SPACING)
    downtracks = np.append(downtracks, ending_downtrack)
    samples = [road_network.point_at_downtrack(float(d)) for d in downtracks]
    return remove_consecutive_duplicates(samples)


def create_lanefollow_geometry(
    lane_id: int | None,
    starting_downtrack: float,
    ending_downtrack: float,
    road_network: RoadNetwork,
    general_config: GeneralTrajConfig,
) -> list[Point]:
    """Points for a lane following maneuver.

    Follows lane_id and its connected successors when a lane is given, the
    route reference line otherwise.
    """
    ratio = general_config.default_downsample_ratio
    if lane_id is None:
        geometry = _sample_reference_line(starting_downtrack, ending_downtrack, road_network)
    else:
        path = road_network.shortest_path()
        if path[_find_lanelet_index(path, lane_id)].is_turn:
            ratio = general_config.turn_downsample_ratio
        geometry = create_route_geom(
            starting_downtrack,
            lane_id,
            ending_downtrack,
            road_network,
            allow_lane_change=False,
        )
    return downsample(geometry, ratio)


def create_lanechange_geometry(
    maneuver: Maneuver,
    starting_downtrack: float,
    ending_downtrack: float,
    road_network: RoadNetwork,
    general_config: GeneralTrajConfig,
    blend: Literal["linear", "smoothstep"] = "linear",
) -> list[Point]:
    """Points for a lane change maneuver bridging the starting and ending lanes.

    The lane change completes at the maneuver's end_dist; geometry requested
    beyond it (the terminal buffer) continues in the destination lane.
    """
    if maneuver.starting_lane_id is None or maneuver.ending_lane_id is None:
        raise InvalidArgumentError("Lane change maneuver requires starting and ending lane ids")

    path = road_network.shortest_path()
    start_idx = _find_lanelet_index(path, maneuver.starting_lane_id)
    if _find_lanelet_index(path, maneuver.ending_lane_id) <= start_idx:
        raise InvalidArgumentError(
            f"Ending lanelet {maneuver.ending_lane_id} does not follow "
            f"starting lanelet {maneuver.starting_lane_id} on the route"
        )

    lanechange_end = min(maneuver.end_dist, ending_downtrack)
    geometry = create_route_geom(
        starting_downtrack,
        maneuver.starting_lane_id,
        lanechange_end,
        road_network,
        blend,
    )
    if ending_downtrack > lanechange_end + DOWNTRACK_TOLERANCE:
        buffer = _collect_route_geom(
            lanechange_end,
            maneuver.ending_lane_id,
            ending_downtrack,
            road_network,
            blend,
            allow_lane_change=False,
        )
        _extend_without_duplicate(geometry, buffer)
    return downsample(geometry, general_config.default_downsample_ratio)


def _target_speeds(
    geometry: Sequence[Point], maneuver: Maneuver, road_network: RoadNetwork
) -> np.ndarray:
    downtracks = np.array([road_network.downtrack_at(p) for p in geometry])
    span = maneuver.end_dist - maneuver.start_dist
    if span <= 0:
        fraction = np.ones_like(downtracks)
    else:
        fraction = np.clip((downtracks - maneuver.start_dist) / span, 0.0, 1.0)
    return maneuver.start_speed + fraction * (maneuver.end_speed - maneuver.start_speed)


def _ending_state_before_buffer(
    geometry: Sequence[Point], maneuver: Maneuver, road_network: RoadNetwork
) -> VehicleState:
    downtracks = [road_network.downtrack_at(p) for p in geometry]
    idx = get_nearest_index_by_downtrack(downtracks, maneuver.end_dist)
    yaw = headings_from_points(geometry)[idx]
    x, y = geometry[idx]
    return VehicleState(x=x, y=y, yaw=float(yaw), velocity=maneuver.end_speed)


def create_geometry_profile(
    maneuvers: Sequence[Maneuver],
    max_starting_downtrack: float,
    road_network: RoadNetwork,
    state: VehicleState,
    general_config: GeneralTrajConfig,
    detailed_config: DetailedTrajConfig,
) -> GeometryProfile:
    """Convert maneuvers into ordered point/speed pairs.

    Args:
        maneuvers: Maneuvers in execution order
        max_starting_downtrack: Upper bound for the first maneuver's start [m]
        road_network: Road network collaborator
        state: Current vehicle state; its speed becomes the final point's speed
        general_config: Trajectory category and downsampling
        detailed_config: Kinematic limits, buffer and blending

    Returns:
        GeometryProfile with the points and the expected state at the end of
        the last maneuver (before the buffer)

    Raises:
        InvalidArgumentError: If maneuvers is empty, a maneuver type does not fit
            the trajectory type, or lanes cannot be resolved
    """
    if len(maneuvers) == 0:
        raise InvalidArgumentError("At least one maneuver is required")

    allowed = _ALLOWED_MANEUVERS[general_config.trajectory_type]
    for maneuver in maneuvers:
        if maneuver.type not in allowed:
            raise InvalidArgumentError(
                f"{maneuver.type.value} maneuver is not supported for "
                f"{general_config.trajectory_type.value} trajectories"
            )

    points: list[PointSpeedPair] = []
    ending_state = state
    # Lane the previous maneuver left the vehicle in
    current_lane_id: int | None = None
    for i, maneuver in enumerate(maneuvers):
        is_last = i == len(maneuvers) - 1
        starting_downtrack = (
            min(maneuver.start_dist, max_starting_downtrack) if i == 0 else maneuver.start_dist
        )
        ending_downtrack = maneuver.end_dist
        if is_last:
            ending_downtrack += detailed_config.buffer_ending_downtrack

        if maneuver.type == ManeuverType.LANE_CHANGE:
            geometry = create_lanechange_geometry(
                maneuver,
                starting_downtrack,
                ending_downtrack,
                road_network,
                general_config,
                detailed_config.lanechange_blend,
            )
            current_lane_id = maneuver.ending_lane_id
        else:
            if maneuver.starting_lane_id is not None:
                current_lane_id = maneuver.starting_lane_id
            geometry = create_lanefollow_geometry(
                current_lane_id,
                starting_downtrack,
                ending_downtrack,
                road_network,
                general_config,
            )

        speeds = _target_speeds(geometry, maneuver, road_network)
        segment = [PointSpeedPair(point=p, speed=float(v)) for p, v in zip(geometry, speeds)]
        _extend_without_duplicate(points, segment, key=lambda pair: pair.point)

        if is_last:
            ending_state = _ending_state_before_buffer(geometry, maneuver, road_network)

        logger.debug(
            f"Maneuver {i} ({maneuver.type.value}) "
            f"[{starting_downtrack:.2f}, {ending_downtrack:.2f}] -> {len(geometry)} points"
        )

    points[-1] = PointSpeedPair(point=points[-1].point, speed=state.velocity)
    return GeometryProfile(points=points, ending_state=ending_state)
