"""Waypoint generation for lane following and lane change maneuvers."""

from basic_autonomy.config import (
    CurveFitMethod,
    DetailedTrajConfig,
    GeneralTrajConfig,
    TrajectoryType,
    WaypointGenerationConfig,
    compose_detailed_trajectory_config,
    compose_general_trajectory_config,
)
from basic_autonomy.curve import Curve, compute_curvature_at, compute_fit
from basic_autonomy.errors import (
    EmptyInputError,
    InvalidArgumentError,
    PlanningStatus,
    WaypointGenerationError,
)
from basic_autonomy.geometry import get_nearest_point_index, split_point_speed_pairs
from basic_autonomy.geometry_profile import (
    create_geometry_profile,
    create_lanechange_path,
    create_route_geom,
)
from basic_autonomy.planner import PlanningResult, WaypointGenerator
from basic_autonomy.road_network import Lanelet, RoadNetwork, RouteMap
from basic_autonomy.speed import optimize_speed
from basic_autonomy.stitching import attach_past_points, constrain_to_time_boundary
from basic_autonomy.trajectory import (
    compose_lanechange_trajectory_from_path,
    compose_lanefollow_trajectory_from_path,
    trajectory_from_points_times_orientations,
)
from basic_autonomy.types import (
    ComposedTrajectory,
    GeometryProfile,
    Maneuver,
    ManeuverType,
    PointSpeedPair,
    TrajectoryPoint,
    VehicleState,
)

__all__ = [
    "ComposedTrajectory",
    "Curve",
    "CurveFitMethod",
    "DetailedTrajConfig",
    "EmptyInputError",
    "GeneralTrajConfig",
    "GeometryProfile",
    "InvalidArgumentError",
    "Lanelet",
    "Maneuver",
    "ManeuverType",
    "PlanningResult",
    "PlanningStatus",
    "PointSpeedPair",
    "RoadNetwork",
    "RouteMap",
    "TrajectoryPoint",
    "TrajectoryType",
    "VehicleState",
    "WaypointGenerationConfig",
    "WaypointGenerationError",
    "WaypointGenerator",
    "attach_past_points",
    "compose_detailed_trajectory_config",
    "compose_general_trajectory_config",
    "compose_lanechange_trajectory_from_path",
    "compose_lanefollow_trajectory_from_path",
    "compute_curvature_at",
    "compute_fit",
    "constrain_to_time_boundary",
    "create_geometry_profile",
    "create_lanechange_path",
    "create_route_geom",
    "get_nearest_point_index",
    "optimize_speed",
    "split_point_speed_pairs",
    "trajectory_from_points_times_orientations",
]
