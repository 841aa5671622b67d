"""Waypoint generation data types."""

from dataclasses import dataclass, field
from enum import Enum

Point = tuple[float, float]

DEFAULT_CONTROLLER_PLUGIN = "default"


@dataclass(frozen=True)
class PointSpeedPair:
    """A position on the intended path with its target speed."""

    point: Point  # (x, y) [m]
    speed: float  # target speed [m/s]


@dataclass(frozen=True)
class TrajectoryPoint:
    """One time-stamped point of the trajectory handed to the controller."""

    x: float  # X座標 [m]
    y: float  # Y座標 [m]
    yaw: float  # ヨー角 [rad]
    target_time: float  # 到達時刻 [s]
    controller_plugin_name: str = DEFAULT_CONTROLLER_PLUGIN


@dataclass(frozen=True)
class VehicleState:
    """Vehicle state snapshot taken at the start of a planning cycle."""

    x: float  # X座標 [m]
    y: float  # Y座標 [m]
    yaw: float = 0.0  # ヨー角 [rad]
    velocity: float = 0.0  # 縦方向速度 [m/s]

    @property
    def position(self) -> Point:
        """Position as an (x, y) tuple."""
        return (self.x, self.y)


class ManeuverType(Enum):
    """Maneuver categories understood by the waypoint generator."""

    LANE_FOLLOWING = "lane_following"
    LANE_CHANGE = "lane_change"


@dataclass(frozen=True)
class Maneuver:
    """Planner-issued maneuver with downtrack, speed and time bounds.

    Lane ids are required for lane changes. For lane following they are
    optional and, when given, pin the geometry to that lane's centerline.
    """

    type: ManeuverType
    start_dist: float
    end_dist: float
    start_speed: float
    end_speed: float
    start_time: float = 0.0
    end_time: float = 0.0
    starting_lane_id: int | None = None
    ending_lane_id: int | None = None


@dataclass
class GeometryProfile:
    """Raw point/speed samples for a maneuver plan."""

    points: list[PointSpeedPair]
    ending_state: VehicleState  # expected state at maneuver end, before the buffer


@dataclass
class ComposedTrajectory:
    """Result of composing a trajectory from a geometry profile."""

    points: list[TrajectoryPoint]
    committed_points: list[PointSpeedPair] = field(default_factory=list)
    ending_state: VehicleState | None = None

    def __len__(self) -> int:
        """Number of trajectory points."""
        return len(self.points)
