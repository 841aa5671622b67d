"""Planning cycle facade for waypoint generation."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from basic_autonomy.config import DetailedTrajConfig, GeneralTrajConfig
from basic_autonomy.errors import EmptyInputError, InvalidArgumentError, PlanningStatus
from basic_autonomy.geometry_profile import create_geometry_profile
from basic_autonomy.road_network import RoadNetwork
from basic_autonomy.trajectory import (
    compose_lanechange_trajectory_from_path,
    compose_lanefollow_trajectory_from_path,
)
from basic_autonomy.types import (
    Maneuver,
    ManeuverType,
    PointSpeedPair,
    TrajectoryPoint,
    VehicleState,
)

logger = logging.getLogger(__name__)


@dataclass
class PlanningResult:
    """Outcome of one planning cycle.

    On failure the trajectory is empty and the caller keeps its previous
    trajectory or commands a stop.
    """

    status: PlanningStatus
    trajectory: list[TrajectoryPoint] = field(default_factory=list)
    committed_points: list[PointSpeedPair] = field(default_factory=list)
    ending_state: VehicleState | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == PlanningStatus.SUCCESS


class WaypointGenerator:
    """Turns maneuver plans into time-stamped trajectories."""

    def __init__(
        self,
        road_network: RoadNetwork,
        general_config: GeneralTrajConfig,
        detailed_config: DetailedTrajConfig,
    ):
        """Initialize WaypointGenerator.

        Args:
            road_network: Road network collaborator
            general_config: Trajectory category and downsampling
            detailed_config: Kinematic limits and smoothing parameters
        """
        self.road_network = road_network
        self.general_config = general_config
        self.detailed_config = detailed_config

    def plan(
        self,
        maneuvers: Sequence[Maneuver],
        state: VehicleState,
        state_time: float,
        previous_points: Sequence[PointSpeedPair] | None = None,
    ) -> PlanningResult:
        """Generate a trajectory for the maneuvers.

        Args:
            maneuvers: Maneuvers in execution order
            state: Current vehicle state
            state_time: Absolute time of the vehicle state [s]
            previous_points: committed_points of the previous cycle's result

        Returns:
            PlanningResult; failures are reported through its status
        """
        try:
            starting_downtrack = self.road_network.downtrack_at(state.position)
            profile = create_geometry_profile(
                maneuvers,
                starting_downtrack,
                self.road_network,
                state,
                self.general_config,
                self.detailed_config,
            )
            if any(m.type == ManeuverType.LANE_CHANGE for m in maneuvers):
                composed = compose_lanechange_trajectory_from_path(
                    profile.points,
                    state,
                    state_time,
                    profile.ending_state,
                    self.detailed_config,
                    previous_points,
                )
            else:
                composed = compose_lanefollow_trajectory_from_path(
                    profile.points,
                    state,
                    state_time,
                    self.detailed_config,
                    profile.ending_state,
                    previous_points,
                )
        except InvalidArgumentError as e:
            logger.warning(f"Planning failed with invalid argument: {e}")
            return PlanningResult(status=PlanningStatus.INVALID_ARGUMENT, error=str(e))
        except EmptyInputError as e:
            logger.warning(f"Planning failed with empty input: {e}")
            return PlanningResult(status=PlanningStatus.EMPTY_INPUT, error=str(e))

        logger.info(
            f"Planned {len(composed)} points for {len(maneuvers)} maneuvers "
            f"from downtrack {starting_downtrack:.2f}"
        )
        return PlanningResult(
            status=PlanningStatus.SUCCESS,
            trajectory=composed.points,
            committed_points=composed.committed_points,
            ending_state=composed.ending_state,
        )
