import logging

import numpy as np
import pytest
from basic_autonomy.errors import PlanningStatus
from basic_autonomy.planner import WaypointGenerator
from basic_autonomy.types import Maneuver, ManeuverType, VehicleState


def create_lanefollow_maneuver(end_dist=60.0, speed=10.0):
    return Maneuver(
        type=ManeuverType.LANE_FOLLOWING,
        start_dist=0.0,
        end_dist=end_dist,
        start_speed=speed,
        end_speed=speed,
    )


@pytest.fixture
def cruising_generator(straight_route, cruising_general_config, detailed_config):
    return WaypointGenerator(straight_route, cruising_general_config, detailed_config)


def test_plan_lanefollow(cruising_generator):
    state = VehicleState(x=0.0, y=0.0, velocity=10.0)

    result = cruising_generator.plan([create_lanefollow_maneuver()], state, 5.0)

    assert result.ok
    assert result.status == PlanningStatus.SUCCESS
    assert result.error is None
    assert len(result.trajectory) > 2
    times = np.array([p.target_time for p in result.trajectory])
    assert times[0] == pytest.approx(5.0)
    assert np.all(np.diff(times) > 0)
    assert result.trajectory[-1].x <= 60.0 + 1e-6
    assert result.committed_points[0].point == pytest.approx((0.0, 0.0))


def test_replan_stitches_previous_points(cruising_generator):
    maneuvers = [create_lanefollow_maneuver()]
    first = cruising_generator.plan(maneuvers, VehicleState(x=0.0, y=0.0, velocity=10.0), 0.0)

    second = cruising_generator.plan(
        maneuvers,
        VehicleState(x=10.0, y=0.0, velocity=10.0),
        1.0,
        previous_points=first.committed_points,
    )

    assert second.ok
    # back_distance 5m behind x=10 on the 2m spaced profile
    assert second.committed_points[0].point == pytest.approx((6.0, 0.0))
    assert second.committed_points[0] in first.committed_points
    assert second.trajectory[0].x == pytest.approx(6.0)


def test_plan_lanechange(two_lane_route, lanechange_general_config, detailed_config):
    generator = WaypointGenerator(two_lane_route, lanechange_general_config, detailed_config)
    maneuver = Maneuver(
        type=ManeuverType.LANE_CHANGE,
        start_dist=0.0,
        end_dist=50.0,
        start_speed=5.0,
        end_speed=25.0,
        starting_lane_id=106,
        ending_lane_id=111,
    )

    result = generator.plan([maneuver], VehicleState(x=0.0, y=0.0, velocity=8.0), 0.0)

    assert result.ok
    assert result.trajectory[0].y == pytest.approx(0.0, abs=1e-6)
    assert result.trajectory[-1].y > 0.0
    assert result.ending_state is not None


def test_plan_lanechange_then_lanefollow(
    lanechange_then_follow_route, lanechange_general_config, detailed_config
):
    generator = WaypointGenerator(
        lanechange_then_follow_route, lanechange_general_config, detailed_config
    )
    maneuvers = [
        Maneuver(
            type=ManeuverType.LANE_CHANGE,
            start_dist=0.0,
            end_dist=30.0,
            start_speed=5.0,
            end_speed=10.0,
            starting_lane_id=1,
            ending_lane_id=2,
        ),
        create_lanefollow_maneuver(end_dist=80.0),
    ]

    result = generator.plan(maneuvers, VehicleState(x=0.0, y=0.0, velocity=8.0), 0.0)

    assert result.ok
    xs = np.array([p.x for p in result.trajectory])
    ys = np.array([p.y for p in result.trajectory])
    assert np.all(np.hypot(np.diff(xs), np.diff(ys)) < 1.5)
    # Past the lane change the trajectory stays on the destination lane
    settled = xs >= 40.0
    assert np.any(settled)
    np.testing.assert_allclose(ys[settled], 3.7, atol=0.2)


def test_plan_reports_invalid_arguments(cruising_generator, caplog):
    state = VehicleState(x=0.0, y=0.0, velocity=10.0)
    lane_change = Maneuver(
        type=ManeuverType.LANE_CHANGE,
        start_dist=0.0,
        end_dist=50.0,
        start_speed=5.0,
        end_speed=5.0,
        starting_lane_id=1,
        ending_lane_id=2,
    )

    with caplog.at_level(logging.WARNING, logger="basic_autonomy.planner"):
        empty = cruising_generator.plan([], state, 0.0)
        unsupported = cruising_generator.plan([lane_change], state, 0.0)

    for result in (empty, unsupported):
        assert not result.ok
        assert result.status == PlanningStatus.INVALID_ARGUMENT
        assert result.trajectory == []
        assert result.error
    assert "invalid argument" in caplog.text


def test_plan_reports_unknown_lane(cruising_generator):
    maneuver = Maneuver(
        type=ManeuverType.LANE_FOLLOWING,
        start_dist=0.0,
        end_dist=50.0,
        start_speed=5.0,
        end_speed=5.0,
        starting_lane_id=42,
    )

    result = cruising_generator.plan([maneuver], VehicleState(x=0.0, y=0.0), 0.0)

    assert result.status == PlanningStatus.INVALID_ARGUMENT
