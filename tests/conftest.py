import numpy as np
import pytest
from basic_autonomy.config import (
    compose_detailed_trajectory_config,
    compose_general_trajectory_config,
)
from basic_autonomy.road_network import Lanelet, RouteMap

LANE_WIDTH = 3.7


def create_straight_lanelet(lanelet_id, length=50.0, step=5.0, y=0.0, x0=0.0):
    xs = np.arange(x0, x0 + length + step / 2, step)
    return Lanelet.from_points(lanelet_id, [(x, y) for x in xs])


def create_left_turn_lanelet(lanelet_id, start=(50.0, 0.0), radius=20.0, steps=10):
    theta = np.linspace(0.0, np.pi / 2, steps + 1)
    x = start[0] + radius * np.sin(theta)
    y = start[1] + radius * (1 - np.cos(theta))
    return Lanelet.from_points(lanelet_id, np.column_stack((x, y)), turn_direction="left")


@pytest.fixture
def two_lane_route():
    """Lanelet 106 and its left neighbour 111, route changes lanes."""
    start = create_straight_lanelet(106)
    end = create_straight_lanelet(111, y=LANE_WIDTH)
    return RouteMap([start, end])


@pytest.fixture
def lanechange_then_follow_route():
    """Lanelet 1 with left neighbour 2, which continues into lanelet 3."""
    return RouteMap(
        [
            create_straight_lanelet(1),
            create_straight_lanelet(2, y=LANE_WIDTH),
            create_straight_lanelet(3, y=LANE_WIDTH, x0=50.0),
        ]
    )


@pytest.fixture
def straight_route():
    return RouteMap([create_straight_lanelet(1, length=100.0, step=10.0)])


@pytest.fixture
def turning_route():
    return RouteMap([create_straight_lanelet(1), create_left_turn_lanelet(2)])


@pytest.fixture
def lanechange_general_config():
    return compose_general_trajectory_config("cooperative_lanechange", 1, 1)


@pytest.fixture
def cruising_general_config():
    return compose_general_trajectory_config("inlanecruising", 2, 1)


@pytest.fixture
def detailed_config():
    return compose_detailed_trajectory_config(6.0, 1.0, 2.2352, 1.5, 1.5, 5, 9, 5.0, 20.0)
