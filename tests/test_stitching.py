import pytest
from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.stitching import attach_past_points, constrain_to_time_boundary
from basic_autonomy.types import PointSpeedPair


def create_line_pairs(count, speed=1.0):
    return [PointSpeedPair(point=(float(x), 0.0), speed=speed) for x in range(count)]


@pytest.fixture
def stitch_points():
    points = [PointSpeedPair(point=(float(i), float(i + 1)), speed=1.0) for i in range(6)]
    future_points = points[3:]
    return points, future_points


def test_constrain_to_time_boundary():
    points = create_line_pairs(8)

    time_bound_points = constrain_to_time_boundary(points, 6.0)

    assert len(time_bound_points) == 6
    for i, p in enumerate(time_bound_points):
        assert p.point == pytest.approx((float(i), 0.0))
        assert p.speed == pytest.approx(1.0)


def test_constrain_to_time_boundary_never_grows():
    points = create_line_pairs(4, speed=10.0)
    assert constrain_to_time_boundary(points, 100.0) == points
    assert constrain_to_time_boundary([], 1.0) == []


def test_constrain_to_time_boundary_stops_at_zero_speed():
    points = create_line_pairs(5)
    points[3] = PointSpeedPair(point=points[3].point, speed=0.0)

    assert len(constrain_to_time_boundary(points, 100.0)) == 3


def test_attach_past_points(stitch_points):
    points, future_points = stitch_points

    result = attach_past_points(points, future_points, 2, 1.5)

    assert len(result) == len(points) - 1
    assert [p.point for p in result] == [(1.0, 2.0), (2.0, 3.0), (3.0, 4.0), (4.0, 5.0), (5.0, 6.0)]
    for prev, cur in zip(result, result[1:]):
        assert prev.point != cur.point


def test_attach_past_points_drops_duplicated_boundary(stitch_points):
    points, _ = stitch_points

    # Future tail starting at the nearest point itself
    result = attach_past_points(points, points[2:], 2, 1.5)

    assert [p.point for p in result] == [(1.0, 2.0), (2.0, 3.0), (3.0, 4.0), (4.0, 5.0), (5.0, 6.0)]


def test_attach_past_points_back_distance_bounds(stitch_points):
    points, future_points = stitch_points

    assert attach_past_points(points, future_points, 2, 0.0)[0].point == (2.0, 3.0)
    assert attach_past_points(points, future_points, 2, 100.0)[0].point == (0.0, 1.0)


def test_attach_past_points_rejects_bad_index(stitch_points):
    points, future_points = stitch_points

    with pytest.raises(InvalidArgumentError):
        attach_past_points(points, future_points, 6, 1.5)
