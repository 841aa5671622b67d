"""Road network interface and an in-memory route implementation using Shapely."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint

from basic_autonomy.errors import InvalidArgumentError
from basic_autonomy.types import Point

EXTENSION_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Lanelet:
    """Directed lane segment with its centerline."""

    id: int
    centerline: tuple[Point, ...]
    turn_direction: str | None = None  # "left" / "right" for turn lanelets

    @classmethod
    def from_points(
        cls, lanelet_id: int, points: Sequence[Point] | np.ndarray, turn_direction: str | None = None
    ) -> "Lanelet":
        """Build a lanelet from any sequence of (x, y) points."""
        centerline = tuple((float(p[0]), float(p[1])) for p in points)
        return cls(id=lanelet_id, centerline=centerline, turn_direction=turn_direction)

    @property
    def is_turn(self) -> bool:
        return self.turn_direction in ("left", "right")


class RoadNetwork(Protocol):
    """Read-only road network queries used by the waypoint generator."""

    def point_at_downtrack(self, downtrack: float) -> Point: ...

    def downtrack_at(self, point: Point) -> float: ...

    def centerline_of(self, lanelet: Lanelet) -> list[Point]: ...

    def shortest_path(self) -> list[Lanelet]: ...


class RouteMap:
    """Route made of lanelets in travel order.

    Downtracks are measured along a reference line that follows the first
    lanelet's centerline and is extended by every later centerline point
    lying ahead of its current end. Laterally adjacent lanelets therefore
    share the same downtrack range.
    """

    def __init__(self, lanelets: Sequence[Lanelet]) -> None:
        """Initialize RouteMap.

        Args:
            lanelets: Shortest path lanelets in travel order

        Raises:
            InvalidArgumentError: If the route is empty or a centerline is too short
        """
        if len(lanelets) == 0:
            raise InvalidArgumentError("Route must contain at least one lanelet")
        for lanelet in lanelets:
            if len(lanelet.centerline) < 2:
                raise InvalidArgumentError(
                    f"Lanelet {lanelet.id} centerline needs at least 2 points"
                )

        self._lanelets = list(lanelets)
        self._reference = LineString(self._build_reference_coords())

    def _build_reference_coords(self) -> list[Point]:
        coords = list(self._lanelets[0].centerline)
        for lanelet in self._lanelets[1:]:
            for p in lanelet.centerline:
                # Direction of the last reference segment
                (x0, y0), (x1, y1) = coords[-2], coords[-1]
                seg_len = np.hypot(x1 - x0, y1 - y0)
                if seg_len < EXTENSION_TOLERANCE:
                    continue
                ahead = ((p[0] - x1) * (x1 - x0) + (p[1] - y1) * (y1 - y0)) / seg_len
                if ahead > EXTENSION_TOLERANCE:
                    coords.append(p)
        return coords

    @property
    def length(self) -> float:
        """Length of the reference line [m]."""
        return float(self._reference.length)

    def point_at_downtrack(self, downtrack: float) -> Point:
        """Point on the reference line at downtrack (clamped to the route)."""
        p = self._reference.interpolate(downtrack)
        return (p.x, p.y)

    def downtrack_at(self, point: Point) -> float:
        """Downtrack of the projection of point onto the reference line."""
        return float(self._reference.project(ShapelyPoint(point[0], point[1])))

    def centerline_of(self, lanelet: Lanelet) -> list[Point]:
        return list(lanelet.centerline)

    def shortest_path(self) -> list[Lanelet]:
        return list(self._lanelets)
