"""Route - Canonical route representation and the request that produces it.

Route is independent of the provider response shape; RouteResponseParser
converts every supported encoding into it. RouteRequest is built fresh for
each build and never retained.
"""

from dataclasses import dataclass, field

from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.point import Point


@dataclass(frozen=True)
class Route:
    """A walking route from start to end.

    Attributes:
        geometry: Path points in travel order (start -> end)
        distance_m: Total distance in meters
        duration_s: Total duration in seconds
    """

    geometry: tuple[Point, ...]
    distance_m: float
    duration_s: float

    @property
    def start(self) -> Point:
        return self.geometry[0]

    @property
    def end(self) -> Point:
        return self.geometry[-1]

    def to_geojson_line(self) -> dict:
        """GeoJSON LineString geometry in [lng, lat] order."""
        return {
            "type": "LineString",
            "coordinates": [p.lng_lat for p in self.geometry],
        }

    def __repr__(self) -> str:
        return f"Route({len(self.geometry)} points, {self.distance_m:.0f}m, {self.duration_s:.0f}s)"


@dataclass(frozen=True)
class RouteRequest:
    """Inputs of one route build.

    Attributes:
        start: Start point (A)
        end: End point (B)
        avoid_zones: Zones the route must avoid (may be empty)
    """

    start: Point
    end: Point
    avoid_zones: tuple[AvoidZone, ...] = field(default_factory=tuple)
