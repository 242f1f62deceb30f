"""AvoidZone - Circular area the router must not pass through.

The circle is stored as center + radius together with its approximating
polygon. The polygon is derived data: zones are immutable and every radius
change goes through with_radius(), which regenerates it, so a zone can never
hold a polygon that disagrees with its radius.
"""

from dataclasses import dataclass, replace

from saferoutes_planner.constants import ZoneConfig
from saferoutes_planner.core.geo_calculator import GeoCalculator
from saferoutes_planner.model.point import Point


@dataclass(frozen=True)
class AvoidZone:
    """A circular exclusion zone.

    Attributes:
        id: Unique identifier (e.g., "Z1", "Z2", ...)
        center: Circle center
        radius_m: Radius in meters (> 0)
        polygon: Open ring of ZoneConfig.VERTEX_COUNT points around center

    Example:
        zone = AvoidZone.create(zone_id="Z1", center=Point(lat=55.755, lng=37.62), radius_m=200)
    """

    id: str
    center: Point
    radius_m: float
    polygon: tuple[Point, ...]

    @classmethod
    def create(
        cls,
        zone_id: str,
        center: Point,
        radius_m: float,
        vertex_count: int = ZoneConfig.VERTEX_COUNT,
    ) -> "AvoidZone":
        """Create a zone with its polygon computed from center and radius."""
        polygon = GeoCalculator.circle_polygon(center=center, radius_m=radius_m, vertex_count=vertex_count)
        return cls(id=zone_id, center=center, radius_m=radius_m, polygon=tuple(polygon))

    def with_radius(self, radius_m: float) -> "AvoidZone":
        """Return a copy with a new radius and a regenerated polygon. Id and center are kept."""
        polygon = GeoCalculator.circle_polygon(
            center=self.center,
            radius_m=radius_m,
            vertex_count=len(self.polygon),
        )
        return replace(self, radius_m=radius_m, polygon=tuple(polygon))

    def to_geojson_polygon(self) -> dict:
        """GeoJSON Polygon geometry with a closed [lng, lat] ring."""
        return {
            "type": "Polygon",
            "coordinates": [GeoCalculator.closed_lng_lat_ring(self.polygon)],
        }

    def __repr__(self) -> str:
        return f"AvoidZone({self.id}, center={self.center}, radius={self.radius_m:.0f}m)"
