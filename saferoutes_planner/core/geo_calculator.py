"""Geodesic calculations on Earth's surface.

Provides geographic helper functions for route planning:
- Distance calculation (Haversine formula)
- Circle approximation (fixed-vertex polygon around a center)
- Closed [lng, lat] rings for the routing provider's exclusion format
- Bounding boxes for viewport fitting

All calculations use a spherical Earth approximation (R = 6,371 km).

The circle polygon uses the small-angle equirectangular approximation. It is
accurate for radii of a few kilometers and degrades near the poles.
"""

from math import atan2, cos, pi, radians, sin, sqrt
from typing import TYPE_CHECKING, Iterable, Sequence

from shapely.geometry import MultiPoint

if TYPE_CHECKING:
    from saferoutes_planner.model.avoid_zone import AvoidZone
    from saferoutes_planner.model.point import Point

# Earth's radius in meters (spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    Coordinates are in decimal degrees (WGS84). Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lng1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lng2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlng = radians(lng2 - lng1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def circle_polygon(center: "Point", radius_m: float, vertex_count: int = 32) -> list["Point"]:
        """Approximate a circle around center with an open polygon ring.

        Vertices are evenly spaced by angle, starting due north and going
        clockwise. Each vertex is offset by radius_m converted to degrees;
        the longitude offset is divided by cos(lat) for meridian convergence.

        Args:
            center: Circle center
            radius_m: Radius in meters (must be > 0)
            vertex_count: Number of vertices (must be >= 3)

        Returns:
            List of exactly vertex_count Points (first point is not repeated).

        Raises:
            ValueError: If radius_m <= 0 or vertex_count < 3.
        """
        from saferoutes_planner.model.point import Point

        if radius_m <= 0:
            raise ValueError(f"Circle radius must be positive, got {radius_m}")
        if vertex_count < 3:
            raise ValueError(f"Circle polygon needs at least 3 vertices, got {vertex_count}")

        lat_offset = (radius_m / EARTH_RADIUS_M) * (180 / pi)
        lng_offset = lat_offset / cos(radians(center.lat))

        points = []
        for i in range(vertex_count):
            angle = (i * 2 * pi) / vertex_count
            points.append(
                Point(
                    lat=center.lat + lat_offset * cos(angle),
                    lng=center.lng + lng_offset * sin(angle),
                )
            )
        return points

    @staticmethod
    def closed_lng_lat_ring(points: Sequence["Point"]) -> list[list[float]]:
        """Convert an open ring of Points into a closed [lng, lat] ring.

        Args:
            points: Open ring (first point not repeated)

        Returns:
            List of [lng, lat] pairs whose last pair equals the first.
        """
        ring = [[p.lng, p.lat] for p in points]
        if ring:
            ring.append(list(ring[0]))
        return ring

    @staticmethod
    def bounding_box(points: Iterable["Point"]) -> tuple[float, float, float, float]:
        """Return (west, south, east, north) bounds of the given points.

        Raises:
            ValueError: If points is empty.
        """
        coords = [(p.lng, p.lat) for p in points]
        if not coords:
            raise ValueError("Cannot compute bounding box of an empty point set")
        min_x, min_y, max_x, max_y = MultiPoint(coords).bounds
        return (min_x, min_y, max_x, max_y)


def zone_to_exclusion_polygon(zone: "AvoidZone") -> list[list[float]]:
    """Export a zone's polygon as a closed [lng, lat] ring for the routing provider."""
    return GeoCalculator.closed_lng_lat_ring(zone.polygon)
