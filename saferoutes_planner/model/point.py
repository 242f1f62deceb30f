"""Point - The fundamental geometry atom for route planning.

A Point is a single WGS84 coordinate. Internally the order is (lat, lng);
the routing provider and GeoJSON use (lng, lat), so conversions go through
the `lng_lat` / `from_lng_lat` helpers and never through tuple unpacking.
"""

from dataclasses import dataclass
from typing import Sequence

from saferoutes_planner.core.geo_calculator import GeoCalculator


@dataclass(frozen=True)
class Point:
    """A map coordinate in decimal degrees.

    Immutable value type; equality is by value.

    Attributes:
        lat: Latitude in decimal degrees (WGS84)
        lng: Longitude in decimal degrees (WGS84)

    Example:
        start = Point(lat=55.75, lng=37.61)
    """

    lat: float
    lng: float

    @property
    def lat_lng(self) -> tuple[float, float]:
        """Return (lat, lng) tuple - standard geographic order."""
        return (self.lat, self.lng)

    @property
    def lng_lat(self) -> list[float]:
        """Return [lng, lat] list - GeoJSON/provider order."""
        return [self.lng, self.lat]

    @classmethod
    def from_lng_lat(cls, coord: Sequence[float]) -> "Point":
        """Create Point from a [lng, lat(, elevation)] sequence."""
        return cls(lat=float(coord[1]), lng=float(coord[0]))

    def distance_to(self, other: "Point") -> float:
        """Great-circle distance to another point in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lng1=self.lng,
            lat2=other.lat,
            lng2=other.lng,
        )

    def __repr__(self) -> str:
        return f"Point(lat={self.lat:.6f}, lng={self.lng:.6f})"
