"""RouteRequestBuilder - Projects a RouteRequest onto the provider's JSON body.

Coordinates are always emitted in (lng, lat) order. Avoid zones become the
provider's `avoid_polygons` option:
- no zones: no `options` field at all
- one zone: a GeoJSON Polygon
- two or more zones: a GeoJSON MultiPolygon, one polygon per zone

A MultiPolygon with a single member is rejected by the provider in some
configurations, so the builder branches on the zone count.
"""

import logging
from typing import Any, Sequence

from saferoutes_planner.constants import ProviderConfig
from saferoutes_planner.core.geo_calculator import zone_to_exclusion_polygon
from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.route import RouteRequest

logger = logging.getLogger(__name__)


class RouteRequestBuilder:
    """Builds provider request bodies. Pure: inputs are never mutated.

    Example:
        builder = RouteRequestBuilder()
        body = builder.build(RouteRequest(start=a, end=b, avoid_zones=(zone,)))
    """

    def __init__(
        self,
        profile: str = ProviderConfig.PROFILE,
        response_format: str = ProviderConfig.FORMAT,
        include_geometry: bool = True,
    ) -> None:
        self.profile = profile
        self.response_format = response_format
        self.include_geometry = include_geometry

    @staticmethod
    def exclusion_geometry(zones: Sequence[AvoidZone]) -> dict[str, Any] | None:
        """Convert zones into a Polygon/MultiPolygon geometry, or None if there are no zones."""
        if not zones:
            return None
        rings = [zone_to_exclusion_polygon(zone) for zone in zones]
        if len(rings) == 1:
            return {"type": "Polygon", "coordinates": [rings[0]]}
        return {"type": "MultiPolygon", "coordinates": [[ring] for ring in rings]}

    def build(self, request: RouteRequest) -> dict[str, Any]:
        """Build the JSON body for a directions request.

        Args:
            request: Start, end and avoid zones

        Returns:
            Dict ready for json serialization.
        """
        body: dict[str, Any] = {
            "coordinates": [request.start.lng_lat, request.end.lng_lat],
            "profile": self.profile,
            "format": self.response_format,
            "geometry": self.include_geometry,
        }

        avoid_polygons = self.exclusion_geometry(request.avoid_zones)
        if avoid_polygons is not None:
            body["options"] = {"avoid_polygons": avoid_polygons}

        logger.debug(
            f"[ROUTE] Request body: {len(request.avoid_zones)} zone(s), "
            f"exclusion={avoid_polygons['type'] if avoid_polygons else None}"
        )
        return body
