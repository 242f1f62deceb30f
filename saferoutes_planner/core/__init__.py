"""Core foundation: geometry and routing provider access.

- GeoCalculator: Distances, circle polygons, closed rings, bounding boxes
- polyline: Encoded polyline codec
- RouteRequestBuilder / RouteResponseParser / ORSClient: provider round trip
  (import directly from their modules)
"""

from saferoutes_planner.core.geo_calculator import GeoCalculator, zone_to_exclusion_polygon
from saferoutes_planner.core.polyline import decode_polyline, encode_polyline

# route_request, route_parser and ors_client import the model package, which
# imports geo_calculator: import them directly, e.g.
# from saferoutes_planner.core.ors_client import ORSClient

__all__ = [
    "GeoCalculator",
    "zone_to_exclusion_polygon",
    "decode_polyline",
    "encode_polyline",
]
