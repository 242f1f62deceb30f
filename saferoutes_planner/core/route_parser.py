"""RouteResponseParser - Normalizes provider responses into a canonical Route.

The same provider returns different encodings depending on the requested
format and account tier. Ordered attempts, first match wins:

1. GeoJSON feature collection: `features[0].geometry.coordinates` ([lng, lat])
   with distance/duration from `features[0].properties.segments[0]`.
2. Routes list: distance/duration from `routes[0].summary`; path from
   `routes[0].geometry` as
   (a) an encoded polyline string (decoded as (lat, lng)),
   (b) a coordinate array (a single [lng, lat] pair or a list of pairs),
   (c) a GeoJSON object with `coordinates`.
3. Routes list with a distance or duration but no recoverable path: straight
   line from request start to end, reported as GeometryDegraded.
4. Neither features nor routes: NoRouteFoundError.
5. Any path that ends up empty, a feature or route that is not an object, or
   a non-numeric distance/duration: UnparseableGeometryError.
"""

import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any

from saferoutes_planner.core.polyline import decode_polyline
from saferoutes_planner.model.errors import NoRouteFoundError, UnparseableGeometryError
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import Route, RouteRequest
from saferoutes_planner.model.warning import GeometryDegraded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Parsed route plus an optional degradation warning.

    Attributes:
        route: Canonical route
        degraded: Set when the path is a straight-line approximation
    """

    route: Route
    degraded: GeometryDegraded | None = None

    @property
    def is_degraded(self) -> bool:
        return self.degraded is not None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_coordinate_pair(value: Any) -> bool:
    """True for [lng, lat] or [lng, lat, elevation]."""
    return isinstance(value, (list, tuple)) and len(value) >= 2 and all(_is_number(v) for v in value)


def _points_from_coordinates(coords: Any) -> list[Point] | None:
    """Convert a [lng, lat] pair or a list of pairs into Points.

    Returns None if coords has neither shape.
    """
    if _is_coordinate_pair(coords):
        return [Point.from_lng_lat(coords)]
    if isinstance(coords, (list, tuple)) and all(_is_coordinate_pair(c) for c in coords):
        return [Point.from_lng_lat(c) for c in coords]
    return None


def _non_empty_list(body: dict[str, Any], key: str) -> list[Any] | None:
    value = body.get(key)
    if isinstance(value, list) and value:
        return value
    return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class RouteResponseParser:
    """Parses decoded JSON bodies from the routing provider.

    Example:
        parser = RouteResponseParser()
        result = parser.parse(body=response.json(), request=request)
        if result.is_degraded:
            logger.warning(result.degraded.message)
    """

    def parse(self, body: dict[str, Any], request: RouteRequest) -> ParseResult:
        """Parse a provider response body.

        Args:
            body: Decoded JSON body
            request: Request that produced the body (for the straight-line fallback)

        Returns:
            ParseResult with the canonical route.

        Raises:
            NoRouteFoundError: Body has no non-empty features or routes list.
            UnparseableGeometryError: A route exists but its path or summary is empty or unusable.
        """
        if not isinstance(body, dict):
            raise NoRouteFoundError(f"Unexpected response body type: {type(body).__name__}")

        features = _non_empty_list(body, "features")
        if features is not None:
            if not isinstance(features[0], dict):
                raise UnparseableGeometryError(f"Unexpected feature type: {type(features[0]).__name__}")
            return ParseResult(route=self._parse_feature(feature=features[0]))

        routes = _non_empty_list(body, "routes")
        if routes is not None:
            if not isinstance(routes[0], dict):
                raise UnparseableGeometryError(f"Unexpected route type: {type(routes[0]).__name__}")
            return self._parse_route(route=routes[0], body=body, request=request)

        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise NoRouteFoundError(f"No route found: {message}")
        raise NoRouteFoundError("No route found")

    # =========================================================================
    # FEATURE COLLECTION
    # =========================================================================

    def _parse_feature(self, feature: dict[str, Any]) -> Route:
        geometry = _as_dict(feature.get("geometry"))
        points = _points_from_coordinates(geometry.get("coordinates"))
        if not points:
            raise UnparseableGeometryError("Feature geometry has no coordinates")

        properties = _as_dict(feature.get("properties"))
        segments = properties.get("segments")
        if isinstance(segments, list) and segments and isinstance(segments[0], dict):
            summary = segments[0]
        else:
            summary = _as_dict(properties.get("summary"))
        distance, duration = self._read_summary(summary)

        logger.info(f"[ROUTE] Parsed feature: {len(points)} points, {distance:.0f}m, {duration:.0f}s")
        return Route(geometry=tuple(points), distance_m=distance, duration_s=duration)

    # =========================================================================
    # ROUTES LIST
    # =========================================================================

    def _parse_route(self, route: dict[str, Any], body: dict[str, Any], request: RouteRequest) -> ParseResult:
        summary = _as_dict(route.get("summary"))
        distance, duration = self._read_summary(summary)

        points = self._recover_geometry(geometry=route.get("geometry"), body=body)
        if points is not None:
            if not points:
                raise UnparseableGeometryError("Route geometry is empty")
            logger.info(f"[ROUTE] Parsed route: {len(points)} points, {distance:.0f}m, {duration:.0f}s")
            return ParseResult(route=Route(geometry=tuple(points), distance_m=distance, duration_s=duration))

        # Degrade only when the provider reported distance or duration
        if "distance" not in summary and "duration" not in summary:
            raise UnparseableGeometryError("Route has neither geometry nor distance/duration")

        degraded = GeometryDegraded(reason="provider returned no route geometry")
        logger.warning(f"[ROUTE] {degraded.message} ({distance:.0f}m, {duration:.0f}s)")
        return ParseResult(
            route=Route(geometry=(request.start, request.end), distance_m=distance, duration_s=duration),
            degraded=degraded,
        )

    def _recover_geometry(self, geometry: Any, body: dict[str, Any]) -> list[Point] | None:
        """Try each geometry encoding in turn. Returns None if nothing matched."""
        if isinstance(geometry, str):
            query = _as_dict(_as_dict(body.get("metadata")).get("query"))
            try:
                decoded = decode_polyline(geometry, has_elevation=bool(query.get("elevation")))
            except ValueError as e:
                raise UnparseableGeometryError(f"Invalid encoded polyline: {e}") from e
            # Polyline order is (lat, lng)
            return [Point(lat=lat, lng=lng) for lat, lng in decoded]

        if isinstance(geometry, list):
            return _points_from_coordinates(geometry)

        if isinstance(geometry, dict) and "coordinates" in geometry:
            return _points_from_coordinates(geometry["coordinates"])

        return None

    @staticmethod
    def _read_summary(summary: dict[str, Any]) -> tuple[float, float]:
        """Read (distance, duration); the provider omits zero values."""
        values = []
        for key in ("distance", "duration"):
            value = summary.get(key) or 0
            if not _is_number(value):
                raise UnparseableGeometryError(f"Route {key} is not a number: {value!r}")
            values.append(float(value))
        return values[0], values[1]
