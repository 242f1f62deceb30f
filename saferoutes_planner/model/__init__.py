"""Data model classes for route planning.

- Point: Geometry atom (lat, lng)
- AvoidZone: Circle (center, radius) with its polygon approximation
- ZoneStore: Owns all avoid zones of a session
- Route / RouteRequest: Canonical route and the inputs that produce it
- GeometryDegraded: Warning for straight-line fallback routes
- Errors: SafeRoutesError hierarchy
"""

from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.errors import (
    NoRouteFoundError,
    ProviderError,
    SafeRoutesError,
    StyleNotReadyError,
    UnparseableGeometryError,
    ValidationError,
    ZoneNotFoundError,
)
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import Route, RouteRequest
from saferoutes_planner.model.warning import GeometryDegraded, RouteWarning
from saferoutes_planner.model.zone_store import ZoneStore

__all__ = [
    "Point",
    "AvoidZone",
    "ZoneStore",
    "Route",
    "RouteRequest",
    "RouteWarning",
    "GeometryDegraded",
    "SafeRoutesError",
    "ValidationError",
    "ProviderError",
    "NoRouteFoundError",
    "UnparseableGeometryError",
    "ZoneNotFoundError",
    "StyleNotReadyError",
]
