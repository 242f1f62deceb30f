"""Error taxonomy for route planning.

- ValidationError: request cannot be built (e.g. start or end missing)
- ProviderError: routing provider failed (non-2xx response or transport)
- NoRouteFoundError: provider answered but returned no route
- UnparseableGeometryError: a route was returned but no path could be recovered
- ZoneNotFoundError: unknown avoid zone id
- StyleNotReadyError: map engine cannot add layers yet (transient, retried)

GeometryDegraded is not an error; see model/warning.py.
"""


class SafeRoutesError(Exception):
    """Base class for all planner errors."""


class ValidationError(SafeRoutesError):
    """Route request is incomplete. Reported to the user, never retried."""


class ProviderError(SafeRoutesError):
    """Routing provider request failed.

    Attributes:
        status_code: HTTP status, or None for transport failures (timeouts, DNS)
        body: Response text exactly as received
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NoRouteFoundError(SafeRoutesError):
    """Provider response contains neither features nor routes."""


class UnparseableGeometryError(SafeRoutesError):
    """Provider response contains a route whose path could not be recovered."""


class ZoneNotFoundError(SafeRoutesError, KeyError):
    """Avoid zone id is not in the store."""

    def __init__(self, zone_id: str) -> None:
        super().__init__(zone_id)
        self.zone_id = zone_id

    def __str__(self) -> str:
        return f"Avoid zone {self.zone_id} not found"


class StyleNotReadyError(SafeRoutesError):
    """Map style is not attached yet, layers cannot be added."""
