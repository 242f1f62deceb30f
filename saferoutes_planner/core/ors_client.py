"""OpenRouteService client - talks to the directions API over HTTP.

Sole responsibility: send a RouteRequest to the provider and return the
parsed route. Encapsulates the provider-specific details:
- request body construction (RouteRequestBuilder)
- URL, API key query parameter and timeout
- mapping non-2xx responses and transport failures to ProviderError
- response normalization (RouteResponseParser)

It does not know about UI state, sequencing or rendering.
"""

import logging
import time

import requests

from saferoutes_planner.constants import ProviderConfig
from saferoutes_planner.core.route_parser import ParseResult, RouteResponseParser
from saferoutes_planner.core.route_request import RouteRequestBuilder
from saferoutes_planner.model.errors import ProviderError, ValidationError
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import RouteRequest

logger = logging.getLogger(__name__)


def validate_endpoints(start: Point | None, end: Point | None) -> tuple[Point, Point]:
    """Check that both route endpoints are set.

    Raises:
        ValidationError: If start or end is missing.
    """
    missing = [name for name, point in (("A", start), ("B", end)) if point is None]
    if missing:
        raise ValidationError(f"Select point {' and '.join(missing)} on the map first")
    assert start is not None and end is not None
    return start, end


class ORSClient:
    """OpenRouteService directions client.

    Example:
        client = ORSClient(api_key="...")
        result = client.fetch_route(RouteRequest(start=a, end=b, avoid_zones=store.zones))
    """

    def __init__(
        self,
        api_key: str = ProviderConfig.API_KEY,
        base_url: str = ProviderConfig.BASE_URL,
        timeout_s: float = ProviderConfig.TIMEOUT_S,
        builder: RouteRequestBuilder | None = None,
        parser: RouteResponseParser | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_key: ORS API key, sent as the api_key query parameter
            base_url: API root, e.g. https://api.openrouteservice.org/v2
            timeout_s: Seconds to wait for a response before giving up
            builder: Request body builder (default profile/format)
            parser: Response parser
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.builder = builder or RouteRequestBuilder()
        self.parser = parser or RouteResponseParser()

        if not self.api_key:
            logger.warning("[ROUTE] ORS_API_KEY is not set; the provider will reject requests")

    @property
    def directions_url(self) -> str:
        return f"{self.base_url}/directions/{self.builder.profile}/{self.builder.response_format}"

    def fetch_route(self, request: RouteRequest) -> ParseResult:
        """POST the request to the provider and parse the response.

        Args:
            request: Start, end and avoid zones

        Returns:
            ParseResult (may carry a GeometryDegraded warning).

        Raises:
            ProviderError: Non-2xx response (body surfaced verbatim), timeout or transport failure.
            NoRouteFoundError, UnparseableGeometryError: Provider answered without a usable route.
        """
        body = self.builder.build(request)
        url = self.directions_url
        logger.info(f"[ROUTE] POST {url} ({len(request.avoid_zones)} avoid zone(s))")
        start_time = time.time()

        try:
            response = requests.post(
                url,
                params={"api_key": self.api_key},
                json=body,
                headers={"Accept": "application/json, application/geo+json"},
                timeout=self.timeout_s,
            )
        except requests.Timeout as e:
            raise ProviderError(f"Routing provider did not answer within {self.timeout_s:.0f}s") from e
        except requests.RequestException as e:
            raise ProviderError(f"Routing provider unreachable: {e}") from e

        elapsed = time.time() - start_time
        logger.info(f"[ROUTE] Provider answered {response.status_code} in {elapsed:.2f}s")

        if not response.ok:
            raise ProviderError(
                f"Routing provider error: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Routing provider returned invalid JSON: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        return self.parser.parse(body=data, request=request)
