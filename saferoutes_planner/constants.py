"""Configuration constants for Safe Routes Planner.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    EntityPrefixes: ID prefixes for generated entities
    MapConfig: Default map view and viewport fitting parameters
    ZoneConfig: Avoid zone geometry and radius slider limits
    ProviderConfig: OpenRouteService endpoint, profile and timeout
    RenderConfig: Map engine source/layer ids and retry policy
    StyleConfig: Visual colors and styling
    ClickConfig: Click debounce and de-duplication
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Package root directory (where saferoutes_planner/ lives)
PACKAGE_DIR = Path(__file__).parent

# Project root directory (parent of saferoutes_planner/)
PROJECT_ROOT = PACKAGE_DIR.parent

# Example in .env:
# ORS_API_KEY=5b3ce3597851110001cf6248...
load_dotenv(PROJECT_ROOT / ".env")


class AppConfig:
    """UI application settings."""

    TITLE = "Safe Routes Planner"
    ICON = "🚸"
    LAYOUT = "wide"


class EntityPrefixes:
    """ID prefixes for generated entities."""

    ZONE = "Z"


class MapConfig:
    """Default map view parameters."""

    # Initial center for program start: Moscow city centre
    START_CENTER_LAT = 55.7558
    START_CENTER_LNG = 37.6173
    DEFAULT_ZOOM = 13

    # Viewport size used for bounding box fitting (pixels)
    VIEWPORT_WIDTH_PX = 1000
    VIEWPORT_HEIGHT_PX = 600
    FIT_PADDING_PX = 50
    MAX_FIT_ZOOM = 18

    # Web Mercator tile size in pixels
    TILE_SIZE_PX = 256


class ZoneConfig:
    """Avoid zone parameters."""

    VERTEX_COUNT = 32  # Vertices of the circle approximation
    DEFAULT_RADIUS_M = 200

    # Radius slider range in the control panel
    RADIUS_MIN_M = 50
    RADIUS_MAX_M = 1000
    RADIUS_STEP_M = 50


class ClickConfig:
    """Click detection configuration."""

    DEBOUNCE_TIME_DELAY = 0.15  # Seconds between accepted clicks

    # Coordinate rounding for click de-duplication (5 decimals ~ 1 m)
    COORD_DEDUP_DECIMALS = 5


class ProviderConfig:
    """OpenRouteService directions API settings."""

    BASE_URL = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org/v2")
    API_KEY = os.getenv("ORS_API_KEY", "")

    PROFILE = "foot-walking"
    FORMAT = "geojson"  # "geojson" returns features, "json" returns routes

    TIMEOUT_S = 15  # Seconds to wait for the provider before giving up

    # Encoded polyline precision used by ORS (5 decimals)
    POLYLINE_PRECISION = 5


class RenderConfig:
    """Map engine identifiers and retry policy."""

    ROUTE_SOURCE_ID = "route-source"
    ROUTE_LAYER_ID = "route-layer"
    START_MARKER_ID = "start-marker"
    END_MARKER_ID = "end-marker"

    # Zone ids are filled in with the zone id, e.g. "zone-source-Z1"
    ZONE_SOURCE_ID = "zone-source-{zone_id}"
    ZONE_FILL_LAYER_ID = "zone-layer-{zone_id}"
    ZONE_OUTLINE_LAYER_ID = "zone-layer-{zone_id}-outline"

    # Attempts per entity while the map style is not ready
    MAX_STYLE_RETRIES = 3


class StyleConfig:
    """Visual colors and styling (RGBA, 0-255)."""

    ROUTE_COLOR = [66, 133, 244, 255]  # Google blue
    ROUTE_WIDTH_PX = 4

    ZONE_FILL_COLOR = [255, 0, 0, 77]  # Red at 30 % opacity
    ZONE_OUTLINE_COLOR = [255, 0, 0, 255]
    ZONE_OUTLINE_WIDTH_PX = 2

    START_MARKER_COLOR = [34, 197, 94, 255]  # Green
    END_MARKER_COLOR = [239, 68, 68, 255]  # Red
    MARKER_RADIUS_PX = 12
    MARKER_TEXT_COLOR = [255, 255, 255, 255]

    START_LABEL = "A"
    END_LABEL = "B"
