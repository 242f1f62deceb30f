"""Shared pytest fixtures for saferoutes_planner tests.

Provides RecordingMapEngine and reusable test data for all saferoutes_planner tests.

COORDINATE SYSTEM:
    Tests use points in central Moscow (lat~55.75, lng~37.6), the default map
    center. At this latitude 0.01 degrees of latitude is ~1,112 m and 0.01
    degrees of longitude is ~626 m.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import patch

import pytest

from saferoutes_planner.model.errors import StyleNotReadyError
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import Route
from saferoutes_planner.model.zone_store import ZoneStore
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.map_engine import Bounds, LayerSpec, MapEngine, MarkerSpec
from saferoutes_planner.ui.state_machine import PlannerStateMachine

# =============================================================================
# RECORDING MAP ENGINE
# =============================================================================


class RecordingMapEngine(MapEngine):
    """In-memory MapEngine that records every mutating call.

    `calls` holds (operation, id) tuples for add/set/remove/fit calls only;
    has_* queries are not recorded, so an empty list after apply() means the
    reconciler did nothing to the engine.

    Readiness is controlled by the test:
        engine = RecordingMapEngine(loaded=False)
        engine.load()  # fires on_load listeners

        engine = RecordingMapEngine(style_ready=False)
        engine.make_style_ready()  # fires on_style_ready listeners

    failing_layer_ids makes add_layer raise StyleNotReadyError for those ids
    even when the style is ready (partial failure inside one entity).

    sources_need_style makes add_source raise as well while the style is not
    ready, like MapLibre's addSource.
    """

    def __init__(
        self,
        loaded: bool = True,
        style_ready: bool = True,
        failing_layer_ids: set[str] | None = None,
        sources_need_style: bool = False,
    ) -> None:
        super().__init__()
        self._loaded = loaded
        self._style_ready = style_ready
        self.failing_layer_ids = failing_layer_ids or set()
        self.sources_need_style = sources_need_style

        self.sources: dict[str, dict[str, Any]] = {}
        self.layers: dict[str, LayerSpec] = {}
        self.markers: dict[str, MarkerSpec] = {}
        self.fitted_bounds: list[Bounds] = []
        self.calls: list[tuple[str, str]] = []

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def is_style_ready(self) -> bool:
        return self._style_ready

    def load(self) -> None:
        self._loaded = True
        self._fire_load()

    def make_style_ready(self) -> None:
        self._style_ready = True
        self._fire_style_ready()

    def add_source(self, source_id: str, data: dict[str, Any]) -> None:
        if self.sources_need_style and not self._style_ready:
            raise StyleNotReadyError(f"style not ready for {source_id}")
        assert source_id not in self.sources, f"duplicate source {source_id}"
        self.calls.append(("add_source", source_id))
        self.sources[source_id] = data

    def set_source_data(self, source_id: str, data: dict[str, Any]) -> None:
        assert source_id in self.sources, f"unknown source {source_id}"
        self.calls.append(("set_source_data", source_id))
        self.sources[source_id] = data

    def remove_source(self, source_id: str) -> None:
        self.calls.append(("remove_source", source_id))
        self.sources.pop(source_id, None)

    def has_source(self, source_id: str) -> bool:
        return source_id in self.sources

    def add_layer(self, layer: LayerSpec) -> None:
        if not self._style_ready or layer.id in self.failing_layer_ids:
            raise StyleNotReadyError(f"style not ready for {layer.id}")
        assert layer.source_id in self.sources, f"layer {layer.id} without source"
        assert layer.id not in self.layers, f"duplicate layer {layer.id}"
        self.calls.append(("add_layer", layer.id))
        self.layers[layer.id] = layer

    def remove_layer(self, layer_id: str) -> None:
        self.calls.append(("remove_layer", layer_id))
        self.layers.pop(layer_id, None)

    def has_layer(self, layer_id: str) -> bool:
        return layer_id in self.layers

    def add_marker(self, marker: MarkerSpec) -> None:
        self.calls.append(("add_marker", marker.id))
        self.markers[marker.id] = marker

    def remove_marker(self, marker_id: str) -> None:
        self.calls.append(("remove_marker", marker_id))
        self.markers.pop(marker_id, None)

    def has_marker(self, marker_id: str) -> bool:
        return marker_id in self.markers

    def fit_bounds(self, bounds: Bounds, padding_px: int) -> None:
        self.calls.append(("fit_bounds", f"{padding_px}px"))
        self.fitted_bounds.append(bounds)


@pytest.fixture
def engine() -> RecordingMapEngine:
    """Loaded engine with a ready style."""
    return RecordingMapEngine()


@pytest.fixture
def make_engine() -> Callable[..., RecordingMapEngine]:
    """Factory for engines with custom readiness, e.g. make_engine(style_ready=False)."""
    return RecordingMapEngine


# =============================================================================
# STREAMLIT PATCHES
# =============================================================================


@pytest.fixture
def mock_toast():
    """Patch st.toast so toast messages can be asserted without a Streamlit runtime."""
    with patch("streamlit.toast") as toast:
        yield toast


# =============================================================================
# POINT FIXTURES
# =============================================================================


@pytest.fixture
def point_a() -> Point:
    """Start near the Kremlin."""
    return Point(lat=55.7520, lng=37.6175)


@pytest.fixture
def point_b() -> Point:
    """End ~1.6 km north-east of point_a (Chistye Prudy)."""
    return Point(lat=55.7600, lng=37.6380)


@pytest.fixture
def zone_center() -> Point:
    """Between point_a and point_b (Lubyanka)."""
    return Point(lat=55.7580, lng=37.6250)


# =============================================================================
# ZONE FIXTURES
# =============================================================================


@pytest.fixture
def zone_store() -> ZoneStore:
    """Empty zone store."""
    return ZoneStore()


@pytest.fixture
def zone_store_with_3_zones(zone_store: ZoneStore, zone_center: Point) -> ZoneStore:
    """Store with Z1, Z2, Z3: 200 m zones spaced ~1.1 km apart along a meridian."""
    for i in range(3):
        zone_store.add(center=Point(lat=zone_center.lat + 0.01 * i, lng=zone_center.lng), radius_m=200)
    return zone_store


# =============================================================================
# ROUTE FIXTURES
# =============================================================================


@pytest.fixture
def route_a_to_b(point_a: Point, point_b: Point) -> Route:
    """Three-point route from point_a to point_b: 1.5 km, 18 min 20 s."""
    return Route(
        geometry=(point_a, Point(lat=55.7560, lng=37.6200), point_b),
        distance_m=1500.0,
        duration_s=1100.0,
    )


# =============================================================================
# PROVIDER RESPONSE BODIES
# =============================================================================


@pytest.fixture
def geojson_body(point_a: Point, point_b: Point) -> dict[str, Any]:
    """ORS /geojson response: one feature, summary in the first segment."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [point_a.lng_lat, [37.6200, 55.7560], point_b.lng_lat],
                },
                "properties": {"segments": [{"distance": 1500.0, "duration": 1100.0, "steps": []}]},
            }
        ],
    }


@pytest.fixture
def summary_only_body() -> dict[str, Any]:
    """ORS /json response without geometry: distance and duration only."""
    return {"routes": [{"summary": {"distance": 1500.0, "duration": 1100.0}}]}


# =============================================================================
# STATE MACHINE FIXTURES
# =============================================================================


@pytest.fixture
def state_machine_and_context() -> tuple[PlannerStateMachine, PlannerContext]:
    """Fresh state machine and context pair, starting in IDLE state."""
    return PlannerStateMachine.create(add_ui_listener=False)


@pytest.fixture
def sm_with_points(
    state_machine_and_context: tuple[PlannerStateMachine, PlannerContext],
    point_a: Point,
    point_b: Point,
) -> tuple[PlannerStateMachine, PlannerContext]:
    """IDLE state machine with A and B selected."""
    sm, ctx = state_machine_and_context
    ctx.points.start = point_a
    ctx.points.end = point_b
    return sm, ctx
