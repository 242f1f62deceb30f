"""End-to-end tests of the Streamlit page using the AppTest framework.

Runs the real app (main(), control panel, deferred route build, map
reconciliation) with two seams patched:
- render_pydeck_map: the st_deckgl component has no frontend under AppTest,
  so a fake returns queued map clicks instead
- requests.post: the routing provider

Scenario: A {55.75, 37.61}, B {55.76, 37.63}, one zone at {55.755, 37.62}.
"""

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from streamlit.testing.v1 import AppTest

from saferoutes_planner.core.ors_client import ORSClient
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.map_engine import PydeckMapEngine
from saferoutes_planner.ui.pydeck_click_handler import PydeckClickResult
from saferoutes_planner.ui.state_machine import PlannerStateMachine

START = (37.61, 55.75)
END = (37.63, 55.76)
ZONE_CENTER = (37.62, 55.755)

ROUTE_BODY: dict[str, Any] = {
    "type": "FeatureCollection",
    "features": [
        {
            "geometry": {"type": "LineString", "coordinates": [list(START), [37.612, 55.758], list(END)]},
            "properties": {"segments": [{"distance": 1820.0, "duration": 1310.0}]},
        }
    ],
}


def planner_app() -> None:
    """Script executed by AppTest."""
    from saferoutes_planner.app import main

    main()


# =============================================================================
# FIXTURES
# =============================================================================


class FakeMap:
    """Stands in for the st_deckgl component: returns each queued click once."""

    def __init__(self) -> None:
        self.clicks: list[tuple[float, float]] = []
        self.renders = 0

    def __call__(self, deck: object, key: str, **kwargs: object) -> PydeckClickResult:
        self.renders += 1
        if self.clicks:
            return PydeckClickResult(clicked_coordinate=self.clicks.pop(0))
        return PydeckClickResult.empty()


@pytest.fixture
def fake_map() -> Iterator[FakeMap]:
    fake = FakeMap()
    with patch("saferoutes_planner.app.render_pydeck_map", fake):
        yield fake


@pytest.fixture
def mock_post() -> Iterator[MagicMock]:
    response = MagicMock()
    response.status_code = 200
    response.ok = True
    response.json.return_value = ROUTE_BODY
    with patch("saferoutes_planner.core.ors_client.requests.post", return_value=response) as post:
        yield post


@pytest.fixture
def app(fake_map: FakeMap) -> AppTest:
    """App after its first run, with a test provider key and no click debounce."""
    at = AppTest.from_function(planner_app, default_timeout=30)
    at.session_state["ors_client"] = ORSClient(api_key="test-key")
    at.run()
    context(at).click_dedup.debounce_seconds = 0
    return at


def context(at: AppTest) -> PlannerContext:
    return at.session_state["context"]


def state_machine(at: AppTest) -> PlannerStateMachine:
    return at.session_state["state_machine"]


def click_map(at: AppTest, fake_map: FakeMap, lng_lat: tuple[float, float]) -> None:
    fake_map.clicks.append(lng_lat)
    at.run()


def place_zone(at: AppTest, fake_map: FakeMap) -> None:
    at.button(key="btn_add_zone").click().run()
    assert state_machine(at).is_adding_zone
    click_map(at, fake_map, ZONE_CENTER)


# =============================================================================
# TESTS
# =============================================================================


class TestPlannerPage:
    """User flows through the real page."""

    def test_first_run(self, app: AppTest, fake_map: FakeMap) -> None:
        assert not app.exception
        assert state_machine(app).is_idle
        assert app.button(key="btn_build_route").disabled
        assert fake_map.renders >= 1

    def test_build_button_builds_route(self, app: AppTest, fake_map: FakeMap, mock_post: MagicMock) -> None:
        click_map(app, fake_map, START)
        click_map(app, fake_map, END)
        place_zone(app, fake_map)
        ctx = context(app)
        assert (ctx.points.start.lng_lat, ctx.points.end.lng_lat) == (list(START), list(END))
        assert not app.button(key="btn_build_route").disabled

        app.button(key="btn_build_route").click().run()

        assert not app.exception
        mock_post.assert_called_once()
        body = mock_post.call_args.kwargs["json"]
        assert body["options"]["avoid_polygons"]["type"] == "Polygon"
        assert state_machine(app).is_idle
        route = context(app).route.route
        assert route is not None and route.distance_m == 1820.0
        assert [m.value for m in app.metric] == ["1.8 km", "22 min"]
        assert app.session_state["reconciler"].rendered_zone_ids == {"Z1"}

    def test_radius_slider_updates_zone_source(self, app: AppTest, fake_map: FakeMap) -> None:
        place_zone(app, fake_map)
        assert context(app).zone_edit.editing_zone_id == "Z1"

        with patch.object(
            PydeckMapEngine, "set_source_data", autospec=True, side_effect=PydeckMapEngine.set_source_data
        ) as spy:
            app.slider(key="sld_radius_Z1").set_value(400).run()

        assert not app.exception
        assert context(app).zones.get("Z1").radius_m == 400
        assert [c.args[1] for c in spy.call_args_list] == ["zone-source-Z1"]

    def test_error_recovery_keeps_points_and_zones(self, app: AppTest, fake_map: FakeMap) -> None:
        click_map(app, fake_map, START)
        place_zone(app, fake_map)
        old_ctx = context(app)

        with patch("saferoutes_planner.app.render_control_panel", side_effect=RuntimeError("panel exploded")):
            app.run()

        assert "RuntimeError: panel exploded" in app.error[0].value
        ctx = context(app)
        assert ctx is not old_ctx
        assert state_machine(app).is_idle
        assert ctx.points.start.lng_lat == list(START)
        assert [z.id for z in ctx.zones.zones] == ["Z1"]
        assert app.session_state["map_version"] == 1

        # The next run draws the kept zone on the fresh map
        app.run()
        assert not app.exception
        assert app.session_state["reconciler"].rendered_zone_ids == {"Z1"}
