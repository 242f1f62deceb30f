"""Tests for PlannerStateMachine transitions and the planner contexts."""

from dataclasses import fields

import pytest

from saferoutes_planner.core.route_parser import ParseResult
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import Route
from saferoutes_planner.model.warning import GeometryDegraded
from saferoutes_planner.ui.context import (
    ClickDeduplicationContext,
    PlannerContext,
    PointsContext,
    RequestSequencer,
    UIMessagesContext,
)
from saferoutes_planner.ui.state_machine import PlannerStateMachine

# =============================================================================
# CONTEXTS
# =============================================================================


class TestPointsContext:
    """A, then B, then a new A."""

    def test_click_order(self, point_a: Point, point_b: Point, zone_center: Point) -> None:
        points = PointsContext()

        assert points.place_next(point_a) == "A"
        assert points.place_next(point_b) == "B"
        assert points.has_both()

        assert points.place_next(zone_center) == "A"
        assert points.start == zone_center
        assert points.end is None


class TestRequestSequencer:
    """Only the latest issued request is current."""

    def test_issue_and_invalidate(self) -> None:
        sequencer = RequestSequencer()
        first = sequencer.issue()
        second = sequencer.issue()

        assert second > first
        assert not sequencer.is_latest(first)
        assert sequencer.is_latest(second)

        sequencer.invalidate()
        assert not sequencer.is_latest(second)


class TestClickDeduplication:
    """st_deckgl replays its last click on every rerun."""

    def test_same_coordinate_rejected(self) -> None:
        dedup = ClickDeduplicationContext(debounce_seconds=0)
        assert dedup.is_new_click((37.61, 55.75))
        assert not dedup.is_new_click((37.61, 55.75))
        assert dedup.is_new_click((37.62, 55.75))

    def test_none_rejected(self) -> None:
        assert not ClickDeduplicationContext(debounce_seconds=0).is_new_click(None)

    def test_debounce_rejects_fast_second_click(self) -> None:
        dedup = ClickDeduplicationContext(debounce_seconds=60)
        assert dedup.is_new_click((37.61, 55.75))
        assert not dedup.is_new_click((37.62, 55.75))

    def test_clear_accepts_same_coordinate_again(self) -> None:
        dedup = ClickDeduplicationContext(debounce_seconds=0)
        dedup.is_new_click((37.61, 55.75))
        dedup.clear()
        assert dedup.is_new_click((37.61, 55.75))


class TestUIMessagesContext:
    """Only the last route error is kept."""

    def test_clear(self) -> None:
        messages = UIMessagesContext(error="Routing provider error: 500")
        messages.clear()
        assert messages == UIMessagesContext()
        assert [f.name for f in fields(UIMessagesContext)] == ["error"]


class TestPlannerContext:
    """Composite context behavior."""

    def test_reset_points_keeps_zones(self, point_a: Point, point_b: Point, route_a_to_b: Route) -> None:
        ctx = PlannerContext()
        ctx.points.start, ctx.points.end = point_a, point_b
        ctx.route.set_route(route=route_a_to_b, degraded=None)
        ctx.zones.add(center=point_a)
        ctx.messages.error = "old error"

        ctx.reset_points()

        assert ctx.points.start is None and ctx.points.end is None
        assert ctx.route.route is None
        assert ctx.messages.error == ""
        assert len(ctx.zones) == 1

    def test_reset_points_makes_pending_request_stale(self, point_a: Point) -> None:
        ctx = PlannerContext()
        request_id = ctx.route.sequencer.issue()
        ctx.route.begin(request_id=request_id)

        ctx.reset_points()

        assert ctx.route.pending_request_id == request_id
        assert not ctx.route.sequencer.is_latest(request_id)


# =============================================================================
# STATE MACHINE
# =============================================================================


class TestInitialState:
    """Fresh machine."""

    def test_starts_idle(self, state_machine_and_context: tuple[PlannerStateMachine, PlannerContext]) -> None:
        sm, ctx = state_machine_and_context
        assert sm.is_idle
        assert sm.get_state_name() == "Idle"
        assert sm.context is ctx
        assert not sm.can_build()


class TestZoneTransitions:
    """IDLE <-> ADDING_ZONE."""

    def test_start_and_cancel(self, state_machine_and_context: tuple[PlannerStateMachine, PlannerContext]) -> None:
        sm, _ = state_machine_and_context
        sm.start_adding_zone()
        assert sm.is_adding_zone
        assert sm.get_state_name() == "AddingZone"

        sm.cancel_adding_zone()
        assert sm.is_idle

    def test_place_zone_selects_it(self, state_machine_and_context: tuple[PlannerStateMachine, PlannerContext]) -> None:
        sm, ctx = state_machine_and_context
        sm.start_adding_zone()
        sm.place_zone(zone_id="Z1")

        assert sm.is_idle
        assert ctx.zone_edit.editing_zone_id == "Z1"

    def test_cannot_build_while_adding_zone(
        self, sm_with_points: tuple[PlannerStateMachine, PlannerContext]
    ) -> None:
        sm, _ = sm_with_points
        sm.start_adding_zone()
        assert not sm.can_build()
        assert sm.try_transition("start_build", request_id=1) is False
        assert sm.is_adding_zone


class TestBuildTransitions:
    """IDLE -> BUILDING_ROUTE -> IDLE."""

    def test_start_build_requires_both_points(
        self, state_machine_and_context: tuple[PlannerStateMachine, PlannerContext], point_a: Point
    ) -> None:
        sm, ctx = state_machine_and_context
        ctx.points.start = point_a

        sm.try_transition("start_build", request_id=1)

        assert sm.is_idle
        assert not ctx.deferred.route_build
        assert not ctx.route.building

    def test_start_build_marks_request_pending(
        self, sm_with_points: tuple[PlannerStateMachine, PlannerContext]
    ) -> None:
        sm, ctx = sm_with_points
        ctx.messages.error = "previous failure"

        assert sm.try_transition("start_build", request_id=7)

        assert sm.is_building_route
        assert sm.get_state_name() == "BuildingRoute"
        assert ctx.route.building
        assert ctx.route.pending_request_id == 7
        assert ctx.deferred.route_build
        assert ctx.messages.error == ""

    def test_finish_build_stores_route(
        self, sm_with_points: tuple[PlannerStateMachine, PlannerContext], route_a_to_b: Route
    ) -> None:
        sm, ctx = sm_with_points
        sm.start_build(request_id=1)
        degraded = GeometryDegraded(reason="no geometry")

        sm.finish_build(result=ParseResult(route=route_a_to_b, degraded=degraded))

        assert sm.is_idle
        assert ctx.route.route == route_a_to_b
        assert ctx.route.degraded == degraded
        assert not ctx.route.building
        assert ctx.route.pending_request_id is None
        assert not ctx.deferred.route_build

    @pytest.mark.parametrize("clear_route", [True, False])
    def test_fail_build(
        self,
        sm_with_points: tuple[PlannerStateMachine, PlannerContext],
        route_a_to_b: Route,
        clear_route: bool,
    ) -> None:
        sm, ctx = sm_with_points
        ctx.route.set_route(route=route_a_to_b, degraded=None)
        sm.start_build(request_id=1)

        sm.fail_build(error="Routing provider error: 500", clear_route=clear_route)

        assert sm.is_idle
        assert ctx.messages.error == "Routing provider error: 500"
        assert (ctx.route.route is None) is clear_route
        assert not ctx.route.building

    def test_cancel_build_leaves_route_alone(
        self, sm_with_points: tuple[PlannerStateMachine, PlannerContext], route_a_to_b: Route
    ) -> None:
        sm, ctx = sm_with_points
        ctx.route.set_route(route=route_a_to_b, degraded=None)
        sm.start_build(request_id=1)

        sm.cancel_build()

        assert sm.is_idle
        assert ctx.route.route == route_a_to_b
        assert ctx.messages.error == ""
        assert not ctx.route.building

    def test_zone_editing_blocked_while_building(
        self, sm_with_points: tuple[PlannerStateMachine, PlannerContext]
    ) -> None:
        sm, _ = sm_with_points
        sm.start_build(request_id=1)
        assert sm.try_transition("start_adding_zone") is False
        assert sm.is_building_route
