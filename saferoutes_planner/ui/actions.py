"""UI Actions - All action functions for the Safe Routes Planner.

Centralizes the functions that modify planner state, trigger state machine
transitions or call the routing provider.

This module handles:
- Point selection (place_point, reset_points)
- Avoid zones (start/cancel adding, place, resize, remove, select for editing)
- Route building (request_route, then perform_route_build deferred)
- Deferred action handling (handle_deferred_actions)
"""

import logging

import streamlit as st

from saferoutes_planner.core.ors_client import ORSClient, validate_endpoints
from saferoutes_planner.core.route_parser import ParseResult
from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.errors import (
    NoRouteFoundError,
    SafeRoutesError,
    UnparseableGeometryError,
    ValidationError,
)
from saferoutes_planner.model.message import (
    RouteBuiltMessage,
    ValidationFailedMessage,
    ZonePlacedMessage,
)
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import RouteRequest
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.control_panel import format_distance, format_duration
from saferoutes_planner.ui.layer_reconciler import MapState
from saferoutes_planner.ui.state_machine import PlannerStateMachine

logger = logging.getLogger(__name__)


# =============================================================================
# POINTS
# =============================================================================


def place_point(ctx: PlannerContext, point: Point) -> str:
    """Set the next endpoint from a map click.

    Starting a new pair drops the route of the old pair.

    Returns:
        "A" or "B", whichever was set.
    """
    label = ctx.points.place_next(point)
    if label == "A" and ctx.route.route is not None:
        ctx.route.discard()
    ctx.messages.clear()
    logger.info(f"[STATE] Point {label} = {point}")
    return label


def reset_points(ctx: PlannerContext) -> None:
    """Clear A, B and the route. Any pending request becomes stale."""
    ctx.reset_points()
    logger.info("[STATE] Points and route reset")


# =============================================================================
# AVOID ZONES
# =============================================================================


def start_adding_zone(sm: PlannerStateMachine) -> bool:
    return sm.try_transition("start_adding_zone")


def cancel_adding_zone(sm: PlannerStateMachine) -> bool:
    return sm.try_transition("cancel_adding_zone")


def place_zone(sm: PlannerStateMachine, ctx: PlannerContext, center: Point) -> AvoidZone:
    """Add a zone at center with the radius chosen in the panel, then leave AddingZone."""
    zone = ctx.zones.add(center=center, radius_m=ctx.zone_edit.new_zone_radius_m)
    ZonePlacedMessage(zone_id=zone.id, radius_m=zone.radius_m).display()
    sm.try_transition("place_zone", zone_id=zone.id)
    return zone


def update_zone_radius(ctx: PlannerContext, zone_id: str, radius_m: float) -> AvoidZone:
    """Resize a zone.

    Raises:
        ZoneNotFoundError: If the zone does not exist.
    """
    return ctx.zones.update_radius(zone_id=zone_id, radius_m=radius_m)


def remove_zone(ctx: PlannerContext, zone_id: str) -> bool:
    removed = ctx.zones.remove(zone_id)
    if ctx.zone_edit.editing_zone_id == zone_id:
        ctx.zone_edit.clear()
    return removed


def select_zone_for_editing(ctx: PlannerContext, zone_id: str | None) -> None:
    """Open the radius slider for zone_id (None closes it)."""
    if zone_id is not None and zone_id not in ctx.zones:
        logger.warning(f"[ZONE] Cannot edit unknown zone {zone_id}")
        return
    ctx.zone_edit.select(zone_id)


# =============================================================================
# ROUTE BUILDING
# =============================================================================


def request_route(sm: PlannerStateMachine, ctx: PlannerContext) -> bool:
    """Validate endpoints and enter BuildingRoute; the provider call runs deferred.

    Returns:
        True if the build was started.
    """
    try:
        validate_endpoints(ctx.points.start, ctx.points.end)
    except ValidationError as e:
        ctx.messages.error = str(e)
        ValidationFailedMessage(reason=str(e)).display()
        return False

    request_id = ctx.route.sequencer.issue()
    logger.info(f"[ROUTE] Issued request #{request_id}")
    return sm.try_transition("start_build", request_id=request_id)


def perform_route_build(sm: PlannerStateMachine, ctx: PlannerContext, client: ORSClient) -> ParseResult | None:
    """Call the provider for the pending request and apply the outcome.

    Only the latest issued request may update the route; an older response
    is discarded. The building flag is cleared whatever happens.

    Returns:
        ParseResult on success, None on failure or a stale response.
    """
    request_id = ctx.route.pending_request_id
    if request_id is None:
        sm.try_transition("fail_build", error="No route request pending")
        return None

    try:
        start, end = validate_endpoints(ctx.points.start, ctx.points.end)
        request = RouteRequest(start=start, end=end, avoid_zones=ctx.zones.zones)
        result = client.fetch_route(request)
    except (NoRouteFoundError, UnparseableGeometryError) as e:
        logger.warning(f"[ROUTE] Request #{request_id} returned no usable route: {e}")
        _finish_failed(sm=sm, ctx=ctx, request_id=request_id, error=str(e), clear_route=True)
        return None
    except SafeRoutesError as e:
        logger.error(f"[ROUTE] Request #{request_id} failed: {e}")
        _finish_failed(sm=sm, ctx=ctx, request_id=request_id, error=str(e), clear_route=False)
        return None
    finally:
        ctx.route.building = False

    if not ctx.route.sequencer.is_latest(request_id):
        logger.info(f"[ROUTE] Discarding stale response #{request_id} (latest #{ctx.route.sequencer.latest})")
        sm.try_transition("cancel_build")
        return None

    RouteBuiltMessage(
        distance_text=format_distance(result.route.distance_m),
        duration_text=format_duration(result.route.duration_s),
    ).display()
    sm.try_transition("finish_build", result=result)
    return result


def _finish_failed(
    sm: PlannerStateMachine, ctx: PlannerContext, request_id: int, error: str, clear_route: bool
) -> None:
    if not ctx.route.sequencer.is_latest(request_id):
        sm.try_transition("cancel_build")
        return
    sm.try_transition("fail_build", error=error, clear_route=clear_route)


# =============================================================================
# DEFERRED ACTIONS
# =============================================================================


def handle_deferred_actions(sm: PlannerStateMachine, ctx: PlannerContext, client: ORSClient) -> None:
    """Execute pending work deferred from the previous transition.

    Called at the start of every render cycle.
    """
    if ctx.deferred.route_build and sm.is_building_route:
        with st.spinner("🚶 Building walking route..."):
            perform_route_build(sm=sm, ctx=ctx, client=client)


def current_map_state(ctx: PlannerContext) -> MapState:
    """Snapshot of what the map should show right now."""
    return MapState(
        start=ctx.points.start,
        end=ctx.points.end,
        route=ctx.route.route,
        zones=ctx.zones.zones,
    )
