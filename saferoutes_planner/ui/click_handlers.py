"""Click handlers for the Safe Routes Planner.

app.py de-duplicates map clicks, then dispatches them to a state-specific
handler.

Design Principles:
- One handler per state (no if-else chains)
- STRICT: a state without a handler raises RuntimeError immediately
"""

import logging
from collections.abc import Callable

from saferoutes_planner.model.message import InvalidClickMessage, PointPlacedMessage
from saferoutes_planner.model.point import Point
from saferoutes_planner.ui.actions import place_point, place_zone
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.infra import trigger_rerun
from saferoutes_planner.ui.state_machine import PlannerStateMachine

logger = logging.getLogger(__name__)

ClickHandler = Callable[[PlannerStateMachine, PlannerContext, Point], None]


# =============================================================================
# CLICK DISPATCH
# =============================================================================


def get_click_handler(state_name: str) -> ClickHandler:
    """Get the click handler for the given state.

    Raises:
        RuntimeError: If state has no registered handler
    """
    handlers: dict[str, ClickHandler] = {
        "Idle": handle_idle_click,
        "AddingZone": handle_adding_zone_click,
        "BuildingRoute": handle_building_route_click,
    }

    handler = handlers.get(state_name)
    if handler is None:
        raise RuntimeError(
            f"No click handler registered for state '{state_name}'. "
            f"Available states: {list(handlers.keys())}. "
            f"Add handler for new state."
        )
    return handler


def dispatch_click(sm: PlannerStateMachine, ctx: PlannerContext, point: Point) -> None:
    """Dispatch a map click to the handler of the current state, then rerun to draw the result."""
    state_name = sm.get_state_name()
    logger.info(f"[CLICK] {point} in state {state_name}")

    handler = get_click_handler(state_name)
    handler(sm, ctx, point)
    trigger_rerun()


# =============================================================================
# STATE-SPECIFIC HANDLERS
# =============================================================================


def handle_idle_click(sm: PlannerStateMachine, ctx: PlannerContext, point: Point) -> None:
    """IDLE: set A, then B; a third click starts a new pair."""
    label = place_point(ctx=ctx, point=point)
    PointPlacedMessage(label=label).display()


def handle_adding_zone_click(sm: PlannerStateMachine, ctx: PlannerContext, point: Point) -> None:
    """ADDING_ZONE: place a zone centered on the click."""
    place_zone(sm=sm, ctx=ctx, center=point)


def handle_building_route_click(sm: PlannerStateMachine, ctx: PlannerContext, point: Point) -> None:
    """BUILDING_ROUTE: clicks are ignored until the provider answers."""
    InvalidClickMessage(action="change the map", reason="a route is being built").display()
