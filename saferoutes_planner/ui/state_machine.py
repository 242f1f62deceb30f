"""State machine for the Safe Routes Planner UI.

Uses python-statemachine for state management with:
- Clear state definitions
- Guarded transitions (conditions)
- Entry/exit hooks for side effects
- Explicit event-driven transitions

Architecture Overview
---------------------
1. User action triggers a transition (e.g. "Build route" -> start_build)
2. StreamlitUIListener logs the transition and calls st.rerun()
3. On the next render cycle, handle_deferred_actions() runs pending work
4. Deferred work (the provider call) ends with finish_build or fail_build

States:
    IDLE: Clicks place A, then B
    ADDING_ZONE: The next click places an avoid zone
    BUILDING_ROUTE: A provider call is pending or in flight

Transitions:
    IDLE -> ADDING_ZONE: start_adding_zone
    ADDING_ZONE -> IDLE: place_zone, cancel_adding_zone
    IDLE -> BUILDING_ROUTE: start_build (only with both points set)
    BUILDING_ROUTE -> IDLE: finish_build, fail_build, cancel_build (stale request)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import streamlit as st
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from saferoutes_planner.ui.context import PlannerContext

if TYPE_CHECKING:
    from saferoutes_planner.core.route_parser import ParseResult

logger = logging.getLogger(__name__)


class StreamlitUIListener:
    """Listener that refreshes the Streamlit UI after state transitions.

    Usage:
        sm = PlannerStateMachine(context=context)
        sm.add_listener(StreamlitUIListener())
    """

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")
        st.rerun()


class PlannerStateMachine(StateMachine):
    """State machine for the route planning workflow.

    States:
        idle: Selecting points, editing zones
        adding_zone: Waiting for a map click to place a zone
        building_route: Route request in progress
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    idle = State("Idle", initial=True)
    adding_zone = State("AddingZone")
    building_route = State("BuildingRoute")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    start_adding_zone = idle.to(adding_zone)
    place_zone = adding_zone.to(idle)
    cancel_adding_zone = adding_zone.to(idle)

    start_build = idle.to(building_route, cond="has_both_points")
    finish_build = building_route.to(idle)
    fail_build = building_route.to(idle)
    cancel_build = building_route.to(idle)

    # ==========================================================================
    # Guards (Conditions)
    # ==========================================================================

    def has_both_points(self) -> bool:
        """Guard: A and B are both set."""
        return self.context.has_both_points()

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_adding_zone(self) -> bool:
        return self.adding_zone.is_active

    @property
    def is_building_route(self) -> bool:
        return self.building_route.is_active

    # ==========================================================================
    # Entry / Exit Hooks
    # ==========================================================================

    def on_enter_building_route(self) -> None:
        self.context.messages.clear()

    def on_exit_building_route(self) -> None:
        # Always leave BuildingRoute with the building flag cleared
        self.context.route.end()
        self.context.deferred.route_build = False

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_start_build(self, request_id: int) -> None:
        """Mark the request as pending; the provider call runs deferred."""
        self.context.route.begin(request_id=request_id)
        self.context.deferred.route_build = True

    def before_place_zone(self, zone_id: str) -> None:
        self.context.zone_edit.select(zone_id)

    def before_finish_build(self, result: ParseResult) -> None:
        self.context.route.set_route(route=result.route, degraded=result.degraded)
        self.context.messages.error = ""

    def before_fail_build(self, error: str, clear_route: bool = False) -> None:
        if clear_route:
            self.context.route.clear_route()
        self.context.messages.error = error

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: PlannerContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or PlannerContext()
        super().__init__(model=model, start_value=start_value)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> PlannerContext:
        return self.model

    def can_build(self) -> bool:
        """Check if the build button should be enabled."""
        return self.is_idle and self.context.has_both_points()

    def get_state_name(self) -> str:
        return self.current_state.name

    def __repr__(self) -> str:
        return f"PlannerStateMachine(state={self.get_state_name()}, model={self.context!r})"

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"[STATE] Transition '{event}' not allowed from {self.get_state_name()}")
            return False

    @staticmethod
    def create(add_ui_listener: bool = True) -> tuple["PlannerStateMachine", PlannerContext]:
        """Factory method to create state machine with context and optional UI listener.

        Args:
            add_ui_listener: If True, adds StreamlitUIListener for auto st.rerun().
                             Set to False for testing or non-Streamlit usage.

        Returns:
            Tuple of (PlannerStateMachine, PlannerContext)
        """
        context = PlannerContext()
        sm = PlannerStateMachine(context=context)
        if add_ui_listener:
            sm.add_listener(StreamlitUIListener())
            logger.info("[STATE] Created PlannerStateMachine with StreamlitUIListener")
        else:
            logger.info("[STATE] Created PlannerStateMachine without UI listener")
        return sm, context
