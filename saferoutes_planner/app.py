"""Safe Routes Planner - Walking routes that avoid circular zones.

Pick A and B on the map, draw avoid zones, and ask OpenRouteService for a
walking route around them.

Run: streamlit run saferoutes_planner/app.py
"""

import logging
import traceback
from collections.abc import Callable

import streamlit as st

from saferoutes_planner.constants import AppConfig, ProviderConfig
from saferoutes_planner.core.ors_client import ORSClient
from saferoutes_planner.model.message import MissingApiKeyMessage, ModeContextMessage
from saferoutes_planner.model.zone_store import ZoneStore
from saferoutes_planner.ui.actions import (
    cancel_adding_zone,
    current_map_state,
    handle_deferred_actions,
    remove_zone,
    request_route,
    reset_points,
    select_zone_for_editing,
    start_adding_zone,
    update_zone_radius,
)
from saferoutes_planner.ui.basemap import OSM_STYLE
from saferoutes_planner.ui.click_handlers import dispatch_click
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.control_panel import render_control_panel
from saferoutes_planner.ui.infra import bump_map_version, trigger_rerun
from saferoutes_planner.ui.layer_reconciler import MapLayerReconciler
from saferoutes_planner.ui.map_engine import PydeckMapEngine
from saferoutes_planner.ui.pydeck_click_handler import render_pydeck_map
from saferoutes_planner.ui.state_machine import PlannerStateMachine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def _create_map() -> tuple[PydeckMapEngine, MapLayerReconciler]:
    engine = PydeckMapEngine()
    reconciler = MapLayerReconciler(engine=engine)
    engine.mark_loaded()
    engine.attach_style(OSM_STYLE)
    return engine, reconciler


def init_session_state() -> None:
    """Initialize session state with state machine, provider client and map."""
    if "state_machine" not in st.session_state:
        sm, ctx = PlannerStateMachine.create()
        st.session_state.state_machine = sm
        st.session_state.context = ctx

    if "ors_client" not in st.session_state:
        st.session_state.ors_client = ORSClient()

    if "map_engine" not in st.session_state:
        engine, reconciler = _create_map()
        st.session_state.map_engine = engine
        st.session_state.reconciler = reconciler

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def reset_ui_state() -> None:
    """Reset UI state to initial while preserving points and zones.

    Called when an error occurs to recover gracefully: fresh state machine
    in Idle, fresh map engine, new map component.
    """
    logger.info("Resetting UI state due to error recovery")
    old_ctx: PlannerContext = st.session_state.context
    zones: ZoneStore = old_ctx.zones

    sm, ctx = PlannerStateMachine.create()
    ctx.zones = zones
    ctx.points = old_ctx.points
    st.session_state.state_machine = sm
    st.session_state.context = ctx

    st.session_state.reconciler.teardown()
    engine, reconciler = _create_map()
    st.session_state.map_engine = engine
    st.session_state.reconciler = reconciler

    bump_map_version()
    logger.info("UI state reset complete - points and zones preserved")


# =============================================================================
# MAP RENDERING
# =============================================================================


def _render_map() -> None:
    """Reconcile the map with the current state, render it and handle clicks."""
    sm: PlannerStateMachine = st.session_state.state_machine
    ctx: PlannerContext = st.session_state.context
    engine: PydeckMapEngine = st.session_state.map_engine
    reconciler: MapLayerReconciler = st.session_state.reconciler

    result = reconciler.apply(current_map_state(ctx))
    for key in result.abandoned:
        st.toast(f"⚠️ Could not draw {key} on the map")

    # view_version changes on fit_bounds so the component picks up the new view
    map_key = f"main_map_{st.session_state.map_version}_{engine.view_version}"
    click_result = render_pydeck_map(deck=engine.render(), key=map_key)

    if click_result.is_click and ctx.click_dedup.is_new_click(click_result.clicked_coordinate):
        point = click_result.point
        assert point is not None
        dispatch_click(sm=sm, ctx=ctx, point=point)


def _then_rerun(action: Callable[..., object]) -> Callable[..., None]:
    """Wrap a panel action so the whole page redraws with its result."""

    def run(*args: object) -> None:
        action(*args)
        trigger_rerun()

    return run


def _render_sidebar(sm: PlannerStateMachine, ctx: PlannerContext) -> None:
    with st.sidebar:
        ModeContextMessage(
            state_name=sm.get_state_name(),
            has_start=ctx.points.start is not None,
            has_end=ctx.points.end is not None,
        ).display()
        if not ProviderConfig.API_KEY:
            MissingApiKeyMessage().display()
        st.caption(f"Profile: {ProviderConfig.PROFILE} · Zones: {len(ctx.zones)}")


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    sm: PlannerStateMachine = st.session_state.state_machine
    ctx: PlannerContext = st.session_state.context
    client: ORSClient = st.session_state.ors_client

    logger.info(f"[MAIN] Render cycle starting: state={sm.get_state_name()}")

    handle_deferred_actions(sm=sm, ctx=ctx, client=client)

    _render_sidebar(sm=sm, ctx=ctx)

    col_map, col_ctrl = st.columns([3, 1])

    # Panel first: its changes are then visible on the map in the same run
    with col_ctrl:
        render_control_panel(
            sm=sm,
            ctx=ctx,
            on_build=lambda: request_route(sm=sm, ctx=ctx),
            on_reset_points=_then_rerun(lambda: reset_points(ctx=ctx)),
            on_start_adding_zone=lambda: start_adding_zone(sm=sm),
            on_cancel_adding_zone=lambda: cancel_adding_zone(sm=sm),
            on_select_zone=_then_rerun(lambda zone_id: select_zone_for_editing(ctx=ctx, zone_id=zone_id)),
            on_update_radius=_then_rerun(
                lambda zone_id, radius: update_zone_radius(ctx=ctx, zone_id=zone_id, radius_m=radius)
            ),
            on_remove_zone=_then_rerun(lambda zone_id: remove_zone(ctx=ctx, zone_id=zone_id)),
        )

    with col_map:
        _render_map()


if __name__ == "__main__":
    main()
