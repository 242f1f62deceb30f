"""Control panel - Points, route summary and avoid zone list.

Layout (top to bottom):
- Points: A/B status, build and reset buttons
- Route: distance and walking time, straight-line estimate note
- Avoid zones: list with edit (radius slider) and remove, add/cancel button
- Errors: last route error, verbatim
"""

import logging
from collections.abc import Callable
from math import floor

import streamlit as st

from saferoutes_planner.constants import ZoneConfig
from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.message import RouteErrorMessage, StraightLineEstimateMessage
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.state_machine import PlannerStateMachine

logger = logging.getLogger(__name__)


# =============================================================================
# FORMATTING
# =============================================================================


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def format_distance(meters: float) -> str:
    """Format a distance: "850 m" below one kilometer, "1.5 km" above.

    Example:
        format_distance(1500) -> "1.5 km"
    """
    if meters < 1000:
        return f"{_round_half_up(meters)} m"
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    """Format a duration in whole minutes: "18 min" or "1 h 5 min".

    Example:
        format_duration(1100) -> "18 min"
        format_duration(3900) -> "1 h 5 min"
    """
    minutes = _round_half_up(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours} h {mins} min"


# =============================================================================
# PANEL
# =============================================================================


def render_control_panel(
    sm: PlannerStateMachine,
    ctx: PlannerContext,
    on_build: Callable[[], None],
    on_reset_points: Callable[[], None],
    on_start_adding_zone: Callable[[], None],
    on_cancel_adding_zone: Callable[[], None],
    on_select_zone: Callable[[str | None], None],
    on_update_radius: Callable[[str, float], None],
    on_remove_zone: Callable[[str], None],
) -> None:
    """Render the control panel for the current state."""
    _render_points_section(sm=sm, ctx=ctx, on_build=on_build, on_reset_points=on_reset_points)
    _render_route_section(ctx=ctx)
    _render_zones_section(
        sm=sm,
        ctx=ctx,
        on_start_adding_zone=on_start_adding_zone,
        on_cancel_adding_zone=on_cancel_adding_zone,
        on_select_zone=on_select_zone,
        on_update_radius=on_update_radius,
        on_remove_zone=on_remove_zone,
    )
    if ctx.messages.error:
        RouteErrorMessage(error=ctx.messages.error).display()


def _render_points_section(
    sm: PlannerStateMachine,
    ctx: PlannerContext,
    on_build: Callable[[], None],
    on_reset_points: Callable[[], None],
) -> None:
    st.markdown("### 📍 Route Points")
    st.markdown(f"**Point A:** {'✅ Selected' if ctx.points.start else '👆 Click the map'}")
    st.markdown(f"**Point B:** {'✅ Selected' if ctx.points.end else '👆 Click the map'}")

    building = sm.is_building_route or ctx.route.building
    col_build, col_reset = st.columns(2)
    with col_build:
        if st.button(
            "⏳ Building..." if building else "🚶 Build route",
            type="primary",
            disabled=not sm.can_build(),
            use_container_width=True,
            key="btn_build_route",
        ):
            on_build()
    with col_reset:
        if st.button(
            "✖️ Reset points",
            disabled=building or (ctx.points.start is None and ctx.points.end is None),
            use_container_width=True,
            key="btn_reset_points",
        ):
            on_reset_points()


def _render_route_section(ctx: PlannerContext) -> None:
    route = ctx.route.route
    if route is None:
        return
    st.markdown("### 🗺️ Route")
    col_dist, col_time = st.columns(2)
    col_dist.metric("Distance", format_distance(route.distance_m))
    col_time.metric("Walking time", format_duration(route.duration_s))
    if ctx.route.degraded is not None:
        StraightLineEstimateMessage(detail=ctx.route.degraded.message).display()


def _render_zones_section(
    sm: PlannerStateMachine,
    ctx: PlannerContext,
    on_start_adding_zone: Callable[[], None],
    on_cancel_adding_zone: Callable[[], None],
    on_select_zone: Callable[[str | None], None],
    on_update_radius: Callable[[str, float], None],
    on_remove_zone: Callable[[str], None],
) -> None:
    st.markdown("### ⛔ Avoid Zones")

    if sm.is_adding_zone:
        st.warning("👆 Click the map to place the zone")
        if st.button("✖️ Cancel", key="btn_cancel_zone", use_container_width=True):
            on_cancel_adding_zone()

    zones = ctx.zones.zones
    if not zones:
        st.caption("No zones")
    for zone in zones:
        _render_zone_row(
            zone=zone,
            editing=ctx.zone_edit.editing_zone_id == zone.id,
            on_select_zone=on_select_zone,
            on_update_radius=on_update_radius,
            on_remove_zone=on_remove_zone,
        )

    ctx.zone_edit.new_zone_radius_m = st.slider(
        "New zone radius (m)",
        min_value=ZoneConfig.RADIUS_MIN_M,
        max_value=ZoneConfig.RADIUS_MAX_M,
        step=ZoneConfig.RADIUS_STEP_M,
        value=ctx.zone_edit.new_zone_radius_m,
        key="sld_new_zone_radius",
    )
    if st.button(
        "👆 Pick a point on the map" if sm.is_adding_zone else "➕ Add zone",
        disabled=not sm.is_idle,
        use_container_width=True,
        key="btn_add_zone",
    ):
        on_start_adding_zone()


def _render_zone_row(
    zone: AvoidZone,
    editing: bool,
    on_select_zone: Callable[[str | None], None],
    on_update_radius: Callable[[str, float], None],
    on_remove_zone: Callable[[str], None],
) -> None:
    col_info, col_edit, col_remove = st.columns([3, 1, 1])
    col_info.markdown(f"**{zone.id}** · radius {zone.radius_m:.0f} m")

    if editing:
        if col_edit.button("✓", key=f"btn_done_{zone.id}"):
            on_select_zone(None)
        radius = st.slider(
            f"Radius of {zone.id} (m)",
            min_value=ZoneConfig.RADIUS_MIN_M,
            max_value=ZoneConfig.RADIUS_MAX_M,
            step=ZoneConfig.RADIUS_STEP_M,
            value=int(zone.radius_m),
            key=f"sld_radius_{zone.id}",
        )
        if radius != zone.radius_m:
            on_update_radius(zone.id, radius)
    elif col_edit.button("✎", key=f"btn_edit_{zone.id}"):
        on_select_zone(zone.id)

    if col_remove.button("✕", key=f"btn_remove_{zone.id}"):
        on_remove_zone(zone.id)
