"""User interface components for the Safe Routes Planner.

File Structure:
- control_panel.py: Points, route summary, avoid zone list
- pydeck_click_handler.py: st_deckgl rendering and click capture
- map_engine.py: MapEngine primitives + PydeckMapEngine
- layer_reconciler.py: Keeps the map engine in sync with application state
- basemap.py: OpenStreetMap raster style

Core Components:
- state_machine.py: PlannerStateMachine (3 states) + StreamlitUIListener
- context.py: PlannerContext and its sub-contexts
- actions.py: All action functions (points, zones, route building)
- click_handlers.py: State-specific map click processing
"""

from saferoutes_planner.ui.actions import (
    handle_deferred_actions,
    perform_route_build,
    place_point,
    place_zone,
    remove_zone,
    request_route,
    reset_points,
    update_zone_radius,
)
from saferoutes_planner.ui.click_handlers import dispatch_click
from saferoutes_planner.ui.context import PlannerContext
from saferoutes_planner.ui.control_panel import format_distance, format_duration, render_control_panel
from saferoutes_planner.ui.layer_reconciler import MapLayerReconciler, MapState, ReconcileResult
from saferoutes_planner.ui.map_engine import MapEngine, PydeckMapEngine
from saferoutes_planner.ui.state_machine import PlannerStateMachine, StreamlitUIListener

__all__ = [
    "PlannerStateMachine",
    "PlannerContext",
    "StreamlitUIListener",
    "MapEngine",
    "PydeckMapEngine",
    "MapLayerReconciler",
    "MapState",
    "ReconcileResult",
    "dispatch_click",
    "render_control_panel",
    "format_distance",
    "format_duration",
    "handle_deferred_actions",
    "perform_route_build",
    "place_point",
    "place_zone",
    "remove_zone",
    "request_route",
    "reset_points",
    "update_zone_radius",
]
