"""Safe Routes Planner - Walking routes that avoid circular zones.

A Streamlit application that asks OpenRouteService for a walking route
between two points while excluding user-drawn circular areas, and draws
the result on a pydeck map.

Modules:
    core: Geometry, polyline codec, provider request/response, HTTP client
    model: Data structures (Point, AvoidZone, Route, ZoneStore, errors, messages)
    ui: Streamlit interface (state machine, actions, map engine, layer reconciler)

Example:
    from saferoutes_planner.core.ors_client import ORSClient
    from saferoutes_planner.model import Point, RouteRequest, ZoneStore
"""
