"""Context Classes for Safe Routes Planner State Machine.

This module contains all context dataclasses that hold mutable state
for the planner application. The state machine uses these contexts to
track endpoints, the current route, zone editing and UI messages.

Architecture:
- All contexts inherit from BaseContext (provides clear() interface)
- PlannerContext composes all sub-contexts
- Contexts are data holders; the ZoneStore owns zone logic
- State machine owns the context, UI reads from it

Sub-contexts:
    PointsContext: Start (A) and end (B) points
    RouteContext: Current route, degradation warning, build progress
    ZoneEditContext: Which zone is being edited, radius for new zones
    ClickDeduplicationContext: Click deduplication tracking
    DeferredContext: Flags for deferred actions
    UIMessagesContext: User-facing messages/errors
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from saferoutes_planner.constants import ClickConfig, ZoneConfig
from saferoutes_planner.model.zone_store import ZoneStore

if TYPE_CHECKING:
    from saferoutes_planner.model.point import Point
    from saferoutes_planner.model.route import Route
    from saferoutes_planner.model.warning import GeometryDegraded


class BaseContext(ABC):
    """Abstract base class for all context dataclasses."""

    @abstractmethod
    def clear(self) -> None:
        """Reset context to initial state."""
        ...


@dataclass
class PointsContext(BaseContext):
    """Route endpoints.

    Clicks fill A first, then B. A click with both set starts a new pair.
    """

    start: Point | None = None
    end: Point | None = None

    def clear(self) -> None:
        self.start = None
        self.end = None

    def has_both(self) -> bool:
        return self.start is not None and self.end is not None

    def place_next(self, point: Point) -> str:
        """Place point as A, B, or a new A. Returns the label that was set."""
        if self.start is None:
            self.start = point
            return "A"
        if self.end is None:
            self.end = point
            return "B"
        self.start = point
        self.end = None
        return "A"


@dataclass
class RequestSequencer:
    """Issues increasing request numbers; only the newest may update the route."""

    latest: int = 0

    def issue(self) -> int:
        self.latest += 1
        return self.latest

    def invalidate(self) -> None:
        """Make every outstanding request stale."""
        self.latest += 1

    def is_latest(self, request_id: int) -> bool:
        return request_id == self.latest


@dataclass
class RouteContext(BaseContext):
    """Current route and build progress.

    Attributes:
        route: Last successfully built route
        degraded: Warning when route is a straight-line estimate
        building: True while a provider call is pending or in flight
        pending_request_id: Sequence number of the request to execute
        sequencer: Issues request numbers and detects stale responses
    """

    route: Route | None = None
    degraded: GeometryDegraded | None = None
    building: bool = False
    pending_request_id: int | None = None
    sequencer: RequestSequencer = field(default_factory=RequestSequencer)

    def begin(self, request_id: int) -> None:
        self.building = True
        self.pending_request_id = request_id

    def end(self) -> None:
        self.building = False
        self.pending_request_id = None

    def set_route(self, route: Route, degraded: GeometryDegraded | None) -> None:
        self.route = route
        self.degraded = degraded

    def clear_route(self) -> None:
        self.route = None
        self.degraded = None

    def discard(self) -> None:
        """Drop the route and make in-flight requests stale."""
        self.clear_route()
        self.sequencer.invalidate()

    def clear(self) -> None:
        self.discard()
        self.end()


@dataclass
class ZoneEditContext(BaseContext):
    """Zone editing state."""

    editing_zone_id: str | None = None
    new_zone_radius_m: int = ZoneConfig.DEFAULT_RADIUS_M

    def select(self, zone_id: str | None) -> None:
        self.editing_zone_id = zone_id

    def clear(self) -> None:
        self.editing_zone_id = None


@dataclass
class ClickDeduplicationContext(BaseContext):
    """Click deduplication by last-seen coordinates plus a short debounce.

    st_deckgl keeps returning the last click on every rerun; only a changed
    coordinate is a new click.
    """

    last_coord: tuple[float, float] | None = None
    last_click_timestamp: float = 0.0
    debounce_seconds: float = ClickConfig.DEBOUNCE_TIME_DELAY

    def is_new_click(self, coord: tuple[float, ...] | None) -> bool:
        """Check if coord is a new click.

        Args:
            coord: Click coordinate (lng, lat) or None

        Returns:
            True if this click should be processed
        """
        if coord is None:
            return False

        now = time.time()
        if self.debounce_seconds > 0 and now - self.last_click_timestamp < self.debounce_seconds:
            return False

        coord_2d = (coord[0], coord[1])
        if coord_2d == self.last_coord:
            return False
        self.last_coord = coord_2d
        self.last_click_timestamp = now
        return True

    def clear(self) -> None:
        self.last_coord = None
        self.last_click_timestamp = 0.0


@dataclass
class DeferredContext(BaseContext):
    """Deferred action flags for work that runs after st.rerun().

    When set, handle_deferred_actions() performs the work on the next render
    cycle, after the UI shows the new state (e.g. the disabled build button).
    """

    route_build: bool = False

    def clear(self) -> None:
        self.route_build = False


@dataclass
class UIMessagesContext(BaseContext):
    """User-facing messages and errors."""

    error: str = ""

    def clear(self) -> None:
        self.error = ""


@dataclass
class PlannerContext:
    """Shared context/model for state machine.

    Sub-contexts:
        points: Start and end points
        route: Route and build progress
        zone_edit: Zone being edited, radius for new zones
        click_dedup: Click deduplication tracking
        deferred: Flags for deferred actions
        messages: User-facing messages/errors
        zones: Avoid zone store

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None

    points: PointsContext = field(default_factory=PointsContext)
    route: RouteContext = field(default_factory=RouteContext)
    zone_edit: ZoneEditContext = field(default_factory=ZoneEditContext)
    click_dedup: ClickDeduplicationContext = field(default_factory=ClickDeduplicationContext)
    deferred: DeferredContext = field(default_factory=DeferredContext)
    messages: UIMessagesContext = field(default_factory=UIMessagesContext)
    zones: ZoneStore = field(default_factory=ZoneStore)

    def has_both_points(self) -> bool:
        return self.points.has_both()

    def reset_points(self) -> None:
        """Clear A, B and the route; zones are kept."""
        self.points.clear()
        self.route.discard()
        self.messages.clear()

    def __repr__(self) -> str:
        return (
            f"PlannerContext(state={self.state}, "
            f"start={self.points.start}, end={self.points.end}, "
            f"route={self.route.route is not None}, zones={len(self.zones)})"
        )
