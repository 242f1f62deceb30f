"""MapLayerReconciler - Keeps the map engine in sync with application state.

Each rendered entity moves through absent -> present (created),
present -> present (updated in place) and present -> absent (removed).
apply() computes the minimal set of engine operations for a MapState:

- Zones: set difference on zone ids. Stale zones are removed before new ones
  are added; a zone whose polygon changed keeps its layers and only gets its
  source data replaced, so dragging the radius slider does not flicker.
- Markers: both removed and recreated whenever either point changes.
- Route: remove-then-add for every new route. The viewport is fitted once per
  route session (first route after a clear) so provider retries do not keep
  snapping the map.

Ownership is tracked in an explicit registry (zone id -> layer/source ids);
the engine's layer list is never scanned by naming convention.

Nothing happens before the engine reports it has loaded; the last requested
state is replayed on the load signal. Adding a source with its layers is
atomic: if the style is not ready, everything created for the entity is
rolled back and retried when the engine signals style readiness, up to
RenderConfig.MAX_STYLE_RETRIES attempts per entity.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from saferoutes_planner.constants import MapConfig, RenderConfig, StyleConfig
from saferoutes_planner.core.geo_calculator import GeoCalculator
from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.errors import StyleNotReadyError
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import Route
from saferoutes_planner.ui.map_engine import LayerSpec, MapEngine, MarkerSpec

logger = logging.getLogger(__name__)

ROUTE_KEY = "route"


def zone_key(zone_id: str) -> str:
    return f"zone:{zone_id}"


@dataclass(frozen=True)
class MapState:
    """Snapshot of everything the map should show.

    Attributes:
        start: Start point (A) or None
        end: End point (B) or None
        route: Current route or None
        zones: Avoid zones in display order
    """

    start: Point | None = None
    end: Point | None = None
    route: Route | None = None
    zones: tuple[AvoidZone, ...] = ()


@dataclass(frozen=True)
class ZoneLayerIds:
    """Engine ids owned by one avoid zone."""

    source_id: str
    fill_layer_id: str
    outline_layer_id: str

    @classmethod
    def for_zone(cls, zone_id: str) -> "ZoneLayerIds":
        return cls(
            source_id=RenderConfig.ZONE_SOURCE_ID.format(zone_id=zone_id),
            fill_layer_id=RenderConfig.ZONE_FILL_LAYER_ID.format(zone_id=zone_id),
            outline_layer_id=RenderConfig.ZONE_OUTLINE_LAYER_ID.format(zone_id=zone_id),
        )

    @property
    def layer_ids(self) -> tuple[str, str]:
        return (self.fill_layer_id, self.outline_layer_id)


@dataclass
class ReconcileResult:
    """What one reconciliation pass changed.

    Attributes:
        skipped: Engine not loaded yet, nothing was done
        markers_changed: Start/end markers were recreated
        route_added: Route line was (re)drawn
        route_removed: Route line was removed
        viewport_fitted: Viewport was fitted to the route
        zones_added: Zone ids that got new layers
        zones_updated: Zone ids whose geometry was replaced in place
        zones_removed: Zone ids whose layers were removed
        deferred: Entity keys waiting for the style (will be retried)
        abandoned: Entity keys that ran out of retries
    """

    skipped: bool = False
    markers_changed: bool = False
    route_added: bool = False
    route_removed: bool = False
    viewport_fitted: bool = False
    zones_added: list[str] = field(default_factory=list)
    zones_updated: list[str] = field(default_factory=list)
    zones_removed: list[str] = field(default_factory=list)
    deferred: list[str] = field(default_factory=list)
    abandoned: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.markers_changed
            or self.route_added
            or self.route_removed
            or self.zones_added
            or self.zones_updated
            or self.zones_removed
        )


class MapLayerReconciler:
    """Owns all route/zone/marker primitives on a MapEngine.

    No other component mutates the engine.

    Example:
        reconciler = MapLayerReconciler(engine=engine)
        result = reconciler.apply(MapState(start=a, end=b, route=route, zones=store.zones))
    """

    def __init__(self, engine: MapEngine, max_style_retries: int = RenderConfig.MAX_STYLE_RETRIES) -> None:
        self.engine = engine
        self.max_style_retries = max_style_retries

        self._desired: MapState | None = None
        self._zone_registry: dict[str, ZoneLayerIds] = {}
        self._rendered_zones: dict[str, AvoidZone] = {}
        self._rendered_points: tuple[Point | None, Point | None] = (None, None)
        self._rendered_route: Route | None = None
        self._route_fitted = False

        self._style_attempts: dict[str, int] = {}
        self._abandoned: dict[str, Any] = {}  # key -> entity value that was given up on

        engine.on_load(self._replay)
        engine.on_style_ready(self.on_style_ready)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def rendered_zone_ids(self) -> set[str]:
        return set(self._zone_registry)

    def layer_ids_for(self, zone_id: str) -> ZoneLayerIds | None:
        return self._zone_registry.get(zone_id)

    def apply(self, state: MapState) -> ReconcileResult:
        """Bring the engine in line with state.

        Args:
            state: Desired map contents

        Returns:
            ReconcileResult describing the operations performed.
        """
        self._desired = state
        if not self.engine.is_loaded:
            logger.debug("[RENDER] Engine not loaded, reconciliation deferred")
            return ReconcileResult(skipped=True)

        result = ReconcileResult()
        self._reconcile_markers(start=state.start, end=state.end, result=result)
        self._reconcile_route(route=state.route, result=result)
        self._reconcile_zones(zones=state.zones, result=result)

        if result.has_changes:
            logger.info(
                f"[RENDER] Reconciled: markers={result.markers_changed}, "
                f"route +{int(result.route_added)}/-{int(result.route_removed)}, "
                f"zones +{result.zones_added} ~{result.zones_updated} -{result.zones_removed}"
            )
        return result

    def on_style_ready(self) -> ReconcileResult:
        """Retry entities that failed because the style was not ready."""
        if self._desired is None or not self.engine.is_loaded:
            return ReconcileResult(skipped=True)
        pending = sorted(self._style_attempts)
        if pending:
            logger.info(f"[RENDER] Style ready, retrying {pending}")
        return self.apply(self._desired)

    def teardown(self) -> ReconcileResult:
        """Remove everything this reconciler created (terminal state)."""
        result = ReconcileResult()
        if self.engine.is_loaded:
            self._reconcile_markers(start=None, end=None, result=result)
            self._reconcile_route(route=None, result=result)
            self._reconcile_zones(zones=(), result=result)
        self._desired = None
        self._style_attempts.clear()
        self._abandoned.clear()
        logger.info("[RENDER] Reconciler torn down")
        return result

    def _replay(self) -> None:
        if self._desired is not None:
            logger.info("[RENDER] Engine loaded, replaying requested state")
            self.apply(self._desired)

    # =========================================================================
    # MARKERS
    # =========================================================================

    def _reconcile_markers(self, start: Point | None, end: Point | None, result: ReconcileResult) -> None:
        if (start, end) == self._rendered_points:
            return

        for marker_id in (RenderConfig.START_MARKER_ID, RenderConfig.END_MARKER_ID):
            if self.engine.has_marker(marker_id):
                self.engine.remove_marker(marker_id)

        if start is not None:
            self.engine.add_marker(
                MarkerSpec(
                    id=RenderConfig.START_MARKER_ID,
                    point=start,
                    label=StyleConfig.START_LABEL,
                    color=tuple(StyleConfig.START_MARKER_COLOR),
                )
            )
        if end is not None:
            self.engine.add_marker(
                MarkerSpec(
                    id=RenderConfig.END_MARKER_ID,
                    point=end,
                    label=StyleConfig.END_LABEL,
                    color=tuple(StyleConfig.END_MARKER_COLOR),
                )
            )

        self._rendered_points = (start, end)
        result.markers_changed = True

    # =========================================================================
    # ROUTE
    # =========================================================================

    def _reconcile_route(self, route: Route | None, result: ReconcileResult) -> None:
        if route is None:
            if self._rendered_route is not None:
                self._remove_route()
                result.route_removed = True
            # Next route starts a new session and gets fitted again
            self._route_fitted = False
            self._forget(ROUTE_KEY)
            return

        if route == self._rendered_route or self._is_abandoned(ROUTE_KEY, route):
            return

        if self._rendered_route is not None:
            self._remove_route()
            result.route_removed = True

        layer = LayerSpec(
            id=RenderConfig.ROUTE_LAYER_ID,
            source_id=RenderConfig.ROUTE_SOURCE_ID,
            kind="line",
            color=tuple(StyleConfig.ROUTE_COLOR),
            width_px=StyleConfig.ROUTE_WIDTH_PX,
        )
        added = self._add_source_with_layers(
            key=ROUTE_KEY,
            entity=route,
            source_id=RenderConfig.ROUTE_SOURCE_ID,
            data=route.to_geojson_line(),
            layers=[layer],
            result=result,
        )
        if not added:
            return

        self._rendered_route = route
        result.route_added = True

        if not self._route_fitted:
            bounds = GeoCalculator.bounding_box(route.geometry)
            self.engine.fit_bounds(bounds, padding_px=MapConfig.FIT_PADDING_PX)
            self._route_fitted = True
            result.viewport_fitted = True

    def _remove_route(self) -> None:
        if self.engine.has_layer(RenderConfig.ROUTE_LAYER_ID):
            self.engine.remove_layer(RenderConfig.ROUTE_LAYER_ID)
        if self.engine.has_source(RenderConfig.ROUTE_SOURCE_ID):
            self.engine.remove_source(RenderConfig.ROUTE_SOURCE_ID)
        self._rendered_route = None

    # =========================================================================
    # ZONES
    # =========================================================================

    def _reconcile_zones(self, zones: tuple[AvoidZone, ...], result: ReconcileResult) -> None:
        desired = {zone.id: zone for zone in zones}

        # Removals first so stale layers never coexist with new ones
        for zone_id in [zid for zid in self._zone_registry if zid not in desired]:
            self._remove_zone(zone_id)
            result.zones_removed.append(zone_id)

        for key in [k for k in (*self._style_attempts, *self._abandoned) if k.startswith("zone:")]:
            if key.removeprefix("zone:") not in desired:
                self._forget(key)

        for zone in zones:
            ids = self._zone_registry.get(zone.id)
            if ids is None:
                self._add_zone(zone=zone, result=result)
            elif self._rendered_zones[zone.id] != zone:
                self.engine.set_source_data(ids.source_id, zone.to_geojson_polygon())
                self._rendered_zones[zone.id] = zone
                result.zones_updated.append(zone.id)

    def _add_zone(self, zone: AvoidZone, result: ReconcileResult) -> None:
        key = zone_key(zone.id)
        if self._is_abandoned(key, zone):
            return

        ids = ZoneLayerIds.for_zone(zone.id)
        layers = [
            LayerSpec(
                id=ids.fill_layer_id,
                source_id=ids.source_id,
                kind="fill",
                color=tuple(StyleConfig.ZONE_FILL_COLOR),
            ),
            LayerSpec(
                id=ids.outline_layer_id,
                source_id=ids.source_id,
                kind="line",
                color=tuple(StyleConfig.ZONE_OUTLINE_COLOR),
                width_px=StyleConfig.ZONE_OUTLINE_WIDTH_PX,
            ),
        ]
        added = self._add_source_with_layers(
            key=key,
            entity=zone,
            source_id=ids.source_id,
            data=zone.to_geojson_polygon(),
            layers=layers,
            result=result,
        )
        if added:
            self._zone_registry[zone.id] = ids
            self._rendered_zones[zone.id] = zone
            result.zones_added.append(zone.id)

    def _remove_zone(self, zone_id: str) -> None:
        ids = self._zone_registry.pop(zone_id)
        self._rendered_zones.pop(zone_id, None)
        for layer_id in ids.layer_ids:
            if self.engine.has_layer(layer_id):
                self.engine.remove_layer(layer_id)
        if self.engine.has_source(ids.source_id):
            self.engine.remove_source(ids.source_id)

    # =========================================================================
    # ATOMIC ADD + STYLE RETRY POLICY
    # =========================================================================

    def _add_source_with_layers(
        self,
        key: str,
        entity: Any,
        source_id: str,
        data: dict[str, Any],
        layers: list[LayerSpec],
        result: ReconcileResult,
    ) -> bool:
        """Add a source and its layers as one unit.

        Returns:
            True if everything was added. False if the style was not ready;
            in that case nothing created here is left on the engine.
        """
        # Leftovers from an interrupted pass would make the adds below fail
        for layer in layers:
            if self.engine.has_layer(layer.id):
                self.engine.remove_layer(layer.id)
        if self.engine.has_source(source_id):
            self.engine.remove_source(source_id)

        added_layer_ids: list[str] = []
        try:
            self.engine.add_source(source_id, data)
            for layer in layers:
                self.engine.add_layer(layer)
                added_layer_ids.append(layer.id)
        except StyleNotReadyError as e:
            for layer_id in reversed(added_layer_ids):
                self.engine.remove_layer(layer_id)
            if self.engine.has_source(source_id):
                self.engine.remove_source(source_id)
            self._record_style_failure(key=key, entity=entity, error=e, result=result)
            return False

        self._style_attempts.pop(key, None)
        return True

    def _record_style_failure(self, key: str, entity: Any, error: StyleNotReadyError, result: ReconcileResult) -> None:
        attempts = self._style_attempts.get(key, 0) + 1
        if attempts >= self.max_style_retries:
            self._style_attempts.pop(key, None)
            self._abandoned[key] = entity
            result.abandoned.append(key)
            logger.error(f"[RENDER] Giving up on {key} after {attempts} attempts: {error}")
            return
        self._style_attempts[key] = attempts
        result.deferred.append(key)
        logger.warning(f"[RENDER] Style not ready for {key} (attempt {attempts}/{self.max_style_retries}), will retry")

    def _is_abandoned(self, key: str, entity: Any) -> bool:
        """True if entity was given up on. A changed entity gets a fresh set of attempts."""
        if key not in self._abandoned:
            return False
        if self._abandoned[key] == entity:
            return True
        del self._abandoned[key]
        return False

    def _forget(self, key: str) -> None:
        self._style_attempts.pop(key, None)
        self._abandoned.pop(key, None)
