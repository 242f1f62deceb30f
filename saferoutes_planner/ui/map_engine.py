"""Map engine - Named sources, layers and markers rendered with Pydeck.

MapEngine is the primitive interface the layer reconciler talks to:
- named GeoJSON sources (add / replace data / remove / exists)
- named layers bound to a source (add / remove / exists)
- markers at a coordinate (add / remove / exists)
- viewport fit to a bounding box with padding
- readiness signals: loaded, style ready (listeners fire once per signal)

PydeckMapEngine keeps these primitives in memory and materializes them as a
pdk.Deck on every Streamlit run. Coordinates follow deck.gl: [lng, lat].
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from math import cos, log, log2, pi, radians, tan
from typing import Any

import pydeck as pdk

from saferoutes_planner.constants import MapConfig, StyleConfig
from saferoutes_planner.model.errors import StyleNotReadyError
from saferoutes_planner.model.point import Point

logger = logging.getLogger(__name__)

# (west, south, east, north) in decimal degrees
Bounds = tuple[float, float, float, float]


@dataclass(frozen=True)
class LayerSpec:
    """A layer bound to a source.

    Attributes:
        id: Unique layer id
        source_id: Id of the source providing the data
        kind: "fill" (polygon interior) or "line" (path or polygon outline)
        color: RGBA color
        width_px: Line width (line layers only)
    """

    id: str
    source_id: str
    kind: str
    color: tuple[int, ...]
    width_px: int = 1

    def __post_init__(self) -> None:
        if self.kind not in ("fill", "line"):
            raise ValueError(f"Unknown layer kind '{self.kind}'")


@dataclass(frozen=True)
class MarkerSpec:
    """A labelled point marker (start/end)."""

    id: str
    point: Point
    label: str
    color: tuple[int, ...]


class MapEngine(ABC):
    """Primitive map operations used by MapLayerReconciler."""

    def __init__(self) -> None:
        self._load_listeners: list[Callable[[], None]] = []
        self._style_listeners: list[Callable[[], None]] = []

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """True once the engine finished its initial load."""

    @property
    @abstractmethod
    def is_style_ready(self) -> bool:
        """True once a style is attached and layers can be added."""

    @abstractmethod
    def add_source(self, source_id: str, data: dict[str, Any]) -> None: ...

    @abstractmethod
    def set_source_data(self, source_id: str, data: dict[str, Any]) -> None: ...

    @abstractmethod
    def remove_source(self, source_id: str) -> None: ...

    @abstractmethod
    def has_source(self, source_id: str) -> bool: ...

    @abstractmethod
    def add_layer(self, layer: LayerSpec) -> None:
        """Add a layer. Raises StyleNotReadyError while no style is attached."""

    @abstractmethod
    def remove_layer(self, layer_id: str) -> None: ...

    @abstractmethod
    def has_layer(self, layer_id: str) -> bool: ...

    @abstractmethod
    def add_marker(self, marker: MarkerSpec) -> None: ...

    @abstractmethod
    def remove_marker(self, marker_id: str) -> None: ...

    @abstractmethod
    def has_marker(self, marker_id: str) -> bool: ...

    @abstractmethod
    def fit_bounds(self, bounds: Bounds, padding_px: int) -> None: ...

    # =========================================================================
    # READINESS SIGNALS
    # =========================================================================

    def on_load(self, listener: Callable[[], None]) -> None:
        """Register a callback fired when the engine reports it has loaded."""
        self._load_listeners.append(listener)

    def on_style_ready(self, listener: Callable[[], None]) -> None:
        """Register a callback fired when a style becomes ready."""
        self._style_listeners.append(listener)

    def _fire_load(self) -> None:
        for listener in list(self._load_listeners):
            listener()

    def _fire_style_ready(self) -> None:
        for listener in list(self._style_listeners):
            listener()


# =============================================================================
# VIEWPORT MATH
# =============================================================================


def _mercator_y(lat: float) -> float:
    """Web Mercator y of a latitude as a fraction of the world height (0 = north edge)."""
    lat_rad = radians(max(min(lat, 85.0511), -85.0511))
    return (1 - log(tan(lat_rad) + 1 / cos(lat_rad)) / pi) / 2


def zoom_for_bounds(
    bounds: Bounds,
    width_px: int = MapConfig.VIEWPORT_WIDTH_PX,
    height_px: int = MapConfig.VIEWPORT_HEIGHT_PX,
    padding_px: int = MapConfig.FIT_PADDING_PX,
    max_zoom: float = MapConfig.MAX_FIT_ZOOM,
) -> float:
    """Largest Web Mercator zoom at which bounds fit inside the padded viewport."""
    west, south, east, north = bounds
    usable_w = max(width_px - 2 * padding_px, 1)
    usable_h = max(height_px - 2 * padding_px, 1)

    lng_fraction = max((east - west) / 360, 1e-12)
    lat_fraction = max(abs(_mercator_y(south) - _mercator_y(north)), 1e-12)

    zoom_x = log2(usable_w / MapConfig.TILE_SIZE_PX / lng_fraction)
    zoom_y = log2(usable_h / MapConfig.TILE_SIZE_PX / lat_fraction)
    return max(0.0, min(zoom_x, zoom_y, max_zoom))


# =============================================================================
# PYDECK ENGINE
# =============================================================================


@dataclass
class _ViewState:
    lat: float = MapConfig.START_CENTER_LAT
    lng: float = MapConfig.START_CENTER_LNG
    zoom: float = MapConfig.DEFAULT_ZOOM


class PydeckMapEngine(MapEngine):
    """In-memory map engine rendered as a pdk.Deck.

    Example:
        engine = PydeckMapEngine()
        engine.attach_style(BASEMAP_STYLE)
        engine.mark_loaded()
        deck = engine.render()
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lng: float = MapConfig.START_CENTER_LNG,
        zoom: float = MapConfig.DEFAULT_ZOOM,
    ) -> None:
        super().__init__()
        self.map_style: dict[str, Any] | None = None
        self.view = _ViewState(lat=center_lat, lng=center_lng, zoom=zoom)
        self._loaded = False
        self._sources: dict[str, dict[str, Any]] = {}
        self._layers: dict[str, LayerSpec] = {}  # insertion order = z-order
        self._markers: dict[str, MarkerSpec] = {}
        self.view_version = 0  # Bumped on fit_bounds so the deck is re-centered

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def is_style_ready(self) -> bool:
        return self.map_style is not None

    def mark_loaded(self) -> None:
        """Signal that the map finished its initial load (fires listeners once)."""
        if self._loaded:
            return
        self._loaded = True
        logger.info("[RENDER] Map engine loaded")
        self._fire_load()

    def attach_style(self, style: dict[str, Any]) -> None:
        """Attach a basemap style; fires style-ready listeners."""
        was_ready = self.is_style_ready
        self.map_style = style
        if not was_ready:
            logger.info("[RENDER] Map style attached")
            self._fire_style_ready()

    # =========================================================================
    # SOURCES
    # =========================================================================

    def add_source(self, source_id: str, data: dict[str, Any]) -> None:
        if source_id in self._sources:
            raise ValueError(f"Source '{source_id}' already exists")
        self._sources[source_id] = data

    def set_source_data(self, source_id: str, data: dict[str, Any]) -> None:
        if source_id not in self._sources:
            raise KeyError(f"Source '{source_id}' does not exist")
        self._sources[source_id] = data

    def remove_source(self, source_id: str) -> None:
        bound = [layer.id for layer in self._layers.values() if layer.source_id == source_id]
        if bound:
            raise ValueError(f"Source '{source_id}' is still used by layers {bound}")
        self._sources.pop(source_id, None)

    def has_source(self, source_id: str) -> bool:
        return source_id in self._sources

    # =========================================================================
    # LAYERS
    # =========================================================================

    def add_layer(self, layer: LayerSpec) -> None:
        if not self.is_style_ready:
            raise StyleNotReadyError(f"Cannot add layer '{layer.id}' before the map style is attached")
        if layer.source_id not in self._sources:
            raise KeyError(f"Layer '{layer.id}' references unknown source '{layer.source_id}'")
        if layer.id in self._layers:
            raise ValueError(f"Layer '{layer.id}' already exists")
        self._layers[layer.id] = layer

    def remove_layer(self, layer_id: str) -> None:
        self._layers.pop(layer_id, None)

    def has_layer(self, layer_id: str) -> bool:
        return layer_id in self._layers

    @property
    def layer_ids(self) -> list[str]:
        return list(self._layers)

    # =========================================================================
    # MARKERS
    # =========================================================================

    def add_marker(self, marker: MarkerSpec) -> None:
        self._markers[marker.id] = marker

    def remove_marker(self, marker_id: str) -> None:
        self._markers.pop(marker_id, None)

    def has_marker(self, marker_id: str) -> bool:
        return marker_id in self._markers

    # =========================================================================
    # VIEWPORT
    # =========================================================================

    def fit_bounds(self, bounds: Bounds, padding_px: int) -> None:
        west, south, east, north = bounds
        self.view.lat = (south + north) / 2
        self.view.lng = (west + east) / 2
        self.view.zoom = zoom_for_bounds(bounds, padding_px=padding_px)
        self.view_version += 1
        logger.info(
            f"[RENDER] Fit bounds: center=({self.view.lat:.5f}, {self.view.lng:.5f}), zoom={self.view.zoom:.2f}"
        )

    def get_view_state(self) -> pdk.ViewState:
        return pdk.ViewState(latitude=self.view.lat, longitude=self.view.lng, zoom=self.view.zoom, pitch=0, bearing=0)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _create_layer(self, layer: LayerSpec) -> pdk.Layer:
        data = [{"type": "Feature", "geometry": self._sources[layer.source_id], "properties": {}}]
        if layer.kind == "fill":
            return pdk.Layer(
                "GeoJsonLayer",
                data=data,
                id=layer.id,
                filled=True,
                stroked=False,
                get_fill_color=list(layer.color),
                pickable=False,
            )
        return pdk.Layer(
            "GeoJsonLayer",
            data=data,
            id=layer.id,
            filled=False,
            stroked=True,
            get_line_color=list(layer.color),
            line_width_min_pixels=layer.width_px,
            line_joint_rounded=True,
            line_cap_rounded=True,
            pickable=False,
        )

    def _create_marker_layers(self) -> list[pdk.Layer]:
        if not self._markers:
            return []
        marker_data = [
            {
                "id": m.id,
                "position": m.point.lng_lat,
                "label": m.label,
                "color": list(m.color),
            }
            for m in self._markers.values()
        ]
        return [
            pdk.Layer(
                "ScatterplotLayer",
                data=marker_data,
                id="markers",
                get_position="position",
                get_fill_color="color",
                get_radius=StyleConfig.MARKER_RADIUS_PX,
                radius_units="pixels",
                stroked=True,
                get_line_color=[255, 255, 255, 255],
                line_width_min_pixels=2,
                pickable=False,
            ),
            pdk.Layer(
                "TextLayer",
                data=marker_data,
                id="marker-labels",
                get_position="position",
                get_text="label",
                get_color=StyleConfig.MARKER_TEXT_COLOR,
                get_size=14,
                get_text_anchor="'middle'",
                get_alignment_baseline="'center'",
                pickable=False,
            ),
        ]

    def render(self) -> pdk.Deck:
        """Materialize sources, layers and markers as a pdk.Deck.

        Layers keep insertion order (back to front); markers are always on top.
        """
        layers = [self._create_layer(layer) for layer in self._layers.values()]
        layers.extend(self._create_marker_layers())
        return pdk.Deck(
            map_style=self.map_style,
            map_provider="mapbox" if self.map_style is not None else None,
            initial_view_state=self.get_view_state(),
            layers=layers,
        )
