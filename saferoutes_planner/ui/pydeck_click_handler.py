"""Pydeck click handler using streamlit-deckgl for map click support.

Uses st_deckgl from streamlit-deckgl to capture ALL click events including
clicks on empty map, not just object selections.

The key difference from st.pydeck_chart:
- st.pydeck_chart: Only returns object selections (pickable=True objects)
- st_deckgl: Returns the full deck.gl onClick event with a coordinate field
"""

import logging
from dataclasses import dataclass

import pydeck as pdk
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from saferoutes_planner.constants import ClickConfig, MapConfig
from saferoutes_planner.model.point import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PydeckClickResult:
    """Result from Pydeck click detection.

    Attributes:
        clicked_coordinate: (lng, lat) of the click, rounded for de-duplication
    """

    clicked_coordinate: tuple[float, float] | None

    @property
    def is_click(self) -> bool:
        return self.clicked_coordinate is not None

    @property
    def point(self) -> Point | None:
        if self.clicked_coordinate is None:
            return None
        return Point.from_lng_lat(self.clicked_coordinate)

    @staticmethod
    def empty() -> "PydeckClickResult":
        """Return empty result (no click detected)."""
        return PydeckClickResult(clicked_coordinate=None)


def parse_click_event(event: object) -> PydeckClickResult:
    """Extract the clicked coordinate from an st_deckgl event.

    Event structure: {coordinate: [lng, lat], eventType: "click", ...}
    """
    if not isinstance(event, dict):
        return PydeckClickResult.empty()

    coord = event.get("coordinate")
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        return PydeckClickResult.empty()

    decimals = ClickConfig.COORD_DEDUP_DECIMALS
    lng, lat = round(float(coord[0]), decimals), round(float(coord[1]), decimals)
    return PydeckClickResult(clicked_coordinate=(lng, lat))


def render_pydeck_map(
    deck: pdk.Deck,
    key: str,
    height: int = MapConfig.VIEWPORT_HEIGHT_PX,
) -> PydeckClickResult:
    """Render Pydeck map and return the last click.

    The component keeps returning its last click on every rerun; callers
    de-duplicate with ClickDeduplicationContext.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        height: Height in pixels

    Returns:
        PydeckClickResult with the click coordinate, if any
    """
    # MUST pass events=['click'] to enable click detection
    event = st_deckgl(deck, key=key, height=height, events=["click"])
    if not event:
        return PydeckClickResult.empty()

    logger.debug(f"st_deckgl event keys: {list(event.keys()) if isinstance(event, dict) else type(event)}")
    return parse_click_event(event)
