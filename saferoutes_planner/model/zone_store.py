"""ZoneStore - In-memory collection of avoid zones.

Owns all zones for the session and provides add / update radius / remove.
Zone ids come from a per-store counter ("Z1", "Z2", ...), so two zones
created in quick succession can never collide.
"""

import logging

from saferoutes_planner.constants import EntityPrefixes, ZoneConfig
from saferoutes_planner.model.avoid_zone import AvoidZone
from saferoutes_planner.model.errors import ZoneNotFoundError
from saferoutes_planner.model.point import Point

logger = logging.getLogger(__name__)


class ZoneStore:
    """Collection of avoid zones keyed by id, in insertion order.

    Example:
        store = ZoneStore()
        zone = store.add(center=Point(lat=55.755, lng=37.62), radius_m=200)
        store.update_radius(zone_id=zone.id, radius_m=400)
        store.remove(zone_id=zone.id)
    """

    def __init__(self, vertex_count: int = ZoneConfig.VERTEX_COUNT) -> None:
        self.vertex_count = vertex_count
        self._zones: dict[str, AvoidZone] = {}
        self._zone_counter = 0

    def _next_zone_id(self) -> str:
        self._zone_counter += 1
        return f"{EntityPrefixes.ZONE}{self._zone_counter}"

    @property
    def zones(self) -> tuple[AvoidZone, ...]:
        """All zones in creation order."""
        return tuple(self._zones.values())

    def get(self, zone_id: str) -> AvoidZone | None:
        return self._zones.get(zone_id)

    def add(self, center: Point, radius_m: float = ZoneConfig.DEFAULT_RADIUS_M) -> AvoidZone:
        """Create a zone around center.

        Args:
            center: Zone center
            radius_m: Radius in meters (> 0)

        Returns:
            The new zone with its polygon computed.

        Raises:
            ValueError: If radius_m <= 0.
        """
        zone = AvoidZone.create(
            zone_id=self._next_zone_id(),
            center=center,
            radius_m=radius_m,
            vertex_count=self.vertex_count,
        )
        self._zones[zone.id] = zone
        logger.info(f"[ZONE] Added {zone}")
        return zone

    def update_radius(self, zone_id: str, radius_m: float) -> AvoidZone:
        """Change a zone's radius and regenerate its polygon.

        Id and center are unchanged.

        Raises:
            ZoneNotFoundError: If zone_id is not in the store (store is not modified).
            ValueError: If radius_m <= 0.
        """
        zone = self._zones.get(zone_id)
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        updated = zone.with_radius(radius_m)
        self._zones[zone_id] = updated
        logger.info(f"[ZONE] Radius {zone_id}: {zone.radius_m:.0f}m -> {radius_m:.0f}m")
        return updated

    def remove(self, zone_id: str) -> bool:
        """Remove a zone. Removing an unknown id is a no-op.

        Returns:
            True if a zone was removed.
        """
        removed = self._zones.pop(zone_id, None)
        if removed is not None:
            logger.info(f"[ZONE] Removed {zone_id}")
        return removed is not None

    def clear(self) -> None:
        """Remove all zones. The id counter keeps running."""
        self._zones.clear()

    def __len__(self) -> int:
        return len(self._zones)

    def __contains__(self, zone_id: object) -> bool:
        return zone_id in self._zones

    def __repr__(self) -> str:
        return f"ZoneStore({list(self._zones)})"
