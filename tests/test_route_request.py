"""Tests for RouteRequestBuilder: provider body shapes for 0, 1 and 2+ zones."""

from saferoutes_planner.core.route_request import RouteRequestBuilder
from saferoutes_planner.model.point import Point
from saferoutes_planner.model.route import RouteRequest
from saferoutes_planner.model.zone_store import ZoneStore


class TestRequestBody:
    """Common body fields."""

    def test_coordinates_are_lng_lat(self, point_a: Point, point_b: Point) -> None:
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b))
        assert body["coordinates"] == [[point_a.lng, point_a.lat], [point_b.lng, point_b.lat]]

    def test_profile_and_format(self, point_a: Point, point_b: Point) -> None:
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b))
        assert body["profile"] == "foot-walking"
        assert body["format"] == "geojson"
        assert body["geometry"] is True

    def test_custom_profile(self, point_a: Point, point_b: Point) -> None:
        builder = RouteRequestBuilder(profile="foot-hiking", response_format="json")
        body = builder.build(RouteRequest(start=point_a, end=point_b))
        assert (body["profile"], body["format"]) == ("foot-hiking", "json")


class TestAvoidPolygons:
    """Exclusion geometry depends on the number of zones."""

    def test_no_zones_no_options(self, point_a: Point, point_b: Point) -> None:
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b, avoid_zones=()))
        assert "options" not in body

    def test_one_zone_is_polygon(
        self, point_a: Point, point_b: Point, zone_store: ZoneStore, zone_center: Point
    ) -> None:
        zone = zone_store.add(center=zone_center, radius_m=200)
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b, avoid_zones=(zone,)))

        avoid = body["options"]["avoid_polygons"]
        assert avoid["type"] == "Polygon"
        assert len(avoid["coordinates"]) == 1
        ring = avoid["coordinates"][0]
        assert len(ring) == 33
        assert ring[0] == ring[-1]
        assert ring[0] == [zone.polygon[0].lng, zone.polygon[0].lat]

    def test_two_zones_are_multipolygon(
        self, point_a: Point, point_b: Point, zone_store_with_3_zones: ZoneStore
    ) -> None:
        zones = zone_store_with_3_zones.zones[:2]
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b, avoid_zones=zones))

        avoid = body["options"]["avoid_polygons"]
        assert avoid["type"] == "MultiPolygon"
        assert len(avoid["coordinates"]) == 2
        for polygon, zone in zip(avoid["coordinates"], zones):
            assert len(polygon) == 1
            assert len(polygon[0]) == 33
            assert polygon[0][0] == [zone.polygon[0].lng, zone.polygon[0].lat]

    def test_three_zones_keep_order(self, point_a: Point, point_b: Point, zone_store_with_3_zones: ZoneStore) -> None:
        zones = zone_store_with_3_zones.zones
        body = RouteRequestBuilder().build(RouteRequest(start=point_a, end=point_b, avoid_zones=zones))
        first_vertices = [polygon[0][0] for polygon in body["options"]["avoid_polygons"]["coordinates"]]
        assert first_vertices == [[z.polygon[0].lng, z.polygon[0].lat] for z in zones]

    def test_exclusion_geometry_none_without_zones(self) -> None:
        assert RouteRequestBuilder.exclusion_geometry([]) is None


class TestPurity:
    """Building a body never changes its inputs."""

    def test_inputs_unchanged_and_repeatable(
        self, point_a: Point, point_b: Point, zone_store_with_3_zones: ZoneStore
    ) -> None:
        zones = zone_store_with_3_zones.zones
        request = RouteRequest(start=point_a, end=point_b, avoid_zones=zones)
        builder = RouteRequestBuilder()

        first = builder.build(request)
        first["coordinates"][0][0] = 0.0
        first["options"]["avoid_polygons"]["coordinates"][0][0][0][0] = 0.0
        second = builder.build(request)

        assert request.start == point_a
        assert request.avoid_zones == zones
        assert zone_store_with_3_zones.zones == zones
        assert second["coordinates"][0] == [point_a.lng, point_a.lat]
        assert second["options"]["avoid_polygons"]["coordinates"][0][0][0] == [
            zones[0].polygon[0].lng,
            zones[0].polygon[0].lat,
        ]
