"""Basemap - OpenStreetMap raster style for the 2D map.

Uses the Mapbox GL style specification to describe an XYZ raster basemap.
pydeck's TileLayer cannot render raster tiles on its own (it needs a
renderSubLayers callback that pydeck does not expose), so the style dict is
passed as map_style with map_provider="mapbox".

The style defines:
- sources: where to fetch tiles (OpenStreetMap standard tiles)
- layers: how to render them (raster with zoom limits)

No API key required.
"""

# OpenStreetMap standard tiles; street-level detail suits walking routes
OSM_TILES = ["https://tile.openstreetmap.org/{z}/{x}/{y}.png"]

OSM_STYLE: dict[str, object] = {
    "version": 8,
    "sources": {
        "osm": {
            "type": "raster",
            "tiles": OSM_TILES,
            "tileSize": 256,
            "attribution": '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        }
    },
    "layers": [
        {
            "id": "osm",
            "type": "raster",
            "source": "osm",
            "minzoom": 0,
            "maxzoom": 19,
        }
    ],
}
