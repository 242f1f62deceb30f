"""Encoded polyline decoding.

OpenRouteService returns route geometry in Google's encoded polyline format
when the JSON response format is requested. Values are delta-encoded in
(lat, lng) order, optionally followed by an elevation value per vertex.
"""

from saferoutes_planner.constants import ProviderConfig


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at index. Returns (value, next_index)."""
    shift = 0
    result = 0
    while True:
        if index >= len(encoded):
            raise ValueError("Truncated polyline string")
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(
    encoded: str,
    precision: int = ProviderConfig.POLYLINE_PRECISION,
    has_elevation: bool = False,
) -> list[tuple[float, float]]:
    """Decode a polyline string into (lat, lng) tuples.

    Args:
        encoded: Encoded polyline string
        precision: Decimal places used by the encoder (5 for ORS)
        has_elevation: True if each vertex carries a third (elevation) value,
            which is decoded and dropped

    Returns:
        List of (lat, lng) tuples in path order. Note the order is the
        polyline convention, not GeoJSON's.

    Raises:
        ValueError: If the string ends in the middle of a value.
    """
    factor = 10**precision
    coordinates = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        dlng, index = _read_value(encoded, index)
        if has_elevation:
            # Elevation is delta-encoded too but not part of the 2D path
            _, index = _read_value(encoded, index)
        lat += dlat
        lng += dlng
        coordinates.append((lat / factor, lng / factor))

    return coordinates


def encode_polyline(coordinates: list[tuple[float, float]], precision: int = ProviderConfig.POLYLINE_PRECISION) -> str:
    """Encode (lat, lng) tuples as a polyline string. Inverse of decode_polyline (2D only)."""
    factor = 10**precision
    output = []
    prev_lat = 0
    prev_lng = 0

    for lat, lng in coordinates:
        ilat = round(lat * factor)
        ilng = round(lng * factor)
        for delta in (ilat - prev_lat, ilng - prev_lng):
            value = ~(delta << 1) if delta < 0 else delta << 1
            while value >= 0x20:
                output.append(chr((0x20 | (value & 0x1F)) + 63))
                value >>= 5
            output.append(chr(value + 63))
        prev_lat, prev_lng = ilat, ilng

    return "".join(output)
