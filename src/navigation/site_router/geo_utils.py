# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules.
# Points are (lon, lat) pairs, the order GeoJSON uses.

import math
from typing import Sequence


EARTH_RADIUS_M = 6_371_000.0

CARDINALS = (
    "north", "northeast", "east", "southeast",
    "south", "southwest", "west", "northwest",
)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def point_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Haversine distance in metres between two (lon, lat) points."""
    return haversine_distance(a[1], a[0], b[1], b[0])


def point_bearing(a: Sequence[float], b: Sequence[float]) -> float:
    """Bearing in degrees [0, 360) from (lon, lat) point a to b."""
    return calculate_bearing(a[1], a[0], b[1], b[0])


def normalize_delta(delta: float) -> float:
    """Fold a bearing difference into the half-open range (-180, 180]."""
    if delta > 180:
        delta -= 360
    elif delta <= -180:
        delta += 360
    return delta


def degrees_to_cardinal(deg: float) -> str:
    """
    Eight-way compass name for a bearing.

    Each name covers a 45 degree sector centred on its heading, so
    boundaries fall at 22.5, 67.5, ... and 337.5 wraps back to north.
    """
    deg = deg % 360
    return CARDINALS[int((deg + 22.5) // 45) % 8]


def format_distance(meters: float) -> str:
    """Kilometres with two decimals from 1000 m up, whole metres below."""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.0f} meters"
