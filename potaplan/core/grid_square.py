"""Maidenhead locator and great-circle distance helpers."""

import math
from typing import Optional

EARTH_RADIUS_MILES = 3959


def calculate_grid_square(lat: float, lon: float) -> str:
    """6-character Maidenhead locator (field, square, subsquare), e.g. ``DN44xk``."""
    adj_lon = lon + 180
    adj_lat = lat + 90

    # Field: 20 x 10 degrees
    field = chr(65 + int(adj_lon // 20)) + chr(65 + int(adj_lat // 10))

    # Square: 2 x 1 degrees
    adj_lon %= 20
    adj_lat %= 10
    square = f"{int(adj_lon // 2)}{int(adj_lat // 1)}"

    # Subsquare: 5 x 2.5 minutes
    adj_lon %= 2
    adj_lat %= 1
    subsquare = chr(97 + int((adj_lon / 2) * 24)) + chr(97 + int(adj_lat * 24))

    return field + square + subsquare


def grid_to_coordinates(grid: str) -> Optional[tuple[float, float]]:
    """Center (lat, lon) of a 4- or 6-character locator, or None if too short."""
    g = grid.strip().upper()
    if len(g) < 4:
        return None

    lon = (ord(g[0]) - 65) * 20 + int(g[2]) * 2 - 180
    lat = (ord(g[1]) - 65) * 10 + int(g[3]) - 90

    if len(g) >= 6:
        lon += (ord(g[4]) - 65 + 0.5) * (2 / 24)
        lat += (ord(g[5]) - 65 + 0.5) * (1 / 24)
    else:
        lon += 1
        lat += 0.5

    return lat, lon


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
