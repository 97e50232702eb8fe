"""Distance helpers for radar queries."""

from __future__ import annotations

import math
from typing import Optional

from icebreaker.domain.proximity.models import Coordinates, GeoPoint, Offset

EARTH_RADIUS_M = 6_371_000


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in meters."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: Coordinates, b: Coordinates) -> Optional[float]:
    """Distance in metres, or None when the two points use different representations."""
    if isinstance(a, GeoPoint) and isinstance(b, GeoPoint):
        return haversine(a.lat, a.lon, b.lat, b.lon)
    if isinstance(a, Offset) and isinstance(b, Offset):
        return math.hypot(a.x - b.x, a.y - b.y)
    return None
