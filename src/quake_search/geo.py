"""Geographic utilities."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points on Earth."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push ``a`` a hair past 1.0 for antipodal points.
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(a, 1.0)))


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """True when the pair lies within [-90, 90] x [-180, 180]."""
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0
