import math
from typing import Tuple

# Mean earth radius, metres
EARTH_RADIUS_M = 6371008.8

LatLon = Tuple[float, float]


def distance(center: LatLon, point: LatLon) -> float:
    """Great-circle distance in metres (haversine)."""
    lat1, lon1 = center
    lat2, lon2 = point
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_within(center: LatLon, radius: float, point: LatLon) -> bool:
    return distance(center, point) <= radius
