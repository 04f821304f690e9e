from __future__ import annotations

import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_M
from .model import GeofenceSettings, GeoPoint


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in meters."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def within_fence(point: GeoPoint, settings: Optional[GeofenceSettings]) -> bool:
    # No fence configured: every location is allowed.
    if settings is None:
        return True
    return haversine_meters(point, settings.center) <= settings.radius_m
