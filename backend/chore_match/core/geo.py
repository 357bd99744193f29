"""Geo Distance — spherical-earth distance between two coordinates.

Invariants:
    - Pure functions: no IO, deterministic
    - Distances in kilometers, Earth radius 6371 km
    - Symmetric, and 0.0 for identical points

Design Decisions:
    - Plain math over a GIS dependency: two formulas are all proximity filtering needs
    - equirectangular_km kept as the fast approximation (< 500 km); haversine_km is the default
"""

from math import atan2, cos, radians, sin, sqrt
from typing import Callable

from chore_match.core.domain_types import Coordinate, EARTH_RADIUS_KM

DistanceFn = Callable[[Coordinate, Coordinate], float]


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometers."""
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    dlat = lat2 - lat1
    dlon = radians(b.longitude - a.longitude)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def equirectangular_km(a: Coordinate, b: Coordinate) -> float:
    """Equirectangular approximation, accurate for short distances."""
    dlon = _wrapped_delta(b.longitude - a.longitude)
    x = radians(dlon) * cos(radians((a.latitude + b.latitude) / 2))
    y = radians(b.latitude - a.latitude)
    return sqrt(x * x + y * y) * EARTH_RADIUS_KM


def longitude_delta(lon1: float, lon2: float) -> float:
    """Absolute longitude difference in degrees, corrected for the antimeridian."""
    return abs(_wrapped_delta(lon2 - lon1))


def _wrapped_delta(delta: float) -> float:
    # Fold into [-180, 180] so 179 and -179 are 2 degrees apart, not 358
    delta = (delta + 180.0) % 360.0 - 180.0
    return delta


DISTANCE_FORMULAS: dict[str, DistanceFn] = {
    "haversine": haversine_km,
    "equirectangular": equirectangular_km,
}
