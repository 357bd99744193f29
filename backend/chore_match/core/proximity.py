"""Proximity Filter — radius check with a cheap bounding-box pre-rejection.

Invariants:
    - The bounding box never rejects a true match (sound pre-filter)
    - Only candidates inside the box pay for the trigonometric distance
    - Chores without a coordinate are always selected (globally visible)
    - radius_km > 0

Design Decisions:
    - Latitude threshold precomputed once per filter: radius / 111 km-per-degree
    - Longitude threshold uses the poleward edge of the latitude band, not the query
      latitude: candidates nearer the pole have shorter parallels, so this keeps the
      box a superset of the circle
    - If the band touches a pole every longitude is reachable: threshold widens to 180
"""

from dataclasses import dataclass, field
from math import cos, radians
from typing import Iterable

from chore_match.core.domain_types import (
    Chore, Coordinate, DEFAULT_PROXIMITY_RADIUS_KM, KM_PER_DEGREE_LATITUDE,
)
from chore_match.core.errors import InvalidInputError
from chore_match.core.geo import DistanceFn, haversine_km, longitude_delta

FULL_LONGITUDE_RANGE = 180.0


@dataclass(frozen=True)
class ProximityFilter:
    """Decides whether candidates lie within radius_km of a query point."""
    radius_km: float = DEFAULT_PROXIMITY_RADIUS_KM
    distance: DistanceFn = field(default=haversine_km, compare=False)
    latitude_threshold: float = field(init=False)

    def __post_init__(self):
        if self.radius_km is None or self.radius_km <= 0:
            raise InvalidInputError(
                f"radius_km must be positive, got {self.radius_km}", "radius_km",
            )
        object.__setattr__(
            self, "latitude_threshold", self.radius_km / KM_PER_DEGREE_LATITUDE,
        )

    def with_radius(self, radius_km: float) -> "ProximityFilter":
        return ProximityFilter(radius_km, self.distance)

    def longitude_threshold(self, query: Coordinate) -> float:
        """Max longitude delta (degrees) a match can have from query."""
        edge_latitude = abs(query.latitude) + self.latitude_threshold
        if edge_latitude >= 90.0:
            return FULL_LONGITUDE_RANGE
        cos_edge = cos(radians(edge_latitude))
        if cos_edge <= 0.0:
            return FULL_LONGITUDE_RANGE
        threshold = self.radius_km / (KM_PER_DEGREE_LATITUDE * cos_edge)
        return min(threshold, FULL_LONGITUDE_RANGE)

    def within_bounding_box(self, query: Coordinate, candidate: Coordinate) -> bool:
        return self._in_box(query, candidate, self.longitude_threshold(query))

    def accepts(self, query: Coordinate, candidate: Coordinate) -> bool:
        return self._matches(query, candidate, self.longitude_threshold(query))

    def select(self, query: Coordinate, chores: Iterable[Chore]) -> list[Chore]:
        """Keep chores near query, plus every chore without a coordinate."""
        lon_threshold = self.longitude_threshold(query)
        return [
            chore for chore in chores
            if chore.coordinate is None
            or self._matches(query, chore.coordinate, lon_threshold)
        ]

    # --- Helpers --------------------------------------------------------------

    def _in_box(self, query: Coordinate, candidate: Coordinate, lon_threshold: float) -> bool:
        if abs(query.latitude - candidate.latitude) > self.latitude_threshold:
            return False
        if lon_threshold >= FULL_LONGITUDE_RANGE:
            return True
        return longitude_delta(query.longitude, candidate.longitude) <= lon_threshold

    def _matches(self, query: Coordinate, candidate: Coordinate, lon_threshold: float) -> bool:
        if not self._in_box(query, candidate, lon_threshold):
            return False
        return self.distance(query, candidate) <= self.radius_km
