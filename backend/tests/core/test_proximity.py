"""Proximity filter tests — bounding box soundness and exact radius check.

Tests cover:
    - Radius validation and configurability
    - Latitude / longitude pre-rejection
    - Bounding box never rejects a true match (sampled around several latitudes)
    - Antimeridian wraparound and polar widening
    - Chores without coordinate always selected
"""

import math

import pytest

from chore_match.core.domain_types import AccountId, Chore, ChoreId, Coordinate
from chore_match.core.errors import InvalidInputError
from chore_match.core.geo import haversine_km, equirectangular_km
from chore_match.core.proximity import ProximityFilter, FULL_LONGITUDE_RANGE


def _chore(cid: str, coordinate: Coordinate | None) -> Chore:
    return Chore(
        id=ChoreId(cid), title="t", description="d", payment_amount=10.0,
        requester_id=AccountId("r"), coordinate=coordinate,
    )


def _destination(origin: Coordinate, bearing_deg: float, distance_km: float) -> Coordinate:
    """Point at distance/bearing from origin on a 6371 km sphere."""
    r = 6371.0
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)
    brg = math.radians(bearing_deg)
    d = distance_km / r
    lat2 = math.asin(
        math.sin(lat1) * math.cos(d) + math.cos(lat1) * math.sin(d) * math.cos(brg),
    )
    lon2 = lon1 + math.atan2(
        math.sin(brg) * math.sin(d) * math.cos(lat1),
        math.cos(d) - math.sin(lat1) * math.sin(lat2),
    )
    lon2_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return Coordinate(math.degrees(lat2), lon2_deg)


# --- Construction -------------------------------------------------------------

def test_default_radius_is_10_km():
    assert ProximityFilter().radius_km == 10.0


@pytest.mark.parametrize("radius", [0, -1])
def test_non_positive_radius_rejected(radius):
    with pytest.raises(InvalidInputError):
        ProximityFilter(radius)


def test_latitude_threshold_precomputed():
    assert ProximityFilter(11.1).latitude_threshold == pytest.approx(0.1)


def test_with_radius_keeps_distance_function():
    f = ProximityFilter(10, equirectangular_km).with_radius(25)
    assert f.radius_km == 25
    assert f.distance is equirectangular_km


# --- Bounding box ---------------------------------------------------------------

def test_latitude_box_rejects_without_distance_call():
    calls = []

    def spy(a, b):
        calls.append((a, b))
        return haversine_km(a, b)

    f = ProximityFilter(10, spy)
    assert not f.accepts(Coordinate(40.0, -73.0), Coordinate(41.0, -73.0))
    assert calls == []


def test_longitude_box_rejects_without_distance_call():
    calls = []

    def spy(a, b):
        calls.append((a, b))
        return haversine_km(a, b)

    f = ProximityFilter(10, spy)
    assert not f.accepts(Coordinate(40.0, -73.0), Coordinate(40.0, -72.0))
    assert calls == []


def test_longitude_threshold_grows_with_latitude():
    f = ProximityFilter(10)
    equator = f.longitude_threshold(Coordinate(0.0, 0.0))
    north = f.longitude_threshold(Coordinate(60.0, 0.0))
    assert equator == pytest.approx(10 / (111 * math.cos(math.radians(10 / 111))))
    assert north > 2 * equator * 0.99


def test_longitude_threshold_widens_at_poles():
    f = ProximityFilter(10)
    assert f.longitude_threshold(Coordinate(90.0, 0.0)) == FULL_LONGITUDE_RANGE
    assert f.longitude_threshold(Coordinate(-89.95, 0.0)) == FULL_LONGITUDE_RANGE


def test_polar_query_matches_across_all_longitudes():
    f = ProximityFilter(10)
    pole = Coordinate(89.99, 0.0)
    other_side = Coordinate(89.99, 180.0)
    assert haversine_km(pole, other_side) < 10
    assert f.accepts(pole, other_side)


def test_wraparound_across_antimeridian():
    f = ProximityFilter(10)
    assert f.accepts(Coordinate(10.0, 179.99), Coordinate(10.0, -179.99))


@pytest.mark.parametrize("latitude", [0.0, 40.0, 60.0, 75.0, 85.0, -45.0])
@pytest.mark.parametrize("bearing", range(0, 360, 15))
def test_bounding_box_never_rejects_true_match(latitude, bearing):
    f = ProximityFilter(10)
    origin = Coordinate(latitude, 120.0)
    candidate = _destination(origin, bearing, 9.99)
    assert haversine_km(origin, candidate) <= 10
    assert f.within_bounding_box(origin, candidate)
    assert f.accepts(origin, candidate)


@pytest.mark.parametrize("bearing", range(0, 360, 30))
def test_points_beyond_radius_rejected(bearing):
    f = ProximityFilter(10)
    origin = Coordinate(40.0, -73.0)
    assert not f.accepts(origin, _destination(origin, bearing, 10.5))


# --- select -------------------------------------------------------------------

def test_select_keeps_chores_without_coordinate():
    f = ProximityFilter(10)
    far_away = Coordinate(-33.86, 151.21)
    chores = [_chore("global", None), _chore("sydney", far_away)]
    selected = f.select(Coordinate(40.0, -73.0), chores)
    assert [c.id for c in selected] == ["global"]


def test_select_preserves_input_order():
    f = ProximityFilter(10)
    q = Coordinate(40.0, -73.0)
    chores = [
        _chore("a", Coordinate(40.01, -73.01)),
        _chore("b", None),
        _chore("c", Coordinate(40.5, -73.0)),
        _chore("d", Coordinate(40.0, -73.05)),
    ]
    assert [c.id for c in f.select(q, chores)] == ["a", "b", "d"]


def test_select_matches_accepts():
    f = ProximityFilter(10)
    q = Coordinate(51.5, -0.12)
    candidates = [
        _chore(str(i), _destination(q, bearing, dist))
        for i, (bearing, dist) in enumerate(
            [(0, 5), (45, 9.9), (90, 10.2), (200, 3), (300, 50)],
        )
    ]
    expected = [c.id for c in candidates if f.accepts(q, c.coordinate)]
    assert [c.id for c in f.select(q, candidates)] == expected == ["0", "1", "3"]
