import math
import random

import pytest

from storefinder.errors import InvalidInputError
from storefinder.models.domain import Coordinate
from storefinder.services.geospatial import BOX_MARGIN_DEGREES, EARTH_RADIUS_KM, bounding_box, distance_km


def _destination(center: Coordinate, bearing_deg: float, distance: float) -> Coordinate:
    """Point reached by travelling ``distance`` km from ``center`` along ``bearing_deg``."""
    delta = distance / EARTH_RADIUS_KM
    theta = math.radians(bearing_deg)
    phi1 = math.radians(center.latitude)
    lambda1 = math.radians(center.longitude)

    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    longitude = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return Coordinate(math.degrees(phi2), longitude)


SAMPLE_POINTS = [
    Coordinate(51.5074, 0.1278),
    Coordinate(90.0, 0.0),
    Coordinate(-90.0, 45.0),
    Coordinate(0.0, 180.0),
    Coordinate(0.0, -180.0),
    Coordinate(-33.8688, 151.2093),
    Coordinate(21.5, 39.2),
]


@pytest.mark.parametrize("point", SAMPLE_POINTS)
def test_distance_to_self_is_exactly_zero(point: Coordinate):
    assert distance_km(point, point) == 0.0


def test_distance_is_symmetric_for_poles_and_antipodes():
    pairs = [(a, b) for a in SAMPLE_POINTS for b in SAMPLE_POINTS]
    pairs += [
        (Coordinate(10.0, 20.0), Coordinate(-10.0, -160.0)),
        (Coordinate(90.0, 0.0), Coordinate(-90.0, 0.0)),
        (Coordinate(45.0, 0.0), Coordinate(45.0, 0.00000000001)),
    ]
    for a, b in pairs:
        forward = distance_km(a, b)
        backward = distance_km(b, a)
        assert not math.isnan(forward)
        assert forward == backward


def test_antipodal_distance_is_half_circumference():
    distance = distance_km(Coordinate(10.0, 20.0), Coordinate(-10.0, -160.0))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-6)


def test_near_identical_points_do_not_produce_nan():
    a = Coordinate(51.5074, 0.1278)
    b = Coordinate(51.5074, 0.1278000000001)
    distance = distance_km(a, b)
    assert not math.isnan(distance)
    assert 0.0 <= distance < 0.001


def test_short_london_distance():
    distance = distance_km(Coordinate(51.5074, 0.1278), Coordinate(51.5075, 0.1280))
    assert distance == pytest.approx(0.018, abs=0.005)


def test_distance_uses_configured_earth_radius():
    a, b = Coordinate(0.0, 0.0), Coordinate(0.0, 1.0)
    assert distance_km(a, b, earth_radius_km=1.0) == pytest.approx(math.radians(1.0))


def test_bounding_box_matches_degree_deltas_at_equator():
    box = bounding_box(Coordinate(0.0, 0.0), 111.19492664455873)
    edge = 1.0 + BOX_MARGIN_DEGREES
    assert box.min_lat == pytest.approx(-edge)
    assert box.max_lat == pytest.approx(edge)
    assert box.min_lng == pytest.approx(-edge)
    assert box.max_lng == pytest.approx(edge)


def test_bounding_box_contains_every_point_within_radius():
    rng = random.Random(1234)
    for _ in range(2000):
        center = Coordinate(rng.uniform(-89.5, 89.5), rng.uniform(-180.0, 180.0))
        radius = rng.choice([0.5, 5.0, 10.0, 50.0, 500.0, 3000.0]) * rng.uniform(0.1, 1.0)
        box = bounding_box(center, radius)
        point = _destination(center, rng.uniform(0.0, 360.0), radius * rng.uniform(0.0, 0.999))
        if distance_km(center, point) <= radius:
            assert box.contains(point), (center, radius, point, box)


@pytest.mark.parametrize("bearing", [0.0, 90.0, 180.0, 270.0])
def test_bounding_box_contains_points_on_axis_at_high_latitude(bearing: float):
    center = Coordinate(80.0, 10.0)
    box = bounding_box(center, 800.0)
    point = _destination(center, bearing, 799.0)
    assert box.contains(point)


def test_bounding_box_at_north_pole_spans_all_longitudes():
    box = bounding_box(Coordinate(90.0, 0.0), 5.0)
    assert (box.min_lng, box.max_lng) == (-180.0, 180.0)
    assert box.max_lat == 90.0
    assert box.min_lat == pytest.approx(90.0 - math.degrees(5.0 / EARTH_RADIUS_KM) - BOX_MARGIN_DEGREES)
    assert all(math.isfinite(value) for value in (box.min_lat, box.max_lat, box.min_lng, box.max_lng))


def test_bounding_box_reaching_south_pole_spans_all_longitudes():
    box = bounding_box(Coordinate(-89.99, 30.0), 5.0)
    assert box.min_lat == -90.0
    assert (box.min_lng, box.max_lng) == (-180.0, 180.0)


def test_bounding_box_across_antimeridian_spans_all_longitudes():
    box = bounding_box(Coordinate(0.0, 179.99), 10.0)
    assert (box.min_lng, box.max_lng) == (-180.0, 180.0)
    assert box.contains(Coordinate(0.0, -179.99))


def test_zero_radius_is_a_margin_sized_box_around_the_center():
    center = Coordinate(51.5074, 0.1278)
    box = bounding_box(center, 0.0)
    assert box.max_lat - box.min_lat == pytest.approx(2 * BOX_MARGIN_DEGREES)
    assert box.min_lng < center.longitude < box.max_lng
    assert box.max_lng - box.min_lng < 1e-3
    assert box.contains(Coordinate(center.latitude, center.longitude + 1e-9))


def test_negative_radius_is_rejected():
    with pytest.raises(InvalidInputError):
        bounding_box(Coordinate(0.0, 0.0), -1.0)


@pytest.mark.parametrize(
    "latitude, longitude",
    [(90.1, 0.0), (-90.1, 0.0), (0.0, 180.5), (0.0, -181.0), (float("nan"), 0.0)],
)
def test_out_of_range_coordinates_are_rejected(latitude: float, longitude: float):
    with pytest.raises(InvalidInputError):
        Coordinate(latitude, longitude)
