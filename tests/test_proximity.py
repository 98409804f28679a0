import math
import random

import pytest

from storefinder.data.stores_repository import InMemoryStoreRepository
from storefinder.errors import InvalidInputError
from storefinder.models.domain import Coordinate, Store, StoreCategory, StoreStatus
from storefinder.services.geospatial import EARTH_RADIUS_KM, bounding_box
from storefinder.services.proximity import (
    FixedThreshold,
    PerStoreThreshold,
    ProximityQuery,
    select_within,
)

KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180.0
CENTER = Coordinate(0.0, 0.0)


def _store(
    sid: int,
    lat: float,
    lon: float,
    max_delivery: float = 5.0,
    status: StoreStatus = StoreStatus.OPEN,
) -> Store:
    return Store(
        id=sid,
        name=f"Store {sid}",
        location=Coordinate(lat, lon),
        status=status,
        category=StoreCategory.SHOP,
        max_delivery_distance_km=max_delivery,
    )


def _store_north_of_center(sid: int, km: float, max_delivery: float = 5.0) -> Store:
    return _store(sid, km / KM_PER_DEGREE, 0.0, max_delivery=max_delivery)


def test_fixed_threshold_orders_results_by_distance():
    stores = [
        _store_north_of_center(1, 3.0),
        _store_north_of_center(2, 1.0),
        _store_north_of_center(3, 2.0),
    ]

    results = select_within(CENTER, stores, FixedThreshold(10.0))

    assert [result.store.id for result in results] == [2, 3, 1]
    assert [result.distance_km for result in results] == pytest.approx([1.0, 2.0, 3.0], abs=1e-3)


def test_fixed_threshold_excludes_stores_beyond_radius():
    stores = [_store_north_of_center(1, 4.9), _store_north_of_center(2, 5.1)]

    results = select_within(CENTER, stores, FixedThreshold(5.0))

    assert [result.store.id for result in results] == [1]


def test_equal_distances_keep_input_order():
    stores = [_store(sid, 0.01, 0.0) for sid in (7, 3, 5)]

    results = select_within(CENTER, stores, FixedThreshold(10.0))

    assert [result.store.id for result in results] == [7, 3, 5]


def test_per_store_threshold_uses_each_store_delivery_distance():
    stores = [
        _store_north_of_center(1, 6.0, max_delivery=5.0),
        _store_north_of_center(2, 6.0, max_delivery=7.0),
        _store_north_of_center(3, 0.5, max_delivery=0.0),
    ]

    results = select_within(CENTER, stores, PerStoreThreshold())

    assert [result.store.id for result in results] == [2]


def test_store_at_search_center_with_zero_delivery_distance_is_accepted():
    results = select_within(CENTER, [_store(1, 0.0, 0.0, max_delivery=0.0)], PerStoreThreshold())
    assert [result.distance_km for result in results] == [0.0]


def test_closed_stores_are_still_returned():
    closed = _store(1, 0.001, 0.0, status=StoreStatus.CLOSED)

    results = select_within(CENTER, [closed], FixedThreshold(1.0))

    assert [result.store for result in results] == [closed]


def test_negative_fixed_threshold_is_rejected():
    with pytest.raises(InvalidInputError):
        FixedThreshold(-0.1)


def test_query_only_reads_candidates_inside_the_box():
    class RecordingRepository(InMemoryStoreRepository):
        boxes = []

        def within_bounds(self, box):
            self.boxes.append(box)
            return super().within_bounds(box)

    repository = RecordingRepository([_store_north_of_center(1, 1.0), _store_north_of_center(2, 50.0)])
    query = ProximityQuery(repository)
    box = bounding_box(CENTER, 10.0)

    results = query.run(CENTER, box, FixedThreshold(10.0))

    assert repository.boxes == [box]
    assert [result.store.id for result in results] == [1]


def _random_stores(rng: random.Random, center: Coordinate, count: int) -> list[Store]:
    stores = []
    for sid in range(1, count + 1):
        lat = max(-90.0, min(90.0, center.latitude + rng.uniform(-0.5, 0.5)))
        lon = max(-180.0, min(180.0, center.longitude + rng.uniform(-0.8, 0.8)))
        stores.append(_store(sid, lat, lon, max_delivery=rng.uniform(0.0, 40.0)))
    return stores


@pytest.mark.parametrize("seed", range(10))
def test_box_prefilter_matches_exact_filter_over_full_collection(seed: int):
    rng = random.Random(seed)
    center = Coordinate(rng.uniform(-80.0, 80.0), rng.uniform(-170.0, 170.0))
    stores = _random_stores(rng, center, 300)
    # Separations below what acos can resolve report a distance of exactly 0.0 km.
    for sid, (dlat, dlon) in enumerate([(0.0, 1e-9), (1e-9, 0.0), (-3e-8, 2e-8), (4e-7, -4e-7)], start=301):
        stores.append(_store(sid, center.latitude + dlat, center.longitude + dlon))
    repository = InMemoryStoreRepository(stores)
    query = ProximityQuery(repository)

    for radius in (0.0, 1e-6, 1e-3, 1.0, 5.0, 10.0, 25.0, 60.0):
        policy = FixedThreshold(radius)
        prefiltered = query.run(center, bounding_box(center, radius), policy)
        exhaustive = select_within(center, repository.all(), policy)
        assert prefiltered == exhaustive

    widest_delivery = max(store.max_delivery_distance_km for store in repository.all())
    policy = PerStoreThreshold()
    prefiltered = query.run(center, bounding_box(center, widest_delivery), policy)
    assert prefiltered == select_within(center, repository.all(), policy)


def test_zero_radius_finds_store_indistinguishable_from_center():
    center = Coordinate(51.5074, 0.1278)
    store = _store(1, 51.5074, 0.1278 + 1e-9)
    repository = InMemoryStoreRepository([store])
    policy = FixedThreshold(0.0)

    prefiltered = ProximityQuery(repository).run(center, bounding_box(center, 0.0), policy)

    assert [result.store for result in prefiltered] == [store]
    assert prefiltered == select_within(center, repository.all(), policy)
