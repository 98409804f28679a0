"""Two-phase proximity search: bounding-box scan, then exact distance filtering."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Union

from ..data.stores_repository import StoreRepository
from ..errors import InvalidInputError
from ..models.domain import BoundingBox, Coordinate, SearchResult, Store
from .geospatial import EARTH_RADIUS_KM, distance_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FixedThreshold:
    """Accept stores within a caller-supplied radius."""

    radius_km: float

    def __post_init__(self) -> None:
        if math.isnan(self.radius_km) or self.radius_km < 0:
            raise InvalidInputError(f"Radius must be a non-negative number: {self.radius_km}")

    def limit_for(self, store: Store) -> float:
        return self.radius_km


@dataclass(frozen=True, slots=True)
class PerStoreThreshold:
    """Accept stores whose own delivery radius reaches the search center."""

    def limit_for(self, store: Store) -> float:
        return store.max_delivery_distance_km


ThresholdPolicy = Union[FixedThreshold, PerStoreThreshold]


def select_within(
    center: Coordinate,
    candidates: Iterable[Store],
    policy: ThresholdPolicy,
    *,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> list[SearchResult]:
    """Keep candidates accepted by ``policy`` and order them by distance.

    The sort is stable, so stores at equal distance keep their input order.
    """

    results: list[SearchResult] = []
    for store in candidates:
        distance = distance_km(center, store.location, earth_radius_km=earth_radius_km)
        if distance <= policy.limit_for(store):
            results.append(SearchResult(store=store, distance_km=distance))
    results.sort(key=lambda result: result.distance_km)
    return results


class ProximityQuery:
    """Narrow the store collection with a bounding box, then filter exactly."""

    def __init__(self, repository: StoreRepository, *, earth_radius_km: float = EARTH_RADIUS_KM) -> None:
        self.repository = repository
        self.earth_radius_km = earth_radius_km

    def run(self, center: Coordinate, box: BoundingBox, policy: ThresholdPolicy) -> list[SearchResult]:
        candidates = self.repository.within_bounds(box)
        results = select_within(center, candidates, policy, earth_radius_km=self.earth_radius_km)
        logger.debug(
            f"Proximity query at ({center.latitude:.6f}, {center.longitude:.6f}) "
            f"box=[{box.min_lat:.6f}, {box.max_lat:.6f}] x [{box.min_lng:.6f}, {box.max_lng:.6f}] "
            f"policy={policy}: {len(candidates)} candidates, {len(results)} matched"
        )
        return results
