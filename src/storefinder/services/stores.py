"""Store search orchestration: nearby-by-coordinate, deliverable-by-postcode, create."""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..data.stores_repository import StoreRepository
from ..errors import InvalidInputError, PostcodeNotFoundError
from ..models.domain import Coordinate, NewStore, SearchResult, Store
from .geospatial import EARTH_RADIUS_KM, bounding_box
from .postcodes import PostcodeResolver
from .proximity import FixedThreshold, PerStoreThreshold, ProximityQuery

DEFAULT_RADIUS_KM = 10.0

logger = logging.getLogger(__name__)


class StoreSearchService:
    """Public entry point for store searches and store creation.

    ``default_radius_km`` applies to nearby searches without an explicit radius.
    ``deliverable_scan_radius_km`` only sizes the pre-filter box of deliverable
    searches; each store's own delivery distance decides acceptance.
    """

    def __init__(
        self,
        stores: StoreRepository,
        resolver: PostcodeResolver,
        *,
        earth_radius_km: float = EARTH_RADIUS_KM,
        default_radius_km: float = DEFAULT_RADIUS_KM,
        deliverable_scan_radius_km: float = DEFAULT_RADIUS_KM,
    ) -> None:
        self.stores = stores
        self.resolver = resolver
        self.earth_radius_km = earth_radius_km
        self.default_radius_km = default_radius_km
        self.deliverable_scan_radius_km = deliverable_scan_radius_km
        self.query = ProximityQuery(stores, earth_radius_km=earth_radius_km)

    def nearby(self, center: Coordinate, radius_km: Optional[float] = None) -> list[SearchResult]:
        radius = self.default_radius_km if radius_km is None else float(radius_km)
        if math.isnan(radius) or radius < 0:
            raise InvalidInputError(f"Radius must be a non-negative number: {radius_km}")

        box = bounding_box(center, radius, earth_radius_km=self.earth_radius_km)
        return self.query.run(center, box, FixedThreshold(radius))

    def deliverable(self, postcode: str) -> list[SearchResult]:
        center = self.resolver.resolve(postcode)
        if center is None:
            raise PostcodeNotFoundError(postcode)

        box = bounding_box(center, self.deliverable_scan_radius_km, earth_radius_km=self.earth_radius_km)
        return self.query.run(center, box, PerStoreThreshold())

    def create(self, new_store: NewStore) -> Store:
        store = self.stores.add(new_store)
        logger.info(f"Created store {store.id} '{store.name}' ({store.category.value}, {store.status.value})")
        return store
