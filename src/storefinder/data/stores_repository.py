"""Store table access: bounding-box scans and inserts."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Protocol, Sequence

from ..errors import StorageUnavailableError
from ..models.domain import BoundingBox, Coordinate, NewStore, Store, StoreCategory, StoreStatus

logger = logging.getLogger(__name__)

# Supabase projects return at most 1000 rows per request by default.
PAGE_SIZE = 1000


class StoreRepository(Protocol):
    def add(self, new_store: NewStore) -> Store:
        ...

    def within_bounds(self, box: BoundingBox) -> Sequence[Store]:
        """Stores whose coordinates fall inside ``box`` (inclusive), ordered by id."""
        ...


def store_to_row(new_store: NewStore) -> dict[str, Any]:
    return {
        "name": new_store.name,
        "latitude": new_store.location.latitude,
        "longitude": new_store.location.longitude,
        "status": new_store.status.value,
        "type": new_store.category.value,
        "max_delivery_distance": new_store.max_delivery_distance_km,
    }


def row_to_store(row: dict[str, Any]) -> Store:
    return Store(
        id=int(row["id"]) if row.get("id") is not None else None,
        name=str(row["name"]),
        location=Coordinate(float(row["latitude"]), float(row["longitude"])),
        status=StoreStatus(str(row.get("status") or StoreStatus.OPEN.value).lower()),
        category=StoreCategory(str(row["type"]).lower()),
        max_delivery_distance_km=float(row["max_delivery_distance"]),
    )


class InMemoryStoreRepository:
    """List-backed store table, used when no database is configured."""

    def __init__(self, stores: Iterable[Store] = ()) -> None:
        self._lock = threading.Lock()
        self._stores: list[Store] = []
        self._next_id = 1
        for store in stores:
            self._append(store)

    def _append(self, store: Store) -> Store:
        if store.id is None:
            store = Store(
                id=self._next_id,
                name=store.name,
                location=store.location,
                status=store.status,
                category=store.category,
                max_delivery_distance_km=store.max_delivery_distance_km,
            )
        self._next_id = max(self._next_id, store.id + 1)
        self._stores.append(store)
        self._stores.sort(key=lambda item: item.id)
        return store

    def add(self, new_store: NewStore) -> Store:
        with self._lock:
            return self._append(
                Store(
                    id=None,
                    name=new_store.name,
                    location=new_store.location,
                    status=new_store.status,
                    category=new_store.category,
                    max_delivery_distance_km=new_store.max_delivery_distance_km,
                )
            )

    def all(self) -> tuple[Store, ...]:
        with self._lock:
            return tuple(self._stores)

    def within_bounds(self, box: BoundingBox) -> Sequence[Store]:
        with self._lock:
            return [store for store in self._stores if box.contains(store.location)]


class SupabaseStoreRepository:
    """Store table backed by Supabase (PostgREST range filters on indexed lat/lng columns)."""

    def __init__(self, client: Any, table: str = "stores", page_size: int = PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.client = client
        self.table = table
        self.page_size = page_size

    def add(self, new_store: NewStore) -> Store:
        try:
            response = self.client.table(self.table).insert(store_to_row(new_store)).execute()
        except Exception as exc:
            logger.error(f"Failed to insert store '{new_store.name}': {exc}")
            raise StorageUnavailableError(f"Failed to insert store: {exc}") from exc

        if not response.data:
            raise StorageUnavailableError("Store insert returned no row.")
        return row_to_store(response.data[0])

    def within_bounds(self, box: BoundingBox) -> Sequence[Store]:
        rows: list[dict] = []
        start = 0
        # PostgREST caps rows per response, so read the box in id-ordered pages.
        while True:
            try:
                response = (
                    self.client.table(self.table)
                    .select("*")
                    .gte("latitude", box.min_lat)
                    .lte("latitude", box.max_lat)
                    .gte("longitude", box.min_lng)
                    .lte("longitude", box.max_lng)
                    .order("id")
                    .range(start, start + self.page_size - 1)
                    .execute()
                )
            except Exception as exc:
                logger.error(f"Store bounding-box query failed: {exc}")
                raise StorageUnavailableError(f"Store query failed: {exc}") from exc

            page = response.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size

        stores: list[Store] = []
        for row in rows:
            try:
                stores.append(row_to_store(row))
            except (KeyError, ValueError, TypeError) as e:
                # Skip invalid rows but continue processing
                logger.warning(f"Skipping invalid store row {row.get('id')}: {e}")
        return stores
