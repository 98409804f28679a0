"""Postcode lookup table access."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..errors import StorageUnavailableError
from ..models.domain import Coordinate, PostcodeRecord

logger = logging.getLogger(__name__)


class PostcodeRepository(Protocol):
    def lookup(self, postcode: str) -> Optional[Coordinate]:
        """Exact match on an already-normalized postcode key."""
        ...

    def insert_many(self, records: Sequence[PostcodeRecord]) -> None:
        ...


class InMemoryPostcodeRepository:
    def __init__(self, records: Iterable[PostcodeRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, Coordinate] = {record.postcode: record.location for record in records}

    def lookup(self, postcode: str) -> Optional[Coordinate]:
        with self._lock:
            return self._records.get(postcode)

    def insert_many(self, records: Sequence[PostcodeRecord]) -> None:
        with self._lock:
            for record in records:
                self._records[record.postcode] = record.location

    def __len__(self) -> int:
        return len(self._records)


class SupabasePostcodeRepository:
    def __init__(self, client: Any, table: str = "postcodes") -> None:
        self.client = client
        self.table = table

    def lookup(self, postcode: str) -> Optional[Coordinate]:
        try:
            response = (
                self.client.table(self.table)
                .select("latitude,longitude")
                .eq("postcode", postcode)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.error(f"Postcode lookup failed for '{postcode}': {exc}")
            raise StorageUnavailableError(f"Postcode lookup failed: {exc}") from exc

        if not response.data:
            return None
        row = response.data[0]
        return Coordinate(float(row["latitude"]), float(row["longitude"]))

    def insert_many(self, records: Sequence[PostcodeRecord]) -> None:
        if not records:
            return
        rows = [
            {
                "postcode": record.postcode,
                "latitude": record.location.latitude,
                "longitude": record.location.longitude,
            }
            for record in records
        ]
        try:
            self.client.table(self.table).upsert(rows, on_conflict="postcode").execute()
        except Exception as exc:
            raise StorageUnavailableError(f"Failed to insert {len(rows)} postcodes: {exc}") from exc
