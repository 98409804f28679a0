"""Domain models for stores, coordinates and postcode records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import InvalidInputError

MAX_STORE_NAME_LENGTH = 255


class StoreStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class StoreCategory(str, Enum):
    TAKEAWAY = "takeaway"
    SHOP = "shop"
    RESTAURANT = "restaurant"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise InvalidInputError(f"Coordinate must be finite: ({self.latitude}, {self.longitude})")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidInputError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidInputError(f"Longitude out of range [-180, 180]: {self.longitude}")


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned latitude/longitude rectangle enclosing a search disk."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, point: Coordinate) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lng <= point.longitude <= self.max_lng
        )


@dataclass(frozen=True, slots=True)
class NewStore:
    """Validated attributes for a store that has not been persisted yet."""

    name: str
    location: Coordinate
    status: StoreStatus
    category: StoreCategory
    max_delivery_distance_km: float

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidInputError("Store name must not be empty.")
        if len(self.name) > MAX_STORE_NAME_LENGTH:
            raise InvalidInputError(f"Store name longer than {MAX_STORE_NAME_LENGTH} characters.")
        if not math.isfinite(self.max_delivery_distance_km) or self.max_delivery_distance_km < 0:
            raise InvalidInputError(
                f"max_delivery_distance_km must be a non-negative number: {self.max_delivery_distance_km}"
            )


@dataclass(frozen=True, slots=True)
class Store:
    """A persisted store."""

    id: Optional[int]
    name: str
    location: Coordinate
    status: StoreStatus
    category: StoreCategory
    max_delivery_distance_km: float


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A store annotated with its distance from the search center."""

    store: Store
    distance_km: float


@dataclass(frozen=True, slots=True)
class PostcodeRecord:
    postcode: str
    location: Coordinate
