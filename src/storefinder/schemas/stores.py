"""Pydantic request/response models for store endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import (
    MAX_STORE_NAME_LENGTH,
    Coordinate,
    NewStore,
    SearchResult,
    Store,
    StoreCategory,
    StoreStatus,
)


class StoreCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_STORE_NAME_LENGTH)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    status: StoreStatus
    type: StoreCategory
    max_delivery_distance: float = Field(..., ge=0.0, description="Delivery radius in kilometres.")

    def to_domain(self) -> NewStore:
        return NewStore(
            name=self.name,
            location=Coordinate(self.latitude, self.longitude),
            status=self.status,
            category=self.type,
            max_delivery_distance_km=self.max_delivery_distance,
        )


class StoreModel(BaseModel):
    id: Optional[int] = None
    name: str
    latitude: float
    longitude: float
    status: StoreStatus
    type: StoreCategory
    max_delivery_distance: float
    distance_km: Optional[float] = Field(
        default=None, description="Distance from the search center, present on search results."
    )

    @classmethod
    def from_store(cls, store: Store, distance_km: Optional[float] = None) -> "StoreModel":
        return cls(
            id=store.id,
            name=store.name,
            latitude=store.location.latitude,
            longitude=store.location.longitude,
            status=store.status,
            type=store.category,
            max_delivery_distance=store.max_delivery_distance_km,
            distance_km=distance_km,
        )

    @classmethod
    def from_result(cls, result: SearchResult) -> "StoreModel":
        return cls.from_store(result.store, distance_km=round(result.distance_km, 3))
