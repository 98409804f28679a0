"""Store creation and search endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...schemas.stores import StoreCreateRequest, StoreModel
from ...models.domain import Coordinate
from ...services.stores import StoreSearchService
from ..dependencies import get_store_service, require_api_key

router = APIRouter(prefix="/stores", tags=["stores"], dependencies=[Depends(require_api_key)])


@router.post("", response_model=StoreModel, status_code=status.HTTP_201_CREATED)
def create_store(
    payload: StoreCreateRequest,
    service: StoreSearchService = Depends(get_store_service),
) -> StoreModel:
    store = service.create(payload.to_domain())
    return StoreModel.from_store(store)


@router.get("/nearby", response_model=List[StoreModel], status_code=status.HTTP_200_OK)
def nearby_stores(
    latitude: float = Query(..., ge=-90.0, le=90.0, description="Search center latitude"),
    longitude: float = Query(..., ge=-180.0, le=180.0, description="Search center longitude"),
    radius: float | None = Query(default=None, ge=0.0, description="Search radius in kilometres"),
    service: StoreSearchService = Depends(get_store_service),
) -> List[StoreModel]:
    results = service.nearby(Coordinate(latitude, longitude), radius)
    return [StoreModel.from_result(result) for result in results]


@router.get("/deliverable", response_model=List[StoreModel], status_code=status.HTTP_200_OK)
def deliverable_stores(
    postcode: str = Query(..., min_length=1, description="Postcode to deliver to"),
    service: StoreSearchService = Depends(get_store_service),
) -> List[StoreModel]:
    results = service.deliverable(postcode)
    return [StoreModel.from_result(result) for result in results]
