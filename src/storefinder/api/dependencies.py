"""FastAPI dependencies: service wiring and API-key authentication."""

from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, status

from ..config import settings
from ..data.postcodes_repository import (
    InMemoryPostcodeRepository,
    PostcodeRepository,
    SupabasePostcodeRepository,
)
from ..data.stores_repository import InMemoryStoreRepository, StoreRepository, SupabaseStoreRepository
from ..db.supabase import get_supabase_client
from ..services.postcodes import PostcodeResolver
from ..services.stores import StoreSearchService


@lru_cache(maxsize=1)
def get_store_repository() -> StoreRepository:
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - stores are kept in memory only")
        return InMemoryStoreRepository()
    return SupabaseStoreRepository(client, table=settings.stores_table, page_size=settings.supabase_page_size)


@lru_cache(maxsize=1)
def get_postcode_repository() -> PostcodeRepository:
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - postcode lookups use an in-memory table")
        return InMemoryPostcodeRepository()
    return SupabasePostcodeRepository(client, table=settings.postcodes_table)


def get_store_service() -> StoreSearchService:
    return StoreSearchService(
        get_store_repository(),
        PostcodeResolver(get_postcode_repository()),
        earth_radius_km=settings.earth_radius_km,
        default_radius_km=settings.default_search_radius_km,
        deliverable_scan_radius_km=settings.deliverable_scan_radius_km,
    )


def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Reject requests whose X-API-Key header does not match a configured key."""
    if not settings.api_keys:
        return
    if x_api_key and any(secrets.compare_digest(x_api_key, key) for key in settings.api_keys):
        return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
    )
