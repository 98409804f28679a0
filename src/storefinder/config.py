"""Application configuration and settings management."""

from pathlib import Path
from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFINDER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Store Finder API"
    api_prefix: str = "/api"
    earth_radius_km: float = Field(default=6371.0, gt=0.0, description="Mean Earth radius used for distances.")
    default_search_radius_km: float = Field(
        default=10.0,
        ge=0.0,
        description="Radius applied to nearby searches when the caller does not supply one.",
    )
    deliverable_scan_radius_km: float = Field(
        default=10.0,
        ge=0.0,
        description="Radius of the pre-filter box for deliverable searches. Not an acceptance threshold.",
    )
    api_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Accepted X-API-Key values. Authentication is disabled when empty.",
    )
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("http://localhost:5173", "http://127.0.0.1:5173"),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    stores_table: str = "stores"
    postcodes_table: str = "postcodes"
    supabase_page_size: int = Field(
        default=1000,
        ge=1,
        description="Rows requested per page; keep at or below the PostgREST max-rows setting.",
    )

    # Postcode import
    postcode_import_url: Optional[str] = Field(
        default=None,
        description="URL of the zipped postcode CSV to import.",
    )
    postcode_import_dir: Path = Field(
        default=Path("data/import"),
        description="Working directory for downloaded and extracted postcode files.",
    )
    postcode_csv_filename: str = Field(
        default="postcodes.csv",
        description="Name of the CSV file inside the downloaded archive.",
    )
    postcode_import_chunk_size: int = Field(default=500, ge=1)
    http_timeout_seconds: float = Field(default=60.0, gt=0.0)

    @field_validator("postcode_import_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("api_keys", "frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
