"""Application configuration models."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CACHE_TTL_SECONDS = 86_400


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelCache", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    data_source: Literal["remote", "mock"] = Field(
        default="remote", alias="DATA_SOURCE"
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./reelcache.db", alias="DATABASE_URL"
    )
    cache_backend: Literal["relational", "key_value"] = Field(
        default="relational", alias="CACHE_BACKEND"
    )
    cache_version: str = Field(default="1.0", alias="CACHE_VERSION")
    cache_ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS, alias="CACHE_TTL", ge=1
    )
    image_cache_dir: Path = Field(default=Path("./cache"), alias="IMAGE_CACHE_DIR")

    category_movie_limit: int = Field(
        default=10, alias="CATEGORY_MOVIE_LIMIT", ge=1, le=100
    )
    cast_limit: int = Field(default=10, alias="CAST_LIMIT", ge=0, le=100)
    background_refresh: bool = Field(default=True, alias="BACKGROUND_REFRESH")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("cache_backend", mode="before")
    @classmethod
    def _parse_cache_backend(cls, value: object) -> object:
        """Accept the common spellings of the backend names."""

        if not isinstance(value, str):
            return value
        slug = value.strip().replace("-", "_").lower()
        if slug in {"kv", "keyvalue", "flat"}:
            return "key_value"
        if slug in {"sql", "sqlite", "orm"}:
            return "relational"
        return slug

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @property
    def cache_ttl(self) -> timedelta:
        """Return the cache expiry window as a ``timedelta``."""

        return timedelta(seconds=self.cache_ttl_seconds)

    @property
    def use_mock_data(self) -> bool:
        """Whether canned data should replace the TMDB API."""

        return self.data_source == "mock" or not self.tmdb_api_key

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
