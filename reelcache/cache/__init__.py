"""Local cache stores for movie data and image assets."""

from __future__ import annotations

from .backends import KeyValueMovieCache, MovieCacheBackend, build_movie_cache
from .images import AssetType, ImageCache
from .key_value import CacheKey, ExpiringKeyValueStore
from .relational import RelationalMovieCache

__all__ = [
    "AssetType",
    "CacheKey",
    "ExpiringKeyValueStore",
    "ImageCache",
    "KeyValueMovieCache",
    "MovieCacheBackend",
    "RelationalMovieCache",
    "build_movie_cache",
]
