"""Movie cache backends selectable at construction time."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import CachedMovieDetailSnapshot, CachedMoviesSnapshot
from ..utils import TTL, utcnow
from .key_value import CacheKey, ExpiringKeyValueStore
from .relational import RelationalMovieCache


class MovieCacheBackend(Protocol):
    """Typed persistence operations the local data store relies on."""

    async def initialize(self) -> None: ...

    async def save_category(
        self, category_id: str, snapshot: CachedMoviesSnapshot
    ) -> None: ...

    async def load_category(self, category_id: str) -> CachedMoviesSnapshot | None: ...

    async def is_category_expired(self, category_id: str, ttl: TTL) -> bool: ...

    async def save_movie_detail(
        self, movie_id: int, snapshot: CachedMovieDetailSnapshot
    ) -> None: ...

    async def load_movie_detail(
        self, movie_id: int
    ) -> CachedMovieDetailSnapshot | None: ...

    async def is_movie_expired(self, movie_id: int, ttl: TTL) -> bool: ...

    async def remove_category(self, category_id: str) -> None: ...

    async def remove_movie(self, movie_id: int) -> None: ...

    async def clear_all(self) -> None: ...


class KeyValueMovieCache:
    """Stores whole snapshots as flat blobs in the expiring key-value store."""

    def __init__(self, store: ExpiringKeyValueStore):
        self._store = store

    @property
    def store(self) -> ExpiringKeyValueStore:
        return self._store

    async def initialize(self) -> None:
        await self._store.initialize()

    async def save_category(
        self, category_id: str, snapshot: CachedMoviesSnapshot
    ) -> None:
        await self._store.save(CacheKey.category(category_id), snapshot)

    async def load_category(self, category_id: str) -> CachedMoviesSnapshot | None:
        return await self._store.load(
            CacheKey.category(category_id), CachedMoviesSnapshot
        )

    async def is_category_expired(self, category_id: str, ttl: TTL) -> bool:
        return await self._store.is_expired(CacheKey.category(category_id), ttl)

    async def save_movie_detail(
        self, movie_id: int, snapshot: CachedMovieDetailSnapshot
    ) -> None:
        await self._store.save(CacheKey.movie_details(movie_id), snapshot)

    async def load_movie_detail(
        self, movie_id: int
    ) -> CachedMovieDetailSnapshot | None:
        return await self._store.load(
            CacheKey.movie_details(movie_id), CachedMovieDetailSnapshot
        )

    async def is_movie_expired(self, movie_id: int, ttl: TTL) -> bool:
        return await self._store.is_expired(CacheKey.movie_details(movie_id), ttl)

    async def remove_category(self, category_id: str) -> None:
        await self._store.remove(CacheKey.category(category_id))

    async def remove_movie(self, movie_id: int) -> None:
        await self._store.remove(CacheKey.movie_details(movie_id))

    async def clear_all(self) -> None:
        await self._store.clear_all()


def build_movie_cache(
    kind: str,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    version: str = "1.0",
    clock: Callable[[], datetime] = utcnow,
) -> MovieCacheBackend:
    """Return the backend named by ``kind`` (``relational`` or ``key_value``)."""

    if kind == "key_value":
        store = ExpiringKeyValueStore(session_factory, version=version, clock=clock)
        return KeyValueMovieCache(store)
    if kind == "relational":
        return RelationalMovieCache(session_factory, clock=clock)
    raise ValueError(f"Unknown cache backend: {kind}")
