"""Movie data store reading from and writing to the local cache backend."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from ..cache.backends import MovieCacheBackend
from ..cache.key_value import CacheKey
from ..categories import category_id_from_endpoint
from ..errors import CacheExpired, NotFound
from ..models import (
    ActorDTO,
    CachedMovieDetailSnapshot,
    CachedMoviesSnapshot,
    MovieDTO,
)
from ..utils import TTL, utcnow


class LocalMovieDataStore:
    """Serves cached movie data, raising on misses and expired entries."""

    def __init__(
        self,
        backend: MovieCacheBackend,
        *,
        ttl: TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._backend = backend
        self._ttl = ttl
        self._clock = clock

    @property
    def backend(self) -> MovieCacheBackend:
        return self._backend

    async def fetch_movies(self, endpoint: str) -> list[MovieDTO]:
        category_id = category_id_from_endpoint(endpoint)
        key = CacheKey.category(category_id)
        if await self._backend.is_category_expired(category_id, self._ttl):
            raise CacheExpired(key)
        snapshot = await self._backend.load_category(category_id)
        if snapshot is None:
            raise NotFound(key)
        return snapshot.movies

    async def fetch_movie_details(self, movie_id: int) -> MovieDTO:
        return (await self._load_detail(movie_id)).movie

    async def fetch_movie_credits(self, movie_id: int) -> list[ActorDTO]:
        return (await self._load_detail(movie_id)).actors

    async def fetch_movie_images(self, movie_id: int) -> list[str]:
        return (await self._load_detail(movie_id)).images

    async def save_movies(self, movies: list[MovieDTO], endpoint: str) -> None:
        category_id = category_id_from_endpoint(endpoint)
        snapshot = CachedMoviesSnapshot(movies=movies, timestamp=self._clock())
        await self._backend.save_category(category_id, snapshot)

    async def save_movie_details(
        self,
        movie: MovieDTO,
        actors: list[ActorDTO],
        images: list[str],
        movie_id: int,
    ) -> None:
        snapshot = CachedMovieDetailSnapshot(
            movie=movie, actors=actors, images=images, timestamp=self._clock()
        )
        await self._backend.save_movie_detail(movie_id, snapshot)

    async def _load_detail(self, movie_id: int) -> CachedMovieDetailSnapshot:
        key = CacheKey.movie_details(movie_id)
        if await self._backend.is_movie_expired(movie_id, self._ttl):
            raise CacheExpired(key)
        snapshot = await self._backend.load_movie_detail(movie_id)
        if snapshot is None:
            raise NotFound(key)
        return snapshot
