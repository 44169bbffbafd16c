"""Process-wide owner of the cache, data store and repository instances."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field

import httpx

from .cache.backends import MovieCacheBackend, build_movie_cache
from .cache.images import ImageCache
from .config import Settings
from .database import Database
from .datastores.base import MovieDataStore
from .datastores.local import LocalMovieDataStore
from .datastores.mock import MockMovieDataStore
from .datastores.remote import RemoteMovieDataStore
from .repository import MovieRepository
from .services.images import ImageService
from .services.tmdb import TMDBClient
from .use_cases import GetCategoriesUseCase, GetMovieDetailsUseCase

logger = logging.getLogger(__name__)


@dataclass
class ApplicationContext:
    """Explicitly wired application components with a single teardown path."""

    settings: Settings
    database: Database
    movie_cache: MovieCacheBackend
    image_cache: ImageCache
    image_service: ImageService
    repository: MovieRepository
    get_categories: GetCategoriesUseCase
    get_movie_details: GetMovieDetailsUseCase
    _exit_stack: AsyncExitStack = field(repr=False)

    @classmethod
    async def create(
        cls, settings: Settings, *, remote: MovieDataStore | None = None
    ) -> "ApplicationContext":
        """Build and initialise every component described by ``settings``."""

        exit_stack = AsyncExitStack()
        try:
            image_http = await exit_stack.enter_async_context(
                httpx.AsyncClient(
                    timeout=httpx.Timeout(15.0, connect=5.0), follow_redirects=True
                )
            )
            database = Database(settings.database_url)
            exit_stack.push_async_callback(database.dispose)
            await database.create_all()

            movie_cache = build_movie_cache(
                settings.cache_backend,
                database.session_factory,
                version=settings.cache_version,
            )
            await movie_cache.initialize()

            image_cache = ImageCache(settings.image_cache_dir)
            await image_cache.initialize()
            await image_cache.clear_expired(settings.cache_ttl)

            if remote is None:
                remote = await cls._build_remote(settings, exit_stack)
            local = LocalMovieDataStore(movie_cache, ttl=settings.cache_ttl)
            repository = MovieRepository(
                local,
                remote,
                category_movie_limit=settings.category_movie_limit,
                cast_limit=settings.cast_limit,
                background_refresh=settings.background_refresh,
            )
            exit_stack.push_async_callback(repository.aclose)
        except BaseException:
            await exit_stack.aclose()
            raise

        logger.info(
            "Movie cache ready using the %s backend (%s data)",
            settings.cache_backend,
            type(remote).__name__,
        )
        return cls(
            settings=settings,
            database=database,
            movie_cache=movie_cache,
            image_cache=image_cache,
            image_service=ImageService(image_cache, image_http, ttl=settings.cache_ttl),
            repository=repository,
            get_categories=GetCategoriesUseCase(repository),
            get_movie_details=GetMovieDetailsUseCase(repository),
            _exit_stack=exit_stack,
        )

    @staticmethod
    async def _build_remote(
        settings: Settings, exit_stack: AsyncExitStack
    ) -> MovieDataStore:
        if settings.use_mock_data:
            if settings.data_source == "remote":
                logger.warning("TMDB_API_KEY is not configured; serving mock movie data")
            return MockMovieDataStore()
        tmdb_http = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                base_url=str(settings.tmdb_api_url),
                timeout=httpx.Timeout(20.0, connect=10.0),
            )
        )
        return RemoteMovieDataStore(TMDBClient(settings, tmdb_http))

    async def clear_caches(self) -> None:
        """Drop every cached movie row or blob and every cached image."""

        await self.movie_cache.clear_all()
        await self.image_cache.clear_all()

    async def aclose(self) -> None:
        await self._exit_stack.aclose()
