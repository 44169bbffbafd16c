"""Cache-first orchestration over the local and remote movie data stores."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Sequence

from .categories import MOVIE_CATEGORIES, CategoryDefinition
from .datastores.base import MovieDataStore
from .datastores.local import LocalMovieDataStore
from .errors import RemoteError
from .models import ActorDTO, Category, Movie, MovieDTO

logger = logging.getLogger(__name__)

MovieParts = tuple[MovieDTO, list[ActorDTO], list[str]]


class MovieRepository:
    """Serves categories and movie details from the local cache first.

    Cache hits are returned immediately and refreshed from the remote store in
    a detached task. Misses, expired entries and local errors fall through to
    the remote store, whose results are written back to the cache.
    """

    def __init__(
        self,
        local: LocalMovieDataStore,
        remote: MovieDataStore,
        *,
        categories: Sequence[CategoryDefinition] = MOVIE_CATEGORIES,
        category_movie_limit: int = 10,
        cast_limit: int = 10,
        background_refresh: bool = True,
    ):
        self._local = local
        self._remote = remote
        self._categories = tuple(categories)
        self._category_movie_limit = category_movie_limit
        self._cast_limit = cast_limit
        self._background_refresh = background_refresh
        self._refresh_jobs: dict[str, asyncio.Task[None]] = {}

    async def get_categories(self) -> list[Category]:
        results = await asyncio.gather(
            *(self._local.fetch_movies(d.endpoint) for d in self._categories),
            return_exceptions=True,
        )
        failure = _first_error(results)
        if failure is None:
            self._schedule_refresh(
                "categories",
                partial(_refresh_categories, self._local, self._remote, self._categories),
            )
            return self._assemble_categories(results)

        logger.info("Category cache unavailable (%s); fetching from TMDB", failure)
        movie_lists = await _fetch_remote_categories(self._remote, self._categories)
        await _persist_categories(self._local, self._categories, movie_lists)
        return self._assemble_categories(movie_lists)

    async def get_movie_details(self, movie_id: int) -> Movie:
        try:
            detail, actors, images = await _gather_movie_parts(self._local, movie_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("Movie %s cache unavailable (%s); fetching from TMDB", movie_id, exc)
        else:
            self._schedule_refresh(
                f"movie:{movie_id}",
                partial(_refresh_movie, self._local, self._remote, movie_id),
            )
            return self._assemble_movie(detail, actors, images)

        detail, actors, images = await _fetch_remote_movie(self._remote, movie_id)
        await _persist_movie(self._local, movie_id, detail, actors, images)
        return self._assemble_movie(detail, actors, images)

    def is_refreshing(self, key: str) -> bool:
        job = self._refresh_jobs.get(key)
        return job is not None and not job.done()

    async def wait_for_background_refresh(self) -> None:
        """Wait until every in-flight background refresh has finished."""

        while self._refresh_jobs:
            await asyncio.gather(*list(self._refresh_jobs.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight refreshes so they cannot write to a discarded cache."""

        jobs = list(self._refresh_jobs.values())
        for job in jobs:
            job.cancel()
        if jobs:
            await asyncio.gather(*jobs, return_exceptions=True)
        self._refresh_jobs.clear()

    def _schedule_refresh(
        self, key: str, refresh: Callable[[], Awaitable[None]]
    ) -> None:
        if not self._background_refresh:
            return
        existing = self._refresh_jobs.get(key)
        if existing and not existing.done():
            return

        # The task only references the jobs map and the stores bound into
        # ``refresh``, never the repository itself.
        jobs = self._refresh_jobs

        async def _runner() -> None:
            try:
                await refresh()
            except asyncio.CancelledError:
                logger.debug("Background refresh %s cancelled", key)
                raise
            except Exception as exc:
                logger.exception("Background refresh %s failed: %s", key, exc)
            finally:
                if jobs.get(key) is asyncio.current_task():
                    jobs.pop(key, None)

        jobs[key] = asyncio.create_task(_runner())

    def _assemble_categories(self, movie_lists: Sequence[Any]) -> list[Category]:
        return [
            Category(
                id=definition.id,
                name=definition.name,
                movies=[
                    dto.to_domain() for dto in movies[: self._category_movie_limit]
                ],
            )
            for definition, movies in zip(self._categories, movie_lists)
        ]

    def _assemble_movie(
        self, detail: MovieDTO, actors: list[ActorDTO], images: list[str]
    ) -> Movie:
        cast = [actor.to_domain() for actor in actors[: self._cast_limit]]
        return detail.to_domain(images=images, cast=cast)


def _first_error(results: Sequence[Any]) -> BaseException | None:
    """Return the first failure in sibling order, re-raising cancellations."""

    for result in results:
        if isinstance(result, Exception):
            return result
        if isinstance(result, BaseException):
            raise result
    return None


async def _fetch_remote_categories(
    remote: MovieDataStore, categories: Sequence[CategoryDefinition]
) -> list[list[MovieDTO]]:
    results = await asyncio.gather(
        *(remote.fetch_movies(d.endpoint) for d in categories),
        return_exceptions=True,
    )
    error = _first_error(results)
    if error is not None:
        wrapped = RemoteError.wrap(error)
        if wrapped is error:
            raise error
        raise wrapped from error
    return list(results)


async def _persist_categories(
    local: LocalMovieDataStore,
    categories: Sequence[CategoryDefinition],
    movie_lists: Sequence[list[MovieDTO]],
) -> None:
    for definition, movies in zip(categories, movie_lists):
        try:
            await local.save_movies(movies, definition.endpoint)
        except Exception as exc:
            logger.warning("Failed to cache category %s: %s", definition.id, exc)


async def _refresh_categories(
    local: LocalMovieDataStore,
    remote: MovieDataStore,
    categories: Sequence[CategoryDefinition],
) -> None:
    movie_lists = await _fetch_remote_categories(remote, categories)
    await _persist_categories(local, categories, movie_lists)


async def _gather_movie_parts(store: MovieDataStore, movie_id: int) -> MovieParts:
    """Fetch detail, credits and images together.

    The detail is required and its failure is raised. Credits and images are
    optional and fall back to empty lists.
    """

    detail, credits, images = await asyncio.gather(
        store.fetch_movie_details(movie_id),
        store.fetch_movie_credits(movie_id),
        store.fetch_movie_images(movie_id),
        return_exceptions=True,
    )
    error = _first_error([detail])
    if error is not None:
        raise error
    if _first_error([credits]) is not None:
        logger.debug("Credits unavailable for movie %s: %s", movie_id, credits)
        credits = []
    if _first_error([images]) is not None:
        logger.debug("Images unavailable for movie %s: %s", movie_id, images)
        images = []
    return detail, list(credits), list(images)


async def _fetch_remote_movie(remote: MovieDataStore, movie_id: int) -> MovieParts:
    try:
        return await _gather_movie_parts(remote, movie_id)
    except RemoteError:
        raise
    except Exception as exc:
        raise RemoteError.wrap(exc) from exc


async def _persist_movie(
    local: LocalMovieDataStore,
    movie_id: int,
    detail: MovieDTO,
    actors: list[ActorDTO],
    images: list[str],
) -> None:
    try:
        await local.save_movie_details(detail, actors, images, movie_id)
    except Exception as exc:
        logger.warning("Failed to cache movie %s: %s", movie_id, exc)


async def _refresh_movie(
    local: LocalMovieDataStore, remote: MovieDataStore, movie_id: int
) -> None:
    detail, actors, images = await _fetch_remote_movie(remote, movie_id)
    await _persist_movie(local, movie_id, detail, actors, images)
