"""Relational movie cache built on the SQLAlchemy tables.

Association policy:

* category -> movies: wholesale replace. The previous movie rows of the
  category are hard-deleted before the new list is written.
* movie -> actors: wholesale replace of the association set. Actor rows
  themselves are kept, even when no movie references them any more.
* movie -> images: upsert by URL. Images missing from a later save stay
  attached to the movie.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Sequence

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..categories import definition_for
from ..db_models import (
    ActorRecord,
    CategoryRecord,
    ImageRecord,
    MovieRecord,
    movie_actors,
)
from ..models import ActorDTO, CachedMovieDetailSnapshot, CachedMoviesSnapshot, MovieDTO
from ..utils import TTL, is_stale, utcnow

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "backdrop"


class RelationalMovieCache:
    """Category, movie, actor and image rows with explicit merge rules."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._write_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Tables are created by ``Database.create_all``; nothing to migrate here."""

    async def save_category(
        self, category_id: str, snapshot: CachedMoviesSnapshot
    ) -> None:
        definition = definition_for(category_id)
        now = self._clock()
        async with self._write_lock:
            async with self._session_factory() as session:
                category = await session.get(CategoryRecord, category_id)
                if category is None:
                    category = CategoryRecord(
                        id=category_id,
                        name=definition.name,
                        endpoint=definition.endpoint,
                        last_updated=snapshot.timestamp,
                    )
                    session.add(category)
                category.last_updated = snapshot.timestamp

                result = await session.execute(
                    select(MovieRecord.id).where(MovieRecord.category_id == category_id)
                )
                await self._purge_movies(session, result.scalars().all())

                written: set[int] = set()
                for position, dto in enumerate(snapshot.movies):
                    if dto.id in written:
                        continue
                    written.add(dto.id)
                    movie = await self._upsert_movie(session, dto.id, dto, now)
                    movie.category_id = category_id
                    movie.position = position
                await session.commit()
        logger.debug(
            "Stored %s movies for category %s", len(written), category_id
        )

    async def load_category(self, category_id: str) -> CachedMoviesSnapshot | None:
        async with self._session_factory() as session:
            category = await session.get(CategoryRecord, category_id)
            if category is None:
                return None
            result = await session.execute(
                select(MovieRecord)
                .where(MovieRecord.category_id == category_id)
                .order_by(MovieRecord.position, MovieRecord.id)
            )
            movies = [self._movie_to_dto(record) for record in result.scalars().all()]
            return CachedMoviesSnapshot(movies=movies, timestamp=category.last_updated)

    async def save_movie_detail(
        self, movie_id: int, snapshot: CachedMovieDetailSnapshot
    ) -> None:
        now = self._clock()
        async with self._write_lock:
            async with self._session_factory() as session:
                await self._upsert_movie(session, movie_id, snapshot.movie, now)

                await session.execute(
                    delete(movie_actors).where(movie_actors.c.movie_id == movie_id)
                )
                associations: list[dict[str, int]] = []
                for dto in snapshot.actors:
                    if any(row["actor_id"] == dto.id for row in associations):
                        continue
                    await self._upsert_actor(session, dto)
                    associations.append(
                        {
                            "movie_id": movie_id,
                            "actor_id": dto.id,
                            "position": len(associations),
                        }
                    )
                await session.flush()
                if associations:
                    await session.execute(insert(movie_actors), associations)

                for image_url in dict.fromkeys(snapshot.images):
                    image = await session.get(ImageRecord, image_url)
                    if image is None:
                        image = ImageRecord(
                            image_url=image_url,
                            local_path="",
                            type=DEFAULT_IMAGE_TYPE,
                            last_updated=snapshot.timestamp,
                        )
                        session.add(image)
                    image.last_updated = snapshot.timestamp
                    image.movie_id = movie_id
                await session.commit()

    async def load_movie_detail(self, movie_id: int) -> CachedMovieDetailSnapshot | None:
        async with self._session_factory() as session:
            movie = await session.get(MovieRecord, movie_id)
            if movie is None:
                return None
            actor_result = await session.execute(
                select(ActorRecord)
                .join(movie_actors, movie_actors.c.actor_id == ActorRecord.id)
                .where(movie_actors.c.movie_id == movie_id)
                .order_by(movie_actors.c.position)
            )
            actors = [
                ActorDTO(
                    id=actor.id,
                    name=actor.name,
                    character=actor.character,
                    profile_path=actor.profile_path,
                )
                for actor in actor_result.scalars().all()
            ]
            image_result = await session.execute(
                select(ImageRecord.image_url)
                .where(ImageRecord.movie_id == movie_id)
                .order_by(ImageRecord.last_updated.desc(), ImageRecord.image_url)
            )
            return CachedMovieDetailSnapshot(
                movie=self._movie_to_dto(movie),
                actors=actors,
                images=list(image_result.scalars().all()),
                timestamp=movie.last_updated,
            )

    async def is_category_expired(self, category_id: str, ttl: TTL) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CategoryRecord.last_updated).where(CategoryRecord.id == category_id)
            )
            return is_stale(result.scalar_one_or_none(), ttl, now=self._clock())

    async def is_movie_expired(self, movie_id: int, ttl: TTL) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MovieRecord.last_updated).where(MovieRecord.id == movie_id)
            )
            return is_stale(result.scalar_one_or_none(), ttl, now=self._clock())

    async def remove_category(self, category_id: str) -> None:
        async with self._write_lock:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MovieRecord.id).where(MovieRecord.category_id == category_id)
                )
                await self._purge_movies(session, result.scalars().all())
                await session.execute(
                    delete(CategoryRecord).where(CategoryRecord.id == category_id)
                )
                await session.commit()

    async def remove_movie(self, movie_id: int) -> None:
        async with self._write_lock:
            async with self._session_factory() as session:
                await self._purge_movies(session, [movie_id])
                await session.commit()

    async def clear_all(self) -> None:
        """Delete every row of every cached entity kind in one transaction."""

        async with self._write_lock:
            async with self._session_factory() as session:
                await session.execute(delete(movie_actors))
                await session.execute(delete(ImageRecord))
                await session.execute(delete(ActorRecord))
                await session.execute(delete(MovieRecord))
                await session.execute(delete(CategoryRecord))
                await session.commit()

    async def movie_ids_for_actor(self, actor_id: int) -> list[int]:
        """Return the movies whose cast currently references ``actor_id``."""

        async with self._session_factory() as session:
            result = await session.execute(
                select(movie_actors.c.movie_id)
                .where(movie_actors.c.actor_id == actor_id)
                .order_by(movie_actors.c.movie_id)
            )
            return list(result.scalars().all())

    async def count_actors(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(ActorRecord)
            )
            return int(result.scalar_one())

    @staticmethod
    async def _purge_movies(session: AsyncSession, movie_ids: Sequence[int]) -> None:
        """Hard-delete movies with their cast links; their images are orphaned."""

        if not movie_ids:
            return
        ids = list(movie_ids)
        await session.execute(
            delete(movie_actors).where(movie_actors.c.movie_id.in_(ids))
        )
        await session.execute(
            update(ImageRecord)
            .where(ImageRecord.movie_id.in_(ids))
            .values(movie_id=None)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            delete(MovieRecord)
            .where(MovieRecord.id.in_(ids))
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def _upsert_movie(
        session: AsyncSession, movie_id: int, dto: MovieDTO, now: datetime
    ) -> MovieRecord:
        movie = await session.get(MovieRecord, movie_id)
        if movie is None:
            movie = MovieRecord(id=movie_id, category_id=None, position=0)
            session.add(movie)
        movie.title = dto.title
        movie.overview = dto.overview
        movie.poster_path = dto.poster_path
        movie.backdrop_path = dto.backdrop_path
        movie.vote_average = dto.vote_average
        movie.release_date = dto.release_date
        movie.last_updated = now
        return movie

    @staticmethod
    async def _upsert_actor(session: AsyncSession, dto: ActorDTO) -> ActorRecord:
        actor = await session.get(ActorRecord, dto.id)
        if actor is None:
            actor = ActorRecord(id=dto.id)
            session.add(actor)
        actor.name = dto.name
        actor.character = dto.character
        actor.profile_path = dto.profile_path
        return actor

    @staticmethod
    def _movie_to_dto(record: MovieRecord) -> MovieDTO:
        return MovieDTO(
            id=record.id,
            title=record.title,
            overview=record.overview or "",
            poster_path=record.poster_path,
            backdrop_path=record.backdrop_path,
            vote_average=record.vote_average or 0.0,
            release_date=record.release_date,
        )
