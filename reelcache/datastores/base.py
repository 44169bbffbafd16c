"""Common contract shared by the local, remote and mock movie data stores."""

from __future__ import annotations

from typing import Protocol

from ..models import ActorDTO, MovieDTO


class MovieDataStore(Protocol):
    """Source of movie data; every failure is signalled by raising."""

    async def fetch_movies(self, endpoint: str) -> list[MovieDTO]: ...

    async def fetch_movie_details(self, movie_id: int) -> MovieDTO: ...

    async def fetch_movie_credits(self, movie_id: int) -> list[ActorDTO]: ...

    async def fetch_movie_images(self, movie_id: int) -> list[str]: ...
