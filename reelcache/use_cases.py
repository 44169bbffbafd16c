"""Application use cases layered over the movie repository."""

from __future__ import annotations

from typing import Protocol

from .models import Category, Movie


class MovieRepositoryProtocol(Protocol):
    async def get_categories(self) -> list[Category]: ...

    async def get_movie_details(self, movie_id: int) -> Movie: ...


class GetCategoriesUseCase:
    """Return the browsable categories, skipping any without movies."""

    def __init__(self, repository: MovieRepositoryProtocol):
        self._repository = repository

    async def execute(self) -> list[Category]:
        categories = await self._repository.get_categories()
        return [category for category in categories if not category.is_empty()]


class GetMovieDetailsUseCase:
    def __init__(self, repository: MovieRepositoryProtocol):
        self._repository = repository

    async def execute(self, movie_id: int) -> Movie:
        return await self._repository.get_movie_details(movie_id)
