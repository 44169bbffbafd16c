"""Movie data store backed by the TMDB HTTP API."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import RemoteError
from ..models import (
    ActorDTO,
    CreditsResponse,
    ImagesResponse,
    MovieDTO,
    MoviesResponse,
)
from ..services.tmdb import TMDBClient

ModelT = TypeVar("ModelT", bound=BaseModel)

BACKDROP_LIMIT = 5


class RemoteMovieDataStore:
    """Maps TMDB responses onto the DTOs cached by the local store."""

    def __init__(self, client: TMDBClient, *, backdrop_limit: int = BACKDROP_LIMIT):
        self._client = client
        self._backdrop_limit = backdrop_limit

    async def fetch_movies(self, endpoint: str) -> list[MovieDTO]:
        payload = await self._client.get_json(endpoint)
        return self._parse(MoviesResponse, payload, endpoint).results

    async def fetch_movie_details(self, movie_id: int) -> MovieDTO:
        endpoint = f"/movie/{movie_id}"
        payload = await self._client.get_json(endpoint)
        return self._parse(MovieDTO, payload, endpoint)

    async def fetch_movie_credits(self, movie_id: int) -> list[ActorDTO]:
        endpoint = f"/movie/{movie_id}/credits"
        payload = await self._client.get_json(endpoint)
        return self._parse(CreditsResponse, payload, endpoint).cast

    async def fetch_movie_images(self, movie_id: int) -> list[str]:
        endpoint = f"/movie/{movie_id}/images"
        payload = await self._client.get_json(endpoint)
        response = self._parse(ImagesResponse, payload, endpoint)
        return [image.file_path for image in response.backdrops[: self._backdrop_limit]]

    @staticmethod
    def _parse(model: type[ModelT], payload: dict[str, Any], endpoint: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RemoteError(f"Unexpected TMDB payload for {endpoint}") from exc
