"""Pydantic models for TMDB payloads, cache snapshots and domain entities."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
BACKDROP_BASE_URL = "https://image.tmdb.org/t/p/w780"
PROFILE_BASE_URL = "https://image.tmdb.org/t/p/w185"


def build_image_url(path: str | None, base_url: str) -> str | None:
    if not path:
        return None
    if path.startswith("http"):
        return path
    return f"{base_url}{path}"


class MovieDTO(BaseModel):
    """Movie summary or detail as returned by TMDB."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    vote_average: float = 0.0
    release_date: str | None = None

    @field_validator("overview", mode="before")
    @classmethod
    def _default_overview(cls, value: object) -> object:
        return "" if value is None else value

    def to_domain(
        self, *, images: list[str] | None = None, cast: list["Actor"] | None = None
    ) -> "Movie":
        return Movie(
            id=self.id,
            title=self.title,
            overview=self.overview,
            poster_path=self.poster_path,
            backdrop_path=self.backdrop_path,
            vote_average=self.vote_average,
            release_date=self.release_date or "",
            images=list(images or []),
            cast=list(cast or []),
        )


class ActorDTO(BaseModel):
    """Cast member as returned by the TMDB credits endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    character: str = ""
    profile_path: str | None = None

    @field_validator("character", mode="before")
    @classmethod
    def _default_character(cls, value: object) -> object:
        return "" if value is None else value

    def to_domain(self) -> "Actor":
        return Actor(
            id=self.id,
            name=self.name,
            character=self.character,
            profile_path=self.profile_path,
        )


class MoviesResponse(BaseModel):
    results: list[MovieDTO] = Field(default_factory=list)


class CreditsResponse(BaseModel):
    cast: list[ActorDTO] = Field(default_factory=list)


class ImageFileDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file_path: str


class ImagesResponse(BaseModel):
    backdrops: list[ImageFileDTO] = Field(default_factory=list)


class CachedMoviesSnapshot(BaseModel):
    """Movies of a single category as persisted in the local cache."""

    movies: list[MovieDTO] = Field(default_factory=list)
    timestamp: datetime


class CachedMovieDetailSnapshot(BaseModel):
    """Movie detail with its cast and image paths as persisted locally."""

    movie: MovieDTO
    actors: list[ActorDTO] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    timestamp: datetime


class Actor(BaseModel):
    id: int
    name: str
    character: str
    profile_path: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def profile_url(self) -> str | None:
        return build_image_url(self.profile_path, PROFILE_BASE_URL)


class Movie(BaseModel):
    """Domain movie assembled from detail, credits and images."""

    id: int
    title: str
    overview: str
    poster_path: str | None = None
    backdrop_path: str | None = None
    vote_average: float
    release_date: str = ""
    images: list[str] = Field(default_factory=list)
    cast: list[Actor] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def poster_url(self) -> str | None:
        return build_image_url(self.poster_path, POSTER_BASE_URL)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def backdrop_url(self) -> str | None:
        return build_image_url(self.backdrop_path, BACKDROP_BASE_URL)


class Category(BaseModel):
    id: str
    name: str
    movies: list[Movie] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.movies
