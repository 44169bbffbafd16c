"""Fixed movie category lanes served by the repository."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryDefinition:
    """Describes a TMDB list endpoint shown as a category."""

    id: str
    name: str
    endpoint: str


MOVIE_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(id="popular", name="Popular", endpoint="/movie/popular"),
    CategoryDefinition(id="top_rated", name="Top Rated", endpoint="/movie/top_rated"),
    CategoryDefinition(id="upcoming", name="Upcoming", endpoint="/movie/upcoming"),
    CategoryDefinition(
        id="now_playing", name="Now Playing", endpoint="/movie/now_playing"
    ),
)

MOVIE_CATEGORY_MAP: dict[str, CategoryDefinition] = {
    definition.id: definition for definition in MOVIE_CATEGORIES
}


def category_id_from_endpoint(endpoint: str) -> str:
    """Return the category identifier encoded in a list endpoint."""

    trimmed = endpoint.rstrip("/")
    return trimmed.rsplit("/", 1)[-1] or endpoint


def definition_for(category_id: str) -> CategoryDefinition:
    """Return the known definition or derive one for an unknown id."""

    known = MOVIE_CATEGORY_MAP.get(category_id)
    if known is not None:
        return known
    name = category_id.replace("_", " ").title()
    return CategoryDefinition(
        id=category_id, name=name, endpoint=f"/movie/{category_id}"
    )
