"""Canned movie data for development without a TMDB API key."""

from __future__ import annotations

import asyncio

from ..categories import MOVIE_CATEGORIES, category_id_from_endpoint
from ..models import ActorDTO, MovieDTO

MOCK_MOVIES: tuple[MovieDTO, ...] = (
    MovieDTO(
        id=1,
        title="The Matrix",
        overview=(
            "A computer hacker learns from mysterious rebels about the true nature "
            "of his reality and his role in the war against its controllers."
        ),
        poster_path="/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
        backdrop_path="/fNG7i7RqMErkcqhohV2a6cV1Ehy.jpg",
        vote_average=8.7,
        release_date="1999-03-30",
    ),
    MovieDTO(
        id=2,
        title="Inception",
        overview=(
            "A thief who steals corporate secrets through the use of dream-sharing "
            "technology is given the inverse task of planting an idea."
        ),
        poster_path="/9gk7adHYeDvHkCSEqAvQNLV5Uge.jpg",
        backdrop_path="/s3TBrRGB1iav7gFOCNx3H31MoES.jpg",
        vote_average=8.8,
        release_date="2010-07-15",
    ),
    MovieDTO(
        id=3,
        title="Interstellar",
        overview=(
            "A team of explorers travel through a wormhole in space in an attempt "
            "to ensure humanity's survival."
        ),
        poster_path="/gEU2QniE6E77NI6lCU6MxlNBvIx.jpg",
        backdrop_path="/xu9zaAevzQ5nnrsXN6JcahLnG4i.jpg",
        vote_average=8.6,
        release_date="2014-11-05",
    ),
)

# Each category lane gets its own id range so lanes never share a movie.
MOCK_ID_STRIDE = 1000

MOCK_ACTORS: tuple[ActorDTO, ...] = (
    ActorDTO(id=1, name="Keanu Reeves", character="Neo", profile_path="/4D0PpNI0kmP58hgrwGC3wCjxhnm.jpg"),
    ActorDTO(id=2, name="Laurence Fishburne", character="Morpheus", profile_path="/8suOhUmPbfKqDQ17bX9kXP8kmNt.jpg"),
    ActorDTO(id=3, name="Carrie-Anne Moss", character="Trinity", profile_path="/8iATAc5z5XOKFFARLsvaawa8MTY.jpg"),
)

MOCK_IMAGES: tuple[str, ...] = (
    "/tmU7GeKVybMWFButWEGl2M4GeiP.jpg",
    "/9BBTo63ANSmhC4e6r62OJFuK2GL.jpg",
    "/cPFoD8xvdJxWGNvFOcjfGnJGDi2.jpg",
)


class MockMovieDataStore:
    """Returns a small canned catalog after a short delay.

    Every category endpoint serves the same three titles under ids offset by
    ``MOCK_ID_STRIDE``; detail lookups map an id back onto its title.
    """

    def __init__(self, *, list_delay: float = 0.5, detail_delay: float = 0.3):
        self._list_delay = list_delay
        self._detail_delay = detail_delay

    async def fetch_movies(self, endpoint: str) -> list[MovieDTO]:
        await asyncio.sleep(self._list_delay)
        offset = _id_offset(endpoint)
        return [
            movie.model_copy(update={"id": movie.id + offset}) for movie in MOCK_MOVIES
        ]

    async def fetch_movie_details(self, movie_id: int) -> MovieDTO:
        await asyncio.sleep(self._detail_delay)
        base_id = movie_id % MOCK_ID_STRIDE
        for movie in MOCK_MOVIES:
            if movie.id == base_id:
                return movie.model_copy(update={"id": movie_id})
        return MOCK_MOVIES[0].model_copy(update={"id": movie_id})

    async def fetch_movie_credits(self, movie_id: int) -> list[ActorDTO]:
        await asyncio.sleep(self._detail_delay)
        return list(MOCK_ACTORS)

    async def fetch_movie_images(self, movie_id: int) -> list[str]:
        await asyncio.sleep(self._detail_delay)
        return list(MOCK_IMAGES)


def _id_offset(endpoint: str) -> int:
    category_id = category_id_from_endpoint(endpoint)
    for index, definition in enumerate(MOVIE_CATEGORIES):
        if definition.id == category_id:
            return index * MOCK_ID_STRIDE
    return 0
