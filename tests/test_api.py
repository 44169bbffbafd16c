from __future__ import annotations

from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from reelcache.cache.images import AssetType
from reelcache.errors import RemoteError
from reelcache.main import register_routes
from reelcache.models import Actor, Category, Movie


class StubUseCase:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple] = []

    async def execute(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.result


class StubImageService:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.requests: list[tuple[str, AssetType]] = []

    async def fetch(self, url: str, asset_type: AssetType) -> bytes:
        self.requests.append((url, asset_type))
        if self.error is not None:
            raise self.error
        return b"\xff\xd8jpeg"


class StubContext(SimpleNamespace):
    cleared = False

    async def clear_caches(self) -> None:
        self.cleared = True


def _client(**overrides) -> tuple[TestClient, StubContext]:
    movie = Movie(
        id=603,
        title="The Matrix",
        overview="Wake up",
        poster_path="/matrix.jpg",
        vote_average=8.7,
        cast=[Actor(id=1, name="Keanu Reeves", character="Neo", profile_path="/k.jpg")],
    )
    context = StubContext(
        get_categories=StubUseCase(
            [Category(id="popular", name="Popular", movies=[movie])]
        ),
        get_movie_details=StubUseCase(movie),
        image_service=StubImageService(),
    )
    for name, value in overrides.items():
        setattr(context, name, value)
    app = FastAPI()
    register_routes(app)
    app.state.context = context
    return TestClient(app), context


def test_health() -> None:
    client, _ = _client()

    with client:
        response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_categories_include_image_urls() -> None:
    client, _ = _client()

    with client:
        response = client.get("/categories")

    assert response.status_code == 200
    payload = response.json()
    assert payload[0]["name"] == "Popular"
    movie = payload[0]["movies"][0]
    assert movie["poster_url"] == "https://image.tmdb.org/t/p/w500/matrix.jpg"
    assert movie["backdrop_url"] is None


def test_movie_details_include_cast_profiles() -> None:
    client, context = _client()

    with client:
        response = client.get("/movies/603")

    assert response.status_code == 200
    assert context.get_movie_details.calls == [(603,)]
    cast = response.json()["cast"]
    assert cast[0]["profile_url"] == "https://image.tmdb.org/t/p/w185/k.jpg"


def test_remote_failures_map_to_bad_gateway() -> None:
    client, _ = _client(
        get_categories=StubUseCase(error=RemoteError("TMDB down", status_code=503)),
        get_movie_details=StubUseCase(error=RemoteError("TMDB down")),
    )

    with client:
        categories = client.get("/categories")
        movie = client.get("/movies/1")

    assert categories.status_code == 502
    assert categories.json()["detail"]["code"] == "REMOTE_ERROR"
    assert movie.status_code == 502


def test_image_route_resolves_asset_type() -> None:
    client, context = _client()

    with client:
        response = client.get("/images/posters", params={"url": "/matrix.jpg"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert response.content == b"\xff\xd8jpeg"
    assert context.image_service.requests == [("/matrix.jpg", AssetType.POSTER)]


def test_image_route_rejects_unknown_type() -> None:
    client, _ = _client()

    with client:
        response = client.get("/images/thumbnails", params={"url": "/x.jpg"})

    assert response.status_code == 400


def test_image_route_maps_download_failure() -> None:
    client, _ = _client(image_service=StubImageService(error=RemoteError("404")))

    with client:
        response = client.get("/images/backdrop", params={"url": "/x.jpg"})

    assert response.status_code == 502


def test_clear_cache() -> None:
    client, context = _client()

    with client:
        response = client.delete("/cache")

    assert response.status_code == 204
    assert context.cleared is True
