"""Local, remote and mock movie data stores."""

from __future__ import annotations

import httpx
import pytest

from reelcache.cache.backends import KeyValueMovieCache, build_movie_cache
from reelcache.cache.relational import RelationalMovieCache
from reelcache.config import Settings
from reelcache.datastores import (
    LocalMovieDataStore,
    MockMovieDataStore,
    RemoteMovieDataStore,
)
from reelcache.datastores.mock import (
    MOCK_ACTORS,
    MOCK_ID_STRIDE,
    MOCK_IMAGES,
    MOCK_MOVIES,
)
from reelcache.errors import CacheExpired, CacheMiss, NotFound, RemoteError
from reelcache.models import ActorDTO, MovieDTO
from reelcache.services.tmdb import TMDBClient

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture(params=["relational", "key_value"])
def backend_kind(request) -> str:
    return request.param


def _local(database, clock, kind: str) -> LocalMovieDataStore:
    backend = build_movie_cache(kind, database.session_factory, clock=clock)
    return LocalMovieDataStore(backend, ttl=86_400, clock=clock)


def _remote(handler, **kwargs) -> tuple[RemoteMovieDataStore, httpx.AsyncClient]:
    settings = Settings(_env_file=None, TMDB_API_KEY="secret")
    client = httpx.AsyncClient(
        base_url="https://api.example.test/3", transport=httpx.MockTransport(handler)
    )
    return RemoteMovieDataStore(TMDBClient(settings, client, **kwargs)), client


def test_build_movie_cache_selects_backend(tmp_path) -> None:
    from reelcache.database import Database

    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'unused.db'}")
    assert isinstance(
        build_movie_cache("relational", database.session_factory), RelationalMovieCache
    )
    assert isinstance(
        build_movie_cache("key_value", database.session_factory), KeyValueMovieCache
    )
    with pytest.raises(ValueError):
        build_movie_cache("memory", database.session_factory)


async def test_local_store_treats_empty_cache_as_expired(
    database, clock, backend_kind
) -> None:
    store = _local(database, clock, backend_kind)

    with pytest.raises(CacheExpired):
        await store.fetch_movies("/movie/popular")
    with pytest.raises(CacheExpired):
        await store.fetch_movie_details(1)


async def test_local_store_round_trip(database, clock, backend_kind) -> None:
    store = _local(database, clock, backend_kind)
    movies = [MovieDTO(id=1, title="A"), MovieDTO(id=2, title="B")]
    actors = [ActorDTO(id=10, name="Lead", character="Hero")]

    await store.save_movies(movies, "/movie/popular")
    await store.save_movie_details(movies[0], actors, ["/b1.jpg"], 1)

    assert [movie.id for movie in await store.fetch_movies("/movie/popular")] == [1, 2]
    assert (await store.fetch_movie_details(1)).title == "A"
    assert await store.fetch_movie_credits(1) == actors
    assert await store.fetch_movie_images(1) == ["/b1.jpg"]


async def test_local_store_raises_expired_after_ttl(database, clock, backend_kind) -> None:
    store = _local(database, clock, backend_kind)
    await store.save_movies([MovieDTO(id=1, title="A")], "/movie/upcoming")
    await store.save_movie_details(MovieDTO(id=1, title="A"), [], [], 1)

    clock.advance(86_401)

    with pytest.raises(CacheExpired):
        await store.fetch_movies("/movie/upcoming")
    with pytest.raises(CacheExpired):
        await store.fetch_movie_credits(1)


async def test_key_value_local_store_distinguishes_missing_payload(database, clock) -> None:
    backend = build_movie_cache("key_value", database.session_factory, clock=clock)
    store = LocalMovieDataStore(backend, ttl=86_400, clock=clock)
    await store.save_movies([MovieDTO(id=1, title="A")], "/movie/popular")
    await backend.store.save("cache.category.popular", {"broken": True})

    with pytest.raises(NotFound) as excinfo:
        await store.fetch_movies("/movie/popular")

    assert isinstance(excinfo.value, CacheMiss)
    assert excinfo.value.code == "CACHE_MISS"


async def test_remote_store_parses_tmdb_payloads() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        path = request.url.path
        if path.endswith("/movie/popular"):
            return httpx.Response(
                200,
                json={
                    "page": 1,
                    "results": [
                        {"id": 1, "title": "A", "overview": None, "vote_average": 7.1},
                        {"id": 2, "title": "B", "release_date": "2020-01-01"},
                    ],
                },
            )
        if path.endswith("/movie/1/credits"):
            return httpx.Response(
                200,
                json={"cast": [{"id": 5, "name": "Star", "character": None}]},
            )
        if path.endswith("/movie/1/images"):
            backdrops = [{"file_path": f"/b{index}.jpg"} for index in range(8)]
            return httpx.Response(200, json={"backdrops": backdrops, "posters": []})
        if path.endswith("/movie/1"):
            return httpx.Response(200, json={"id": 1, "title": "A", "runtime": 120})
        return httpx.Response(404)

    store, client = _remote(handler)
    async with client:
        movies = await store.fetch_movies("/movie/popular")
        detail = await store.fetch_movie_details(1)
        credits = await store.fetch_movie_credits(1)
        images = await store.fetch_movie_images(1)

    assert [movie.id for movie in movies] == [1, 2]
    assert movies[0].overview == ""
    assert detail.title == "A"
    assert credits == [ActorDTO(id=5, name="Star", character="")]
    assert images == ["/b0.jpg", "/b1.jpg", "/b2.jpg", "/b3.jpg", "/b4.jpg"]
    assert all(request.url.params["api_key"] == "secret" for request in seen)
    assert seen[0].url.path == "/3/movie/popular"


async def test_remote_store_maps_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status_message": "not found"})

    store, client = _remote(handler)
    async with client:
        with pytest.raises(RemoteError) as excinfo:
            await store.fetch_movie_details(99)

    assert excinfo.value.status_code == 404


async def test_remote_store_rejects_unexpected_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "no id"}]})

    store, client = _remote(handler)
    async with client:
        with pytest.raises(RemoteError):
            await store.fetch_movies("/movie/popular")


async def test_remote_store_rejects_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    store, client = _remote(handler)
    async with client:
        with pytest.raises(RemoteError):
            await store.fetch_movies("/movie/popular")


async def test_tmdb_client_retries_server_errors(monkeypatch) -> None:
    monkeypatch.setattr(TMDBClient, "_backoff", staticmethod(lambda attempt: 0))
    responses = iter([httpx.Response(503), httpx.Response(200, json={"results": []})])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    store, client = _remote(handler)
    async with client:
        assert await store.fetch_movies("/movie/popular") == []


async def test_tmdb_client_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    store, client = _remote(handler, max_retries=0)
    async with client:
        with pytest.raises(RemoteError):
            await store.fetch_movie_images(1)


def test_tmdb_client_requires_api_key() -> None:
    with pytest.raises(ValueError):
        TMDBClient(Settings(_env_file=None, TMDB_API_KEY="  "), httpx.AsyncClient())


async def test_mock_store_returns_canned_data() -> None:
    store = MockMovieDataStore(list_delay=0, detail_delay=0)

    assert await store.fetch_movies("/movie/popular") == list(MOCK_MOVIES)
    assert await store.fetch_movies("/movie/anything") == list(MOCK_MOVIES)
    assert (await store.fetch_movie_details(3)).title == "Interstellar"
    fallback = await store.fetch_movie_details(404)
    assert (fallback.id, fallback.title) == (404, MOCK_MOVIES[0].title)
    assert await store.fetch_movie_credits(1) == list(MOCK_ACTORS)
    assert await store.fetch_movie_images(1) == list(MOCK_IMAGES)


async def test_mock_store_gives_each_category_its_own_ids() -> None:
    store = MockMovieDataStore(list_delay=0, detail_delay=0)

    top_rated = await store.fetch_movies("/movie/top_rated")
    now_playing = await store.fetch_movies("/movie/now_playing")

    assert [movie.id for movie in top_rated] == [1001, 1002, 1003]
    assert [movie.id for movie in now_playing] == [3001, 3002, 3003]
    assert [movie.title for movie in top_rated] == [movie.title for movie in MOCK_MOVIES]
    detail = await store.fetch_movie_details(2 * MOCK_ID_STRIDE + 2)
    assert (detail.id, detail.title) == (2002, "Inception")
