from reelcache.models import ActorDTO, Category, MovieDTO, build_image_url


def test_movie_dto_tolerates_tmdb_nulls():
    dto = MovieDTO.model_validate(
        {"id": 27205, "title": "Inception", "overview": None, "genre_ids": [28]}
    )

    movie = dto.to_domain(images=["/b.jpg"])

    assert movie.overview == ""
    assert movie.release_date == ""
    assert movie.vote_average == 0.0
    assert movie.images == ["/b.jpg"]
    assert movie.cast == []


def test_domain_movie_builds_image_urls():
    movie = MovieDTO(
        id=1,
        title="Heat",
        poster_path="/p.jpg",
        backdrop_path="https://cdn.example.com/b.jpg",
    ).to_domain()

    dumped = movie.model_dump(mode="json")
    assert dumped["poster_url"] == "https://image.tmdb.org/t/p/w500/p.jpg"
    assert dumped["backdrop_url"] == "https://cdn.example.com/b.jpg"


def test_actor_profile_url():
    actor = ActorDTO(id=3, name="Val Kilmer", character=None).to_domain()

    assert actor.character == ""
    assert actor.profile_url is None
    assert build_image_url("/v.jpg", "https://img") == "https://img/v.jpg"


def test_category_is_empty():
    assert Category(id="upcoming", name="Upcoming").is_empty() is True
