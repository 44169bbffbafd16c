from datetime import datetime, timedelta, timezone

from reelcache.categories import category_id_from_endpoint, definition_for
from reelcache.utils import as_timedelta, is_stale, url_digest


def test_is_stale_boundaries():
    saved = datetime(2024, 5, 1, 8, 0, 0)
    assert is_stale(None, 10, now=saved) is True
    assert is_stale(saved, 10, now=saved + timedelta(seconds=10)) is False
    assert is_stale(saved, 10, now=saved + timedelta(seconds=11)) is True


def test_is_stale_normalises_aware_timestamps():
    saved = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert is_stale(saved, 60, now=datetime(2024, 5, 1, 8, 0, 30)) is False


def test_as_timedelta_accepts_seconds():
    assert as_timedelta(90) == timedelta(minutes=1, seconds=30)
    assert as_timedelta(timedelta(days=1)) == timedelta(days=1)


def test_url_digest_is_stable_md5():
    assert url_digest("https://example.com/a.jpg") == url_digest("https://example.com/a.jpg")
    assert len(url_digest("x")) == 32
    assert url_digest("") == "d41d8cd98f00b204e9800998ecf8427e"


def test_category_helpers():
    assert category_id_from_endpoint("/movie/top_rated") == "top_rated"
    assert category_id_from_endpoint("/movie/popular/") == "popular"
    assert definition_for("now_playing").name == "Now Playing"
    assert definition_for("trending_now").endpoint == "/movie/trending_now"
    assert definition_for("trending_now").name == "Trending Now"
