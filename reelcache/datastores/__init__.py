"""Movie data stores: local cache, TMDB and canned mock data."""

from __future__ import annotations

from .base import MovieDataStore
from .local import LocalMovieDataStore
from .mock import MockMovieDataStore
from .remote import RemoteMovieDataStore

__all__ = [
    "LocalMovieDataStore",
    "MockMovieDataStore",
    "MovieDataStore",
    "RemoteMovieDataStore",
]
