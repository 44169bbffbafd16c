"""SQLAlchemy ORM tables backing the local caches.

Associations are plain foreign-key columns plus the ``movie_actors`` table.
No ORM relationships are declared: the stores manage the replace or merge
policy of every relation themselves.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class CacheEntryRecord(Base):
    """Flat key/value row used by the expiring key-value store."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary)


class CategoryRecord(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    endpoint: Mapped[str] = mapped_column(String(255))
    last_updated: Mapped[datetime] = mapped_column(DateTime)


class MovieRecord(Base):
    """Movie row; ``category_id`` is NULL for movies only fetched as detail."""

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(512))
    overview: Mapped[str] = mapped_column(Text, default="")
    poster_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    backdrop_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vote_average: Mapped[float] = mapped_column(Float, default=0.0)
    release_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime)
    category_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("categories.id"), nullable=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)


class ActorRecord(Base):
    __tablename__ = "actors"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255))
    character: Mapped[str] = mapped_column(String(255), default="")
    profile_path: Mapped[str | None] = mapped_column(String(255), nullable=True)


movie_actors = Table(
    "movie_actors",
    Base.metadata,
    Column("movie_id", BigInteger, ForeignKey("movies.id"), primary_key=True),
    Column("actor_id", BigInteger, ForeignKey("actors.id"), primary_key=True),
    Column("position", Integer, default=0),
)


class ImageRecord(Base):
    __tablename__ = "images"

    image_url: Mapped[str] = mapped_column(String(512), primary_key=True)
    local_path: Mapped[str] = mapped_column(String(1024), default="")
    type: Mapped[str] = mapped_column(String(16), default="backdrop")
    last_updated: Mapped[datetime] = mapped_column(DateTime)
    movie_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("movies.id"), nullable=True, index=True
    )
