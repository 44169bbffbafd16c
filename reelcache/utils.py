"""Utility helpers for the ReelCache service."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

TTL = float | int | timedelta


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    SQLite drops timezone information, so every persisted timestamp is stored
    naive in UTC and compared against this value.
    """

    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_timedelta(ttl: TTL) -> timedelta:
    """Normalise a TTL given in seconds or as a ``timedelta``."""

    if isinstance(ttl, timedelta):
        return ttl
    return timedelta(seconds=float(ttl))


def is_stale(saved_at: datetime | None, ttl: TTL, *, now: datetime) -> bool:
    """Return True when ``saved_at`` is missing or older than ``ttl``."""

    if saved_at is None:
        return True
    if saved_at.tzinfo is not None:
        saved_at = saved_at.astimezone(timezone.utc).replace(tzinfo=None)
    return now - saved_at > as_timedelta(ttl)


def url_digest(url: str) -> str:
    """Return the stable file name stem used to address a cached URL."""

    return hashlib.md5(url.encode("utf-8")).hexdigest()
