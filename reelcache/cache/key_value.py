"""Expiring key/value cache persisted in the ``cache_entries`` table."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import CacheEntryRecord
from ..errors import DecodingError, EncodingError
from ..utils import TTL, is_stale, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKey:
    """Key layout shared by every flat cache entry."""

    PREFIX = "cache."
    VERSION = "cache.version"

    @staticmethod
    def category(category_id: str) -> str:
        return f"cache.category.{category_id}"

    @staticmethod
    def movie_details(movie_id: int) -> str:
        return f"cache.movie.{movie_id}"

    @staticmethod
    def timestamp(key: str) -> str:
        return f"{key}.timestamp"


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


class ExpiringKeyValueStore:
    """Serialised blobs keyed by string, each paired with a save timestamp."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        version: str = "1.0",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._version = version
        self._clock = clock
        self._write_lock = asyncio.Lock()

    @property
    def version(self) -> str:
        return self._version

    async def initialize(self) -> None:
        """Wipe the cache when the stored schema version differs."""

        stored = await self._read(CacheKey.VERSION)
        stored_version: str | None = None
        if stored is not None:
            try:
                stored_version = _adapter(str).validate_json(stored)
            except ValidationError:
                stored_version = None
        if stored_version == self._version:
            return
        logger.info(
            "Cache version changed from %s to %s; clearing cached entries",
            stored_version,
            self._version,
        )
        await self.clear_all()
        async with self._write_lock:
            async with self._session_factory() as session:
                await self._put(session, CacheKey.VERSION, to_json(self._version))
                await session.commit()

    async def save(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` and stamp it with the current time."""

        try:
            payload = to_json(value)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise EncodingError(key) from exc
        stamp = to_json(self._clock())

        async with self._write_lock:
            async with self._session_factory() as session:
                await self._put(session, key, payload)
                await self._put(session, CacheKey.timestamp(key), stamp)
                await session.commit()

    async def load(self, key: str, type_: type[T]) -> T | None:
        """Return the decoded value or ``None``; corrupted entries are dropped."""

        raw = await self._read(key)
        if raw is None:
            return None
        try:
            return self._decode(key, raw, type_)
        except DecodingError:
            logger.warning("Discarding corrupted cache entry %s", key)
            await self._discard(key, raw)
            return None

    async def remove(self, key: str) -> None:
        async with self._write_lock:
            async with self._session_factory() as session:
                await session.execute(
                    delete(CacheEntryRecord).where(
                        CacheEntryRecord.key.in_([key, CacheKey.timestamp(key)])
                    )
                )
                await session.commit()

    async def is_expired(self, key: str, ttl: TTL) -> bool:
        raw = await self._read(CacheKey.timestamp(key))
        if raw is None:
            return True
        try:
            saved_at = self._decode(key, raw, datetime)
        except DecodingError:
            return True
        return is_stale(saved_at, ttl, now=self._clock())

    async def clear_all(self) -> None:
        """Delete every entry under the cache key prefix."""

        async with self._write_lock:
            async with self._session_factory() as session:
                await session.execute(
                    delete(CacheEntryRecord).where(
                        CacheEntryRecord.key.startswith(CacheKey.PREFIX, autoescape=True)
                    )
                )
                await session.commit()

    async def contains(self, key: str) -> bool:
        return await self._read(key) is not None

    @staticmethod
    def _decode(key: str, raw: bytes, type_: Any) -> Any:
        try:
            return _adapter(type_).validate_json(raw)
        except ValidationError as exc:
            raise DecodingError(key) from exc

    async def _discard(self, key: str, raw: bytes) -> None:
        """Delete ``key`` only while it still holds the corrupt ``raw`` bytes."""

        async with self._write_lock:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(CacheEntryRecord).where(
                        CacheEntryRecord.key == key, CacheEntryRecord.value == raw
                    )
                )
                if result.rowcount:
                    await session.execute(
                        delete(CacheEntryRecord).where(
                            CacheEntryRecord.key == CacheKey.timestamp(key)
                        )
                    )
                await session.commit()

    async def _read(self, key: str) -> bytes | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CacheEntryRecord.value).where(CacheEntryRecord.key == key)
            )
            return result.scalar_one_or_none()

    @staticmethod
    async def _put(session: AsyncSession, key: str, value: bytes) -> None:
        record = await session.get(CacheEntryRecord, key)
        if record is None:
            session.add(CacheEntryRecord(key=key, value=value))
        else:
            record.value = value
