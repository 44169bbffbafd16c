"""Content-addressed on-disk cache for poster, backdrop and profile images."""

from __future__ import annotations

import asyncio
import logging
import shutil
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from pydantic import TypeAdapter, ValidationError

from ..config import DEFAULT_CACHE_TTL_SECONDS
from ..utils import TTL, as_timedelta, url_digest, utcnow

logger = logging.getLogger(__name__)

_METADATA_ADAPTER: TypeAdapter[dict[str, datetime]] = TypeAdapter(dict[str, datetime])


class AssetType(str, Enum):
    POSTER = "poster"
    BACKDROP = "backdrop"
    PROFILE = "profile"

    @property
    def directory(self) -> str:
        return f"{self.value}s"


# Lookup order when the asset type of a URL is unknown.
PROBE_ORDER: tuple[AssetType, ...] = (
    AssetType.POSTER,
    AssetType.BACKDROP,
    AssetType.PROFILE,
)


class ImageCache:
    """JPEG files under ``<root>/ImageCache/<type>s/<md5(url)>.jpg``.

    Save times live in a ``url -> datetime`` map persisted next to the
    directory tree, so ``clear_all`` can drop the tree without losing the
    metadata file location.
    """

    def __init__(self, root: Path | str, *, clock: Callable[[], datetime] = utcnow):
        root_path = Path(root)
        self._directory = root_path / "ImageCache"
        self._metadata_path = root_path / "ImageCache.metadata.json"
        self._clock = clock
        self._metadata: dict[str, datetime] = {}
        self._lock = asyncio.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    async def initialize(self) -> None:
        await asyncio.to_thread(self._create_directory_structure)
        self._metadata = await asyncio.to_thread(self._read_metadata)

    def path_for(self, url: str, asset_type: AssetType) -> Path:
        return self._directory / asset_type.directory / f"{url_digest(url)}.jpg"

    async def save(self, data: bytes, url: str, asset_type: AssetType) -> bool:
        """Write ``data`` for ``url``; returns False instead of raising on I/O errors."""

        path = self.path_for(url, asset_type)
        async with self._lock:
            try:
                await asyncio.to_thread(self._write_file, path, data)
            except OSError as exc:
                logger.warning("Failed to cache image %s: %s", url, exc)
                return False
            updated = {**self._metadata, url: self._clock()}
            try:
                await asyncio.to_thread(self._write_metadata, updated)
            except OSError as exc:
                logger.warning("Failed to persist image cache metadata: %s", exc)
                return False
            self._metadata = updated
        return True

    async def load(self, url: str) -> bytes | None:
        for asset_type in PROBE_ORDER:
            path = self.path_for(url, asset_type)
            try:
                return await asyncio.to_thread(path.read_bytes)
            except OSError:
                continue
        return None

    def is_expired(self, url: str, ttl: TTL) -> bool:
        saved_at = self._metadata.get(url)
        if saved_at is None:
            return True
        return self._clock() - saved_at > as_timedelta(ttl)

    async def clear_expired(self, ttl: TTL = DEFAULT_CACHE_TTL_SECONDS) -> list[str]:
        """Delete every file older than ``ttl`` and persist the map once."""

        async with self._lock:
            expired = [url for url in self._metadata if self.is_expired(url, ttl)]
            if not expired:
                return []
            await asyncio.to_thread(self._remove_files, expired)
            for url in expired:
                self._metadata.pop(url, None)
            try:
                await asyncio.to_thread(self._write_metadata, dict(self._metadata))
            except OSError as exc:
                logger.warning("Failed to persist image cache metadata: %s", exc)
        logger.info("Removed %s expired cached images", len(expired))
        return expired

    async def clear_all(self) -> None:
        async with self._lock:
            await asyncio.to_thread(shutil.rmtree, self._directory, True)
            self._metadata.clear()
            try:
                await asyncio.to_thread(self._write_metadata, {})
            except OSError as exc:
                logger.warning("Failed to persist image cache metadata: %s", exc)
            await asyncio.to_thread(self._create_directory_structure)

    def _create_directory_structure(self) -> None:
        for asset_type in AssetType:
            (self._directory / asset_type.directory).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _remove_files(self, urls: Iterable[str]) -> None:
        for url in urls:
            for asset_type in AssetType:
                self.path_for(url, asset_type).unlink(missing_ok=True)

    def _read_metadata(self) -> dict[str, datetime]:
        try:
            raw = self._metadata_path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            return _METADATA_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable image cache metadata at %s", self._metadata_path)
            return {}

    def _write_metadata(self, metadata: dict[str, datetime]) -> None:
        self._metadata_path.parent.mkdir(parents=True, exist_ok=True)
        self._metadata_path.write_bytes(_METADATA_ADAPTER.dump_json(metadata))
