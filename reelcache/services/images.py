"""Fetch-through access to TMDB artwork backed by the on-disk image cache."""

from __future__ import annotations

import logging

import httpx

from ..cache.images import AssetType, ImageCache
from ..errors import RemoteError
from ..models import BACKDROP_BASE_URL, POSTER_BASE_URL, PROFILE_BASE_URL, build_image_url
from ..utils import TTL

logger = logging.getLogger(__name__)

_BASE_URLS: dict[AssetType, str] = {
    AssetType.POSTER: POSTER_BASE_URL,
    AssetType.BACKDROP: BACKDROP_BASE_URL,
    AssetType.PROFILE: PROFILE_BASE_URL,
}


class ImageService:
    """Serve images from the cache, downloading them when missing or stale."""

    def __init__(self, cache: ImageCache, http_client: httpx.AsyncClient, *, ttl: TTL):
        self._cache = cache
        self._client = http_client
        self._ttl = ttl

    @staticmethod
    def resolve_url(url_or_path: str, asset_type: AssetType) -> str:
        """Expand a bare TMDB file path into a full image URL."""

        resolved = build_image_url(url_or_path.strip(), _BASE_URLS[asset_type])
        if not resolved:
            raise ValueError("An image URL or path is required")
        return resolved

    async def fetch(self, url_or_path: str, asset_type: AssetType) -> bytes:
        url = self.resolve_url(url_or_path, asset_type)
        if not self._cache.is_expired(url, self._ttl):
            cached = await self._cache.load(url)
            if cached is not None:
                return cached

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            stale = await self._cache.load(url)
            if stale is not None:
                logger.info("Serving stale cached image for %s after error: %s", url, exc)
                return stale
            raise RemoteError(f"Image download failed for {url}: {exc}") from exc

        data = response.content
        if not await self._cache.save(data, url, asset_type):
            logger.warning("Downloaded image %s could not be cached", url)
        return data
