"""Thin asynchronous client for The Movie Database (TMDB) REST API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import RemoteError

logger = logging.getLogger(__name__)


class TMDBClient:
    """Issues authenticated GET requests and returns decoded JSON objects."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        max_retries: int = 2,
    ):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client
        self._max_retries = max_retries

    async def get_json(
        self, endpoint: str, *, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Fetch ``endpoint`` and return its JSON object body.

        Transport errors and 5xx responses are retried with a short backoff;
        anything still failing is raised as :class:`RemoteError`.
        """

        query: dict[str, Any] = {"api_key": self._settings.tmdb_api_key}
        if params:
            query.update(params)

        attempt = 0
        while True:
            try:
                response = await self._client.get(endpoint, params=query)
            except httpx.HTTPError as exc:
                attempt += 1
                if attempt <= self._max_retries:
                    backoff = self._backoff(attempt)
                    logger.info(
                        "Transient error talking to TMDB (%s). Retrying %s in %.1fs",
                        exc.__class__.__name__,
                        endpoint,
                        backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                raise RemoteError(f"TMDB request to {endpoint} failed: {exc}") from exc

            if 500 <= response.status_code < 600 and attempt < self._max_retries:
                attempt += 1
                backoff = self._backoff(attempt)
                logger.info(
                    "TMDB %s for %s. Retrying in %.1fs",
                    response.status_code,
                    endpoint,
                    backoff,
                )
                await asyncio.sleep(backoff)
                continue
            break

        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s failed with %s", endpoint, response.status_code
            )
            raise RemoteError(
                f"TMDB request to {endpoint} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteError(f"TMDB returned invalid JSON for {endpoint}") from exc
        if not isinstance(payload, dict):
            raise RemoteError(f"TMDB returned an unexpected payload for {endpoint}")
        return payload

    @staticmethod
    def _backoff(attempt: int) -> float:
        return min(2 ** (attempt - 1), 5) + (0.1 * attempt)
