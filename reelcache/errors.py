"""Exception hierarchy shared by the cache and data layers."""

from __future__ import annotations


class ReelCacheError(Exception):
    """Base exception for ReelCache."""

    def __init__(self, message: str, code: str = "REELCACHE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        return {"error": True, "code": self.code, "message": self.message}


class CacheError(ReelCacheError):
    """Local cache failures. These never reach end users."""

    def __init__(self, message: str, code: str = "CACHE_ERROR"):
        super().__init__(message, code=code)


class CacheMiss(CacheError):
    """The requested key is absent from the cache."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cached data not found for {key}", code="CACHE_MISS")


class NotFound(CacheMiss):
    """A local data store has no row for the requested entity."""


class CacheExpired(CacheError):
    """The entry is present but older than the allowed TTL."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cached data has expired for {key}", code="CACHE_EXPIRED")


class EncodingError(CacheError):
    """A value could not be serialised for caching."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Failed to encode data for {key}", code="ENCODING_FAILED")


class DecodingError(CacheError):
    """A cached payload could not be deserialised."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Failed to decode cached data for {key}", code="DECODING_FAILED")


class RemoteError(ReelCacheError):
    """Transport, status or decoding failure from the remote movie API."""

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, code="REMOTE_ERROR")

    @classmethod
    def wrap(cls, exc: BaseException) -> "RemoteError":
        """Return ``exc`` unchanged if it already is a remote error."""

        if isinstance(exc, RemoteError):
            return exc
        return cls(str(exc) or exc.__class__.__name__)
