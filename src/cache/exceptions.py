"""
Error kinds for the cache layer.

None of these ever reach callers of the catalog service. The store returns
them inside a CacheResult and the codec raises them only from
decode_strict(); the service logs them and treats the read as a miss.
"""

from typing import Optional


class CacheError(Exception):
    """
    Base exception for all cache layer errors.

    Attributes:
        message: Error description
        key: Cache key involved, if any
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        self.message = message
        self.key = key
        super().__init__(self.message)


class CacheUnavailableError(CacheError):
    """
    Raised when the Redis backend is unreachable or a command fails.

    This covers both a handle that never opened (no REDIS_URL, bad URL)
    and transient connection errors during normal operation.

    Example:
        >>> CacheUnavailableError("redis not connected", key="package:42")
    """

    def __init__(
        self,
        message: str = "Cache backend unavailable",
        key: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, key=key)


class DecodeCorruptionError(CacheError):
    """Raised when a stored payload cannot be decompressed or parsed."""

    pass


class SchemaMismatchError(CacheError):
    """
    Raised when a decoded cache envelope does not describe what was asked for.

    The payload itself is intact; it was written by a different schema
    version, for a different entity kind, or for a different request
    variant (e.g. another review page).
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(message, key=key)
