"""Explicit result type returned by every cache store operation."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.cache.exceptions import CacheError

T = TypeVar("T")


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """
    Outcome of a single cache operation.

    ``value`` is always usable: on failure it holds the operation's declared
    fallback (``None``, ``False``, ``0`` or an empty list). ``error`` carries
    the reason the fallback was used, so callers decide explicitly whether
    to discard it.

    Example:
        >>> result = await cache_manager.get_package("42")
        >>> if result.error:
        ...     logger.warning("cache_read_discarded", error=str(result.error))
        >>> payload = result.value
    """

    value: T
    error: Optional[CacheError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "CacheResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, fallback: T, error: CacheError) -> "CacheResult[T]":
        return cls(value=fallback, error=error)
