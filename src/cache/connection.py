"""Redis connection and pooling management.

This module provides the RedisCache handle: an explicit open/close
lifecycle around a redis.asyncio connection pool, with a typed state so
callers can tell "never opened" from "unavailable" without touching a
nullable global.
"""

import os
from enum import Enum
from typing import Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class CacheState(str, Enum):
    """Lifecycle state of a RedisCache handle."""

    UNOPENED = "unopened"
    OPEN = "open"
    UNAVAILABLE = "unavailable"
    CLOSED = "closed"


def _redact(redis_url: str) -> str:
    """Strip credentials from a Redis URL before logging it."""
    return redis_url.split("@")[-1]


class RedisCache:
    """
    Redis cache connection handle with connection pooling.

    A handle starts UNOPENED. open() builds the pool and moves it to OPEN,
    or to UNAVAILABLE if construction fails; the process keeps running and
    the cache store degrades to a no-op. A client may be injected directly,
    which is how tests substitute a fake store.

    Attributes:
        redis_url: Connection URL (credentials are never logged)
        pool: Redis connection pool, if this handle built one
        client: Redis client instance, or None when not available
        state: Current lifecycle state

    Example:
        >>> cache = RedisCache("redis://localhost:6379/0")
        >>> cache.open()
        >>> await cache.ping()
        True
        >>> await cache.close()
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
    ) -> None:
        self.redis_url = redis_url or os.getenv("REDIS_URL", DEFAULT_REDIS_URL)
        self.pool: Optional[ConnectionPool] = None
        self.client: Optional[redis.Redis] = client
        self.state = CacheState.OPEN if client is not None else CacheState.UNOPENED

    def open(self) -> CacheState:
        """
        Initialize the Redis connection pool.

        No network round trip happens here; connections are made lazily on
        first command. Calling open() on an OPEN handle is a no-op.

        Returns:
            The resulting state (OPEN or UNAVAILABLE)
        """
        if self.state == CacheState.OPEN:
            return self.state

        try:
            self.pool = ConnectionPool.from_url(
                self.redis_url,
                max_connections=20,
                decode_responses=True,  # Auto-decode bytes to str
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )

            self.client = redis.Redis(connection_pool=self.pool)
            self.state = CacheState.OPEN

            logger.info(
                "redis_pool_initialized",
                max_connections=20,
                redis_url=_redact(self.redis_url),
            )

        except Exception as e:
            logger.error(
                "redis_pool_initialization_failed",
                redis_url=_redact(self.redis_url),
                error=str(e),
                error_type=type(e).__name__,
            )
            # Don't raise - fail open (cache unavailable but process continues)
            self.client = None
            self.pool = None
            self.state = CacheState.UNAVAILABLE

        return self.state

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is healthy, False otherwise
        """
        if not self.client:
            logger.warning("redis_ping_failed", reason="client_not_initialized", state=self.state)
            return False

        try:
            result = await self.client.ping()
            logger.debug("redis_ping_success", result=result)
            return bool(result)

        except Exception as e:
            logger.error(
                "redis_ping_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def close(self) -> None:
        """
        Close the Redis client and pool gracefully.

        Never raises. The handle ends in the CLOSED state.
        """
        try:
            if self.client:
                await self.client.aclose()
                logger.info("redis_client_closed")

            if self.pool:
                await self.pool.disconnect()
                logger.info("redis_pool_disconnected")

        except Exception as e:
            logger.error(
                "redis_close_error",
                error=str(e),
                error_type=type(e).__name__,
            )

        finally:
            self.client = None
            self.pool = None
            self.state = CacheState.CLOSED

    def is_available(self) -> bool:
        """
        Check if the Redis client is available.

        Note:
            This only checks the handle state, not whether Redis is
            reachable. Use ping() for a real health check.
        """
        return self.state == CacheState.OPEN and self.client is not None


# Process-wide handle, opened by the entry point
cache = RedisCache()
