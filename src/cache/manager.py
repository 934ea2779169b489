"""Cache manager for catalog entities with fail-open error handling.

This module provides the CacheManager class: typed get/set/invalidate
operations for package entities over Redis. Every backend call goes through
safe_operation(), so an unavailable or failing Redis surfaces as a
CacheResult carrying the fallback value, never as an exception.
"""

import json
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import redis.asyncio as redis
import structlog

from src.cache.connection import RedisCache, cache
from src.cache.exceptions import CacheError, CacheUnavailableError, DecodeCorruptionError
from src.cache.keys import CacheKeyGenerator
from src.cache.result import CacheResult
from src.cache.ttl import CacheTTL, EntityKind

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CacheManager:
    """
    Per-entity cache store for catalog data.

    Key shapes and TTLs:

        package:{id}              PACKAGE           1h
        package:{id}:details      PACKAGE_DETAILS   1h
        package:{id}:reviews      PACKAGE_REVIEWS   30m
        package:{id}:agency       PACKAGE_AGENCY    1h
        package:{id}:similar      SIMILAR_PACKAGES  1h
        packages:list:{filters}   PACKAGE_LIST      15m

    Attributes:
        connection: RedisCache handle the manager reads its client from
    """

    def __init__(self, connection: Optional[RedisCache] = None) -> None:
        self.connection = connection if connection is not None else cache

    @property
    def client(self) -> Optional[redis.Redis]:
        """Current Redis client, or None when the handle is not available."""
        if not self.connection.is_available():
            return None
        return self.connection.client

    async def safe_operation(
        self,
        operation: Callable[[redis.Redis], Awaitable[T]],
        fallback: T,
        name: str,
        key: Optional[str] = None,
    ) -> CacheResult[T]:
        """
        Run one backend call, absorbing any failure.

        Args:
            operation: Coroutine function taking the Redis client
            fallback: Value to return when Redis is unavailable or fails
            name: Operation name for logging
            key: Cache key involved, for logging

        Returns:
            CacheResult with the operation's value, or the fallback and a
            CacheUnavailableError. Never raises.
        """
        client = self.client

        if client is None:
            logger.debug(
                "cache_operation_skipped",
                operation=name,
                reason="redis_not_available",
                state=self.connection.state,
                key=key,
            )
            return CacheResult.failure(
                fallback, CacheUnavailableError("Redis client not available", key=key)
            )

        try:
            return CacheResult.success(await operation(client))

        except Exception as e:
            logger.error(
                "cache_operation_failed",
                operation=name,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            # Fail open - caller sees the fallback
            return CacheResult.failure(
                fallback,
                CacheUnavailableError(f"Redis {name} failed: {e}", key=key, cause=e),
            )

    async def _get_json(self, key: str) -> CacheResult[Optional[Any]]:
        result = await self.safe_operation(lambda client: client.get(key), None, "get", key)

        if not result.ok:
            return result

        if result.value is None:
            logger.debug("cache_miss", key=key)
            return result

        try:
            value = json.loads(result.value)

        except (TypeError, ValueError) as e:
            logger.error("cache_get_json_decode_error", key=key, error=str(e))
            # Corrupt entry counts as a miss
            return CacheResult.failure(
                None, DecodeCorruptionError(f"Invalid JSON in cache entry: {e}", key=key)
            )

        logger.debug("cache_hit", key=key)
        return CacheResult.success(value)

    async def _set_json(self, key: str, data: Any, kind: EntityKind) -> CacheResult[bool]:
        ttl = CacheTTL.get_ttl(kind)

        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.error(
                "cache_set_serialization_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CacheResult.failure(False, CacheError(f"Cannot serialize value: {e}", key=key))

        async def write(client: redis.Redis) -> bool:
            # Value and expiry in one SET ... EX call
            await client.set(key, payload, ex=ttl)
            return True

        result = await self.safe_operation(write, False, "set", key)

        if result.ok:
            logger.debug("cache_set", key=key, ttl=ttl, data_size=len(payload))

        return result

    async def set_package(self, package_id: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(CacheKeyGenerator.package(package_id), data, EntityKind.PACKAGE)

    async def get_package(self, package_id: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.package(package_id))

    async def set_package_details(self, package_id: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(
            CacheKeyGenerator.package_details(package_id), data, EntityKind.PACKAGE_DETAILS
        )

    async def get_package_details(self, package_id: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.package_details(package_id))

    async def set_package_reviews(self, package_id: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(
            CacheKeyGenerator.package_reviews(package_id), data, EntityKind.PACKAGE_REVIEWS
        )

    async def get_package_reviews(self, package_id: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.package_reviews(package_id))

    async def set_package_agency(self, package_id: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(
            CacheKeyGenerator.package_agency(package_id), data, EntityKind.PACKAGE_AGENCY
        )

    async def get_package_agency(self, package_id: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.package_agency(package_id))

    async def set_similar_packages(self, package_id: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(
            CacheKeyGenerator.similar_packages(package_id), data, EntityKind.SIMILAR_PACKAGES
        )

    async def get_similar_packages(self, package_id: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.similar_packages(package_id))

    async def set_package_list(self, filter_string: str, data: Any) -> CacheResult[bool]:
        return await self._set_json(
            CacheKeyGenerator.package_list(filter_string), data, EntityKind.PACKAGE_LIST
        )

    async def get_package_list(self, filter_string: str) -> CacheResult[Optional[Any]]:
        return await self._get_json(CacheKeyGenerator.package_list(filter_string))

    async def invalidate_package(self, package_id: str) -> CacheResult[int]:
        """
        Delete every cached entry for one package in a single DEL.

        Args:
            package_id: Package identifier

        Returns:
            CacheResult with the number of keys removed (fallback 0)
        """
        keys = CacheKeyGenerator.all_package_keys(package_id)

        result = await self.safe_operation(
            lambda client: client.delete(*keys), 0, "invalidate_package", keys[0]
        )

        if result.ok:
            logger.info("cache_package_invalidated", package_id=package_id, deleted=result.value)

        return result

    async def invalidate_package_list(self) -> CacheResult[int]:
        """
        Delete every listing entry (``packages:list:*``).

        Keys are enumerated first; no DEL is issued when nothing matches.

        Returns:
            CacheResult with the number of keys removed (fallback 0)
        """

        async def delete_listings(client: redis.Redis) -> int:
            keys: List[str] = await client.keys(CacheKeyGenerator.LIST_PATTERN)
            if not keys:
                return 0
            return await client.delete(*keys)

        result = await self.safe_operation(
            delete_listings, 0, "invalidate_package_list", CacheKeyGenerator.LIST_PATTERN
        )

        if result.ok:
            logger.info("cache_package_list_invalidated", deleted=result.value)

        return result


# Global cache manager instance bound to the process-wide handle
cache_manager = CacheManager()
